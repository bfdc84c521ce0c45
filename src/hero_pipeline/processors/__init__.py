"""Variant processors with different concurrency strategies."""

from typing import List, Sequence

from ..core.models import VariantSpec
from .common import VariantOutcome, VariantTask, count_outcomes
from .serial import process_variants as serial_process_variants
from .multithread import process_variants as multithread_process_variants


def process_variants(
    catalog: Sequence[VariantSpec], task: VariantTask, max_workers: int = 1
) -> List[VariantOutcome]:
    """Run serially for a single worker, otherwise on a thread pool."""
    if max_workers <= 1 or len(catalog) <= 1:
        return serial_process_variants(catalog, task)
    return multithread_process_variants(catalog, task, max_workers)


__all__ = [
    "VariantOutcome",
    "VariantTask",
    "count_outcomes",
    "process_variants",
    "serial_process_variants",
    "multithread_process_variants",
]
