"""Multithreaded processor implementation - uses thread pool for parallelism."""

from typing import List, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed

from ..core.models import VariantSpec
from .common import VariantOutcome, VariantTask, failed_outcome, order_by_catalog


def process_variants(
    catalog: Sequence[VariantSpec], task: VariantTask, max_workers: int = 4
) -> List[VariantOutcome]:
    """
    Run the variant task for each spec on a bounded thread pool.

    Args:
        catalog: Variant specifications to produce
        task: Callable encoding and uploading one variant
        max_workers: Upper bound on concurrent variant tasks

    Returns:
        One outcome per spec, in catalog order
    """
    if not catalog:
        return []

    outcomes: List[VariantOutcome] = []
    pool_size = max(1, min(max_workers, len(catalog)))

    with ThreadPoolExecutor(max_workers=pool_size, thread_name_prefix="variant") as executor:
        future_to_spec = {executor.submit(task, spec): spec for spec in catalog}

        # Collect results as they complete
        for future in as_completed(future_to_spec):
            try:
                outcomes.append(future.result())
            except Exception as e:  # noqa: BLE001
                outcomes.append(failed_outcome(future_to_spec[future], e))

    return order_by_catalog(outcomes, catalog)
