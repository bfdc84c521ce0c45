"""Serial processor implementation - produces variants one by one."""

from typing import List, Sequence

from ..core.models import VariantSpec
from .common import VariantOutcome, VariantTask, failed_outcome


def process_variants(
    catalog: Sequence[VariantSpec], task: VariantTask
) -> List[VariantOutcome]:
    """
    Run the variant task for each spec serially, in the current thread.

    Args:
        catalog: Variant specifications to produce
        task: Callable encoding and uploading one variant

    Returns:
        One outcome per spec, in catalog order
    """
    outcomes = []

    for spec in catalog:
        try:
            outcomes.append(task(spec))
        except Exception as e:  # noqa: BLE001
            outcomes.append(failed_outcome(spec, e))

    return outcomes
