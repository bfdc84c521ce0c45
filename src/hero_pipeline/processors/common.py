"""Common types shared across the variant processor implementations."""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from ..core.exceptions import describe_error
from ..core.models import VariantRecord, VariantSpec


@dataclass
class VariantOutcome:
    """Result of producing a single catalog variant."""

    spec: VariantSpec
    record: Optional[VariantRecord] = None
    error: str = ""
    duration: float = 0.0

    @property
    def success(self) -> bool:
        return self.record is not None

    @property
    def label(self) -> str:
        return self.spec.label


# Encodes and uploads one variant; must not raise for per-variant failures
VariantTask = Callable[[VariantSpec], VariantOutcome]


def failed_outcome(spec: VariantSpec, exc: BaseException) -> VariantOutcome:
    """Build the outcome for a variant whose task raised unexpectedly."""
    return VariantOutcome(spec=spec, error=describe_error(exc))


def count_outcomes(outcomes: Sequence[VariantOutcome]) -> Tuple[int, int]:
    """
    Count successful and failed outcomes.

    Returns:
        Tuple of (success_count, failure_count)
    """
    success_count = sum(1 for outcome in outcomes if outcome.success)
    return success_count, len(outcomes) - success_count


def order_by_catalog(
    outcomes: List[VariantOutcome], catalog: Sequence[VariantSpec]
) -> List[VariantOutcome]:
    """Sort outcomes into catalog order."""
    position = {spec.label: index for index, spec in enumerate(catalog)}
    return sorted(outcomes, key=lambda outcome: position[outcome.label])
