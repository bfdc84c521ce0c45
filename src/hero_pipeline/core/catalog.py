"""The static variant catalog applied to every hero image."""

from typing import Iterable, List, Sequence, Tuple

from .formats import DEFAULT_VERSION
from .models import VariantSpec

# Small, medium and large hero renditions
VARIANT_WIDTHS: Tuple[int, ...] = (640, 1280, 1920)

# Preferred first; clients negotiate via <picture>/Accept
VARIANT_FORMATS: Tuple[str, ...] = ("avif", "webp", "jpeg")


def build_catalog(
    widths: Iterable[int] = VARIANT_WIDTHS,
    formats: Iterable[str] = VARIANT_FORMATS,
    version: str = DEFAULT_VERSION,
) -> List[VariantSpec]:
    """
    Build the cross product of widths and formats at default qualities.

    Args:
        widths: Target widths in pixels
        formats: Output format names
        version: Version tag stamped into every key

    Returns:
        Catalog ordered by width, then format
    """
    format_list = list(formats)
    return [
        VariantSpec.for_format(width, fmt, version=version)
        for width in widths
        for fmt in format_list
    ]


def catalog_from_tuples(entries: Iterable[Tuple[int, str, int]]) -> List[VariantSpec]:
    """Build a catalog from ``(width, format, quality)`` tuples."""
    return [
        VariantSpec(width=width, format=fmt, quality=quality)
        for width, fmt, quality in entries
    ]


def catalog_labels(catalog: Sequence[VariantSpec]) -> List[str]:
    return [spec.label for spec in catalog]


DEFAULT_CATALOG: Tuple[VariantSpec, ...] = tuple(build_catalog())
