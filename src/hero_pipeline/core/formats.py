"""Output format table.

Every format-dependent decision (content type, file extension, Pillow codec,
default quality) is looked up here. Supporting a new format means adding a
row to ``FORMATS``.
"""

from dataclasses import dataclass
from typing import Dict, Optional


DEFAULT_VERSION = "v1"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class FormatInfo:
    """Static properties of an output format."""

    name: str
    content_type: str
    extension: str
    pillow_format: str
    default_quality: int
    supports_alpha: bool = True


FORMATS: Dict[str, FormatInfo] = {
    "avif": FormatInfo(
        name="avif",
        content_type="image/avif",
        extension="avif",
        pillow_format="AVIF",
        default_quality=50,
    ),
    "webp": FormatInfo(
        name="webp",
        content_type="image/webp",
        extension="webp",
        pillow_format="WEBP",
        default_quality=75,
    ),
    "jpeg": FormatInfo(
        name="jpeg",
        content_type="image/jpeg",
        extension="jpg",
        pillow_format="JPEG",
        default_quality=80,
        supports_alpha=False,
    ),
}


def get_format(name: str) -> Optional[FormatInfo]:
    return FORMATS.get(name)


def is_supported(name: str) -> bool:
    return name in FORMATS


def content_type_for(name: str) -> str:
    """Content type for a format; unknown formats are generic binary."""
    info = FORMATS.get(name)
    return info.content_type if info else DEFAULT_CONTENT_TYPE


def extension_for(name: str) -> str:
    """File extension for a format; unknown formats use their own name."""
    info = FORMATS.get(name)
    return info.extension if info else name


def default_quality_for(name: str) -> int:
    """
    Default encoder quality for a format.

    Raises:
        KeyError: If the format is not in the table
    """
    return FORMATS[name].default_quality
