"""Image and key utilities for the hero image pipeline."""

import io
import logging
from typing import Any, Dict, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from .exceptions import DecodeError, InvalidImageKeyError
from .formats import FormatInfo, extension_for
from .models import VariantSpec

logger = logging.getLogger(__name__)

TENANT_PREFIX = "tenant-"

# Fixed so output is reproducible for a given Pillow build
RESAMPLING_FILTER = Image.Resampling.LANCZOS


def parse_image_key(image_key: str) -> Tuple[str, str]:
    """
    Split a source image key into tenant and image identifiers.

    Args:
        image_key: Key of the form ``tenant-{tenantId}/{imageId}``

    Returns:
        Tuple of (tenant_id, image_id)

    Raises:
        InvalidImageKeyError: If the key does not have exactly that shape
    """
    parts = image_key.split("/")
    if len(parts) != 2:
        raise InvalidImageKeyError(
            f"Invalid image key format: {image_key!r}. "
            "Expected 'tenant-{tenantId}/{imageId}'"
        )

    tenant_part, image_id = parts
    if not tenant_part.startswith(TENANT_PREFIX):
        raise InvalidImageKeyError(
            f"Invalid tenant part format: {tenant_part!r}. Expected 'tenant-{{id}}'"
        )

    tenant_id = tenant_part[len(TENANT_PREFIX) :]
    if not tenant_id:
        raise InvalidImageKeyError(f"Missing tenant id in image key: {image_key!r}")
    if not image_id:
        raise InvalidImageKeyError(f"Missing image id in image key: {image_key!r}")

    return tenant_id, image_id


def calculate_variant_key(image_key: str, spec: VariantSpec) -> str:
    """
    Calculate the storage key of a variant.

    The key depends only on the source key and the spec, so re-processing
    the same image overwrites the same objects.

    Args:
        image_key: Source image key
        spec: Variant specification

    Returns:
        ``{imageKey}-{width}w-{format}-q{quality}-{version}.{extension}``
    """
    extension = extension_for(spec.format)
    return (
        f"{image_key}-{spec.width}w-{spec.format}-q{spec.quality}"
        f"-{spec.version}.{extension}"
    )


def decode_image(image_bytes: bytes) -> Image.Image:
    """
    Decode raw bytes into a fully loaded PIL image.

    Raises:
        DecodeError: If the bytes are not a recognizable image
    """
    try:
        image = Image.open(io.BytesIO(image_bytes))
        image.load()
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        SyntaxError,
        ValueError,
    ) as exc:
        raise DecodeError(f"Unable to decode source image: {exc}") from exc
    return image


def prepare_image(image: Image.Image, fmt: FormatInfo) -> Image.Image:
    """
    Apply EXIF orientation and normalize the pixel mode for the target codec.

    Metadata (EXIF, ICC profile) is dropped from the returned image. An EXIF
    block that cannot be parsed leaves the pixels in stored orientation.
    """
    try:
        prepared = ImageOps.exif_transpose(image)
    except (SyntaxError, ValueError, OSError) as exc:
        logger.warning(f"Ignoring unreadable EXIF orientation: {exc}")
        prepared = image.copy()

    has_alpha = prepared.mode in ("RGBA", "LA") or (
        prepared.mode == "P" and "transparency" in prepared.info
    )
    if has_alpha and fmt.supports_alpha:
        if prepared.mode != "RGBA":
            prepared = prepared.convert("RGBA")
    elif prepared.mode != "RGB":
        prepared = prepared.convert("RGB")

    prepared.info = {}
    return prepared


def resize_to_width(image: Image.Image, width: int) -> Image.Image:
    """Scale an image to ``width`` pixels wide, preserving aspect ratio."""
    height = max(1, round(image.height * width / image.width))
    if (width, height) == image.size:
        return image.copy()
    return image.resize((width, height), RESAMPLING_FILTER)


def save_kwargs_for(fmt: FormatInfo, quality: int) -> Dict[str, Any]:
    """Encoder options passed to ``Image.save`` for a format."""
    options: Dict[str, Any] = {"quality": quality}
    if fmt.name == "jpeg":
        options["optimize"] = True
    elif fmt.name == "webp":
        options["method"] = 4
    return options


def encode_image(image: Image.Image, fmt: FormatInfo, quality: int) -> bytes:
    """Encode an image with the given codec and quality."""
    output_stream = io.BytesIO()
    image.save(output_stream, format=fmt.pillow_format, **save_kwargs_for(fmt, quality))
    return output_stream.getvalue()
