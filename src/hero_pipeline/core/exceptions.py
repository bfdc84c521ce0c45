"""Exception hierarchy for the hero image pipeline.

Errors fall into two tiers. ``FatalProcessingError`` subclasses abort the
invocation and are re-raised to the event substrate so its retry and
dead-letter policy applies. ``VariantProcessingError`` subclasses (and
``StorageError`` raised while uploading) only ever fail a single variant and
are recorded in the processing result.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator


class HeroPipelineError(Exception):
    """Base exception for all hero pipeline errors."""


class FatalProcessingError(HeroPipelineError):
    """An error that aborts the whole invocation."""


class ConfigurationError(FatalProcessingError):
    """Required configuration is missing or invalid."""


class InvalidEventError(FatalProcessingError):
    """The inbound notification does not have the expected shape."""


class InvalidImageKeyError(FatalProcessingError):
    """The source image key is not of the form ``tenant-{tenantId}/{imageId}``."""


class SourceFetchError(FatalProcessingError):
    """The source image could not be fetched from storage."""


class NoVariantsProcessedError(FatalProcessingError):
    """Every variant in the catalog failed and the policy says to raise."""

    def __init__(self, message: str, result: Any = None):
        super().__init__(message)
        self.result = result


class StorageError(HeroPipelineError):
    """Error raised for object storage failures."""


class NotFoundError(StorageError):
    """The requested object does not exist."""


class VariantProcessingError(HeroPipelineError):
    """Base class for errors producing a single variant."""


class DecodeError(VariantProcessingError):
    """The input bytes are not a recognizable image."""


class UnsupportedFormatError(VariantProcessingError):
    """The requested output format is not in the supported set."""


class EncodeError(VariantProcessingError):
    """Resizing or compressing the image failed."""


def describe_error(exc: BaseException) -> str:
    """Render an exception as ``"{TypeName}: {message}"`` for result reporting."""
    message = str(exc)
    if not message:
        return type(exc).__name__
    return f"{type(exc).__name__}: {message}"


@contextmanager
def variant_error_boundary() -> Iterator[None]:
    """Translate unexpected errors raised while producing a variant."""
    try:
        yield
    except HeroPipelineError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise EncodeError(str(exc)) from exc
