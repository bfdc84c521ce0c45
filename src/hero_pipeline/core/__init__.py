"""Core models, utilities and errors for the hero image pipeline."""

from .catalog import DEFAULT_CATALOG, build_catalog, catalog_from_tuples
from .config import ProcessingSettings, StorageSettings
from .image_utils import calculate_variant_key, parse_image_key
from .logging_config import get_logger, setup_logger
from .exceptions import (
    HeroPipelineError,
    FatalProcessingError,
    ConfigurationError,
    InvalidEventError,
    InvalidImageKeyError,
    SourceFetchError,
    NoVariantsProcessedError,
    StorageError,
    NotFoundError,
    VariantProcessingError,
    DecodeError,
    UnsupportedFormatError,
    EncodeError,
)
from .models import (
    EncodedVariant,
    HeroImageEvent,
    ProcessingResult,
    SourceImageRef,
    VariantRecord,
    VariantSpec,
)

__all__ = [
    "DEFAULT_CATALOG",
    "build_catalog",
    "catalog_from_tuples",
    "ProcessingSettings",
    "StorageSettings",
    "calculate_variant_key",
    "parse_image_key",
    "setup_logger",
    "get_logger",
    "HeroPipelineError",
    "FatalProcessingError",
    "ConfigurationError",
    "InvalidEventError",
    "InvalidImageKeyError",
    "SourceFetchError",
    "NoVariantsProcessedError",
    "StorageError",
    "NotFoundError",
    "VariantProcessingError",
    "DecodeError",
    "UnsupportedFormatError",
    "EncodeError",
    "EncodedVariant",
    "HeroImageEvent",
    "ProcessingResult",
    "SourceImageRef",
    "VariantRecord",
    "VariantSpec",
]
