"""Protocol definitions for dependency injection and testability."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional, Protocol

from .models import EncodedVariant, ProcessingResult, SourceImageRef, VariantSpec


class S3ClientProtocol(Protocol):
    """Protocol for the subset of the S3 client API the pipeline uses."""

    def get_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        """Get object from S3."""
        ...

    def put_object(self, **kwargs: Any) -> Dict[str, Any]:
        """Put object to S3."""
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log error message."""
        ...


class StorageAdapter(ABC):
    """Abstract get/put access to an object store."""

    @abstractmethod
    def get(self, key: str) -> bytes:
        """Fetch an object's bytes. Raises NotFoundError or StorageError."""
        ...

    @abstractmethod
    def put(
        self,
        key: str,
        data: bytes,
        content_type: str,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Store an object, replacing any existing one. Raises StorageError."""
        ...


class VariantEncoder(ABC):
    """Abstract encoder producing one variant from source bytes."""

    @abstractmethod
    def encode(self, image_bytes: bytes, spec: VariantSpec) -> EncodedVariant:
        """Encode a variant. Raises DecodeError, UnsupportedFormatError or EncodeError."""
        ...


class ProcessingService(ABC):
    """Abstract service processing one hero image notification."""

    @abstractmethod
    def process(
        self, ref: SourceImageRef, log_context: Optional[Any] = None
    ) -> ProcessingResult:
        """Produce every catalog variant for one source image."""
        ...
