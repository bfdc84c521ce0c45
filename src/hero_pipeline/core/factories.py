"""Factory classes for creating configured service instances."""

from typing import TYPE_CHECKING, Any, Optional, Sequence

import boto3
from botocore.config import Config

from .catalog import DEFAULT_CATALOG
from .config import ProcessingSettings, StorageSettings
from .models import VariantSpec
from .observability import MetricsCollector, create_logger
from .protocols import LoggerProtocol, S3ClientProtocol, VariantEncoder
from .services import (
    HeroImageProcessingService,
    ImageEncoderService,
    S3StorageAdapter,
)

if TYPE_CHECKING:
    from mypy_boto3_s3.client import S3Client
else:
    S3Client = Any


class LoggerFactory:
    """Factory for creating logger instances."""

    @staticmethod
    def create_logger(name: str = "hero-pipeline", level: Optional[str] = None) -> LoggerProtocol:
        """Create a configured structured logger."""
        return create_logger(name, level)


class S3ClientFactory:
    """Factory for creating S3 client instances."""

    @staticmethod
    def create_s3_client(settings: StorageSettings, **kwargs: Any) -> S3Client:
        """Create an S3 client pointed at the configured endpoint."""
        session = boto3.Session(
            aws_access_key_id=settings.access_key_id,
            aws_secret_access_key=settings.secret_access_key,
            region_name=settings.region,
        )
        config = Config(
            s3={"addressing_style": "path"},
            # Retries for S3 calls are handled by retry_s3_operation
            retries={"max_attempts": 1, "mode": "standard"},
        )
        return session.client(
            "s3", endpoint_url=settings.endpoint, config=config, **kwargs
        )


class ProcessingPipelineFactory:
    """Factory for creating the complete processing pipeline."""

    @staticmethod
    def create_pipeline(
        settings: Optional[StorageSettings] = None,
        processing: Optional[ProcessingSettings] = None,
        s3_client: Optional[S3ClientProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
        catalog: Sequence[VariantSpec] = DEFAULT_CATALOG,
        metrics_collector: Optional[MetricsCollector] = None,
        encoder: Optional[VariantEncoder] = None,
    ) -> HeroImageProcessingService:
        """
        Create a fully configured processing service.

        Settings not passed in are read from the environment; a missing
        variable raises ConfigurationError before anything is constructed.
        """
        if processing is None:
            processing = ProcessingSettings.from_env()

        if settings is None:
            settings = StorageSettings.from_env()

        if s3_client is None:
            s3_client = S3ClientFactory.create_s3_client(settings)

        if logger is None:
            logger = LoggerFactory.create_logger("hero-pipeline")

        storage = S3StorageAdapter(
            s3_client,
            settings.bucket_name,
            logger,
            cache_control=processing.cache_control,
        )
        if encoder is None:
            encoder = ImageEncoderService()

        return HeroImageProcessingService(
            storage=storage,
            encoder=encoder,
            logger=logger,
            catalog=catalog,
            max_workers=processing.max_workers,
            metrics_collector=metrics_collector,
        )
