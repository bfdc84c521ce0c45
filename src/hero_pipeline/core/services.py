"""Service implementations for the hero image pipeline."""

import time
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Sequence

from .catalog import DEFAULT_CATALOG
from .config import DEFAULT_CACHE_CONTROL
from .error_handling import (
    BatchOperationContextManager,
    retry_s3_operation,
    with_error_handling,
)
from .exceptions import (
    ConfigurationError,
    EncodeError,
    StorageError,
    SourceFetchError,
    UnsupportedFormatError,
    describe_error,
    variant_error_boundary,
)
from .formats import FORMATS, get_format
from .image_utils import (
    calculate_variant_key,
    decode_image,
    encode_image,
    parse_image_key,
    prepare_image,
    resize_to_width,
)
from .models import (
    EncodedVariant,
    ProcessingResult,
    SourceImageRef,
    VariantRecord,
    VariantSpec,
)
from .observability import LogContext, MetricsCollector, PerformanceMetrics
from .protocols import (
    LoggerProtocol,
    ProcessingService,
    S3ClientProtocol,
    StorageAdapter,
    VariantEncoder,
)
from ..processors import VariantOutcome, process_variants


class ImageEncoderService(VariantEncoder):
    """Pure variant encoder with no I/O dependencies.

    Each call decodes its own copy of the source, so one instance can be
    shared by concurrent variant tasks.
    """

    def encode(self, image_bytes: bytes, spec: VariantSpec) -> EncodedVariant:
        """Decode, resize to ``spec.width`` and re-encode in ``spec.format``."""
        fmt = get_format(spec.format)
        if fmt is None:
            raise UnsupportedFormatError(
                f"Unsupported format '{spec.format}'. "
                f"Supported formats: {', '.join(sorted(FORMATS))}"
            )
        if not 0 <= spec.quality <= 100:
            raise EncodeError(
                f"Quality {spec.quality} is out of range 0-100 for {spec.format}"
            )

        image = decode_image(image_bytes)

        with variant_error_boundary():
            try:
                prepared = prepare_image(image, fmt)
                resized = resize_to_width(prepared, spec.width)
                data = encode_image(resized, fmt, spec.quality)
            except KeyError as exc:
                raise EncodeError(
                    f"No {fmt.pillow_format} encoder available in this Pillow build"
                ) from exc
            except (OSError, ValueError) as exc:
                raise EncodeError(
                    f"Failed to encode {spec.label}: {exc}"
                ) from exc

        return EncodedVariant.from_spec(spec, height=resized.height, data=data)


class S3StorageAdapter(StorageAdapter):
    """Object storage adapter over an S3-compatible client."""

    def __init__(
        self,
        s3_client: S3ClientProtocol,
        bucket: str,
        logger: LoggerProtocol,
        cache_control: str = DEFAULT_CACHE_CONTROL,
    ):
        self._s3_client = s3_client
        self._bucket = bucket
        self._logger = logger
        self._cache_control = cache_control

    @property
    def bucket(self) -> str:
        return self._bucket

    @retry_s3_operation()
    @with_error_handling
    def get(self, key: str) -> bytes:
        """Download an object's bytes."""
        self._logger.debug(f"Downloading s3://{self._bucket}/{key}")
        response = self._s3_client.get_object(Bucket=self._bucket, Key=key)
        data = response["Body"].read()
        self._logger.debug(f"Downloaded {len(data)} bytes from s3://{self._bucket}/{key}")
        return data

    @retry_s3_operation()
    @with_error_handling
    def put(
        self,
        key: str,
        data: bytes,
        content_type: str,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Upload an object, replacing whatever is stored at ``key``."""
        self._logger.debug(f"Uploading s3://{self._bucket}/{key}")
        self._s3_client.put_object(
            Bucket=self._bucket,
            Key=key,
            Body=data,
            ContentType=content_type,
            CacheControl=self._cache_control,
            Metadata=dict(metadata or {}),
        )
        self._logger.debug(
            f"Uploaded s3://{self._bucket}/{key} ({content_type}, {len(data)} bytes)"
        )


class HeroImageProcessingService(ProcessingService):
    """Produces and stores every catalog variant of one hero image."""

    def __init__(
        self,
        storage: StorageAdapter,
        encoder: VariantEncoder,
        logger: LoggerProtocol,
        catalog: Sequence[VariantSpec] = DEFAULT_CATALOG,
        max_workers: int = 1,
        metrics_collector: Optional[MetricsCollector] = None,
    ):
        labels = [spec.label for spec in catalog]
        if len(set(labels)) != len(labels):
            raise ConfigurationError(f"Variant catalog has duplicate entries: {labels}")
        if max_workers < 1:
            raise ConfigurationError(f"max_workers must be >= 1, got {max_workers}")

        self._storage = storage
        self._encoder = encoder
        self._logger = logger
        self._catalog = tuple(catalog)
        self._max_workers = max_workers
        self._metrics_collector = metrics_collector

    @property
    def catalog(self) -> Sequence[VariantSpec]:
        return self._catalog

    def process(
        self, ref: SourceImageRef, log_context: Optional[LogContext] = None
    ) -> ProcessingResult:
        """
        Process one hero image.

        Raises:
            InvalidImageKeyError: If ``ref.image_key`` is malformed
            SourceFetchError: If the source image cannot be fetched
        """
        start_time = time.time()
        log_context = (log_context or LogContext()).with_component(
            "hero_image_processing_service"
        ).with_operation("process_hero_image").with_metadata(image_key=ref.image_key)

        self._logger.info(
            "Starting hero image processing",
            log_context,
            canonical_url=ref.canonical_url,
        )

        tenant_id, image_id = parse_image_key(ref.image_key)
        log_context = log_context.with_tenant(tenant_id)

        source_bytes = self._fetch_source(ref, log_context)

        def task(spec: VariantSpec) -> VariantOutcome:
            return self._process_variant(source_bytes, spec, ref.image_key, log_context)

        with BatchOperationContextManager(
            operation_name=f"Variant generation for {ref.image_key}"
        ) as batch_manager:
            outcomes = process_variants(self._catalog, task, self._max_workers)
            for outcome in outcomes:
                if not outcome.success:
                    batch_manager.add_error(outcome.error, item_identifier=outcome.label)

        result = self._aggregate(image_id, tenant_id, outcomes)
        result.processing_time = time.time() - start_time

        failed = batch_manager.error_count
        successful = len(outcomes) - failed
        log_method = self._logger.info if failed == 0 else self._logger.warning
        log_method(
            "Hero image processing complete",
            log_context,
            successful=successful,
            failed=failed,
            processing_time_ms=round(result.processing_time * 1000, 1),
        )
        return result

    def _fetch_source(self, ref: SourceImageRef, log_context: LogContext) -> bytes:
        fetch_context = log_context.with_operation("fetch_source")
        try:
            source_bytes = self._storage.get(ref.image_key)
        except StorageError as e:
            self._logger.error(
                "Failed to fetch source image", fetch_context, error=describe_error(e)
            )
            raise SourceFetchError(
                f"Unable to fetch source image '{ref.image_key}': {e}"
            ) from e

        self._logger.debug(
            "Fetched source image", fetch_context, byte_size=len(source_bytes)
        )
        return source_bytes

    def _process_variant(
        self,
        source_bytes: bytes,
        spec: VariantSpec,
        image_key: str,
        log_context: LogContext,
    ) -> VariantOutcome:
        """Encode and upload one variant; failures are returned, not raised."""
        variant_context = log_context.with_operation("process_variant").with_metadata(
            variant=spec.label
        )
        start_time = time.time()
        record: Optional[VariantRecord] = None
        error = ""

        try:
            encoded = self._encoder.encode(source_bytes, spec)
            encoded = encoded.with_storage_key(calculate_variant_key(image_key, spec))
            self._storage.put(
                encoded.storage_key,
                encoded.data,
                encoded.content_type,
                metadata=self._object_metadata(image_key),
            )
            record = encoded.to_record()
            del encoded

            self._logger.info(
                "Stored variant",
                variant_context,
                storage_key=record.storage_key,
                byte_size=record.byte_size,
            )
        except Exception as e:  # noqa: BLE001
            error = describe_error(e)
            self._logger.warning(
                "Variant failed; continuing with remaining variants",
                variant_context,
                error=error,
            )

        end_time = time.time()
        if self._metrics_collector is not None:
            self._metrics_collector.record_metric(
                PerformanceMetrics(
                    operation="process_variant",
                    start_time=start_time,
                    end_time=end_time,
                    success=record is not None,
                    error_message=error or None,
                    metadata={"variant": spec.label, "image_key": image_key},
                )
            )

        return VariantOutcome(
            spec=spec, record=record, error=error, duration=end_time - start_time
        )

    @staticmethod
    def _object_metadata(image_key: str) -> Dict[str, str]:
        return {
            "source-key": image_key,
            "generated-at": datetime.now(timezone.utc).isoformat(),
        }

    @staticmethod
    def _aggregate(
        image_id: str, tenant_id: str, outcomes: List[VariantOutcome]
    ) -> ProcessingResult:
        successful: List[VariantRecord] = []
        failed: Dict[str, str] = {}
        for outcome in outcomes:
            if outcome.record is not None:
                successful.append(outcome.record)
            else:
                failed[outcome.label] = outcome.error

        return ProcessingResult(
            image_id=image_id,
            tenant_id=tenant_id,
            successful_variants=successful,
            failed_variants=failed,
        )
