"""Event handler for HeroImageUpdated notifications.

The handler is the boundary with the event substrate: fatal errors are
logged and re-raised so the substrate's retry and dead-letter policy applies,
while per-variant failures come back inside the ``ProcessingResult``.
"""

from typing import Any, Dict, Mapping, Optional, Union

from pydantic import ValidationError

from .core.config import ProcessingSettings, StorageSettings
from .core.exceptions import InvalidEventError, NoVariantsProcessedError
from .core.factories import LoggerFactory, ProcessingPipelineFactory
from .core.models import HeroImageEvent, ProcessingResult
from .core.logging_config import set_request_id
from .core.observability import LogContext, MetricsCollector
from .core.protocols import LoggerProtocol, ProcessingService


class HeroImageEventHandler:
    """Adapts one inbound notification to a processing service call."""

    def __init__(
        self,
        processing_service: Optional[ProcessingService] = None,
        logger: Optional[LoggerProtocol] = None,
        settings: Optional[ProcessingSettings] = None,
        storage_settings: Optional[StorageSettings] = None,
        metrics_collector: Optional[MetricsCollector] = None,
    ):
        if settings is None:
            settings = ProcessingSettings.from_env()
        if logger is None:
            logger = LoggerFactory.create_logger("hero-pipeline.handler")

        if processing_service is None:
            if metrics_collector is None:
                metrics_collector = MetricsCollector()
            processing_service = ProcessingPipelineFactory.create_pipeline(
                settings=storage_settings or StorageSettings.from_env(),
                processing=settings,
                metrics_collector=metrics_collector,
            )

        self._processing_service = processing_service
        self._logger = logger
        self._metrics_collector = metrics_collector
        self._fail_when_no_variants = settings.fail_when_no_variants

    def handle(self, event: Union[HeroImageEvent, Mapping[str, Any]]) -> ProcessingResult:
        """
        Process one notification.

        Returns:
            The processing result, including any per-variant failures

        Raises:
            FatalProcessingError: For malformed events, malformed image keys,
                unreadable sources, or (when enabled) when no variant succeeded
        """
        log_context = LogContext(component="hero_image_event_handler")

        hero_event = self._parse_event(event, log_context)
        log_context = log_context.with_metadata(image_key=hero_event.detail.image_key)

        self._logger.info(
            "Received HeroImageUpdated event",
            log_context.with_operation("receive_event"),
            detail_type=hero_event.detail_type,
            source=hero_event.source,
            time=hero_event.time,
        )

        try:
            self._logger.info(
                "Processing hero image",
                log_context.with_operation("dispatch"),
                canonical_url=hero_event.detail.canonical_url,
            )
            result = self._processing_service.process(
                hero_event.detail, log_context=log_context
            )

            if not result.any_variants_processed and self._fail_when_no_variants:
                raise NoVariantsProcessedError(
                    f"Failed to generate any variants for image {result.image_id}",
                    result=result,
                )
        except Exception as e:
            # Discard timings of the failed invocation
            self._variant_timings()
            self._logger.error(
                "Fatal error processing HeroImageUpdated event",
                log_context.with_operation("fatal"),
                error_type=type(e).__name__,
                error=str(e),
            )
            raise

        log_method = self._logger.info if result.any_variants_processed else self._logger.warning
        log_method(
            "Hero image processing completed",
            log_context.with_operation("complete"),
            image_id=result.image_id,
            tenant_id=result.tenant_id,
            successful_variants=len(result.successful_variants),
            failed_variants=len(result.failed_variants),
            **self._variant_timings(),
        )
        return result

    def _variant_timings(self) -> Dict[str, Any]:
        """Drain this invocation's per-variant timings into log fields."""
        if self._metrics_collector is None:
            return {}
        summary = self._metrics_collector.drain_summary("process_variant")
        if not summary:
            return {}
        return {
            "variant_avg_ms": summary["avg_ms"],
            "variant_max_ms": summary["max_ms"],
        }

    def _parse_event(
        self, event: Union[HeroImageEvent, Mapping[str, Any]], log_context: LogContext
    ) -> HeroImageEvent:
        if isinstance(event, HeroImageEvent):
            return event
        try:
            return HeroImageEvent.model_validate(event)
        except ValidationError as e:
            self._logger.error(
                "Rejected malformed HeroImageUpdated event",
                log_context.with_operation("receive_event"),
                error=str(e).replace("\n", " "),
            )
            raise InvalidEventError(f"Malformed HeroImageUpdated event: {e}") from e


_handler: Optional[HeroImageEventHandler] = None


def get_handler() -> HeroImageEventHandler:
    """Return the per-runtime handler, constructing it on first use."""
    global _handler
    if _handler is None:
        _handler = HeroImageEventHandler()
    return _handler


def reset_handler() -> None:
    global _handler
    _handler = None


def lambda_handler(event: Mapping[str, Any], context: Any = None) -> Dict[str, Any]:
    """AWS Lambda entry point; returns the result as camelCase JSON."""
    set_request_id(getattr(context, "aws_request_id", None))
    try:
        result = get_handler().handle(event)
    finally:
        set_request_id(None)
    return result.model_dump(mode="json", by_alias=True)
