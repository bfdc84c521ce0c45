"""Shared data models for the hero image pipeline."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from .formats import DEFAULT_VERSION, content_type_for, default_quality_for


class _CamelModel(BaseModel):
    """Base model exchanging camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SourceImageRef(_CamelModel):
    """The hero image a notification refers to."""

    model_config = ConfigDict(frozen=True)

    canonical_url: str
    image_key: str = Field(min_length=1)


class HeroImageEvent(BaseModel):
    """Event envelope delivered by the event bus."""

    model_config = ConfigDict(populate_by_name=True)

    detail: SourceImageRef
    detail_type: Optional[str] = Field(default=None, alias="detail-type")
    source: Optional[str] = None
    time: Optional[str] = None
    id: Optional[str] = None
    region: Optional[str] = None
    account: Optional[str] = None
    resources: List[str] = Field(default_factory=list)


class VariantSpec(_CamelModel):
    """One entry of the variant catalog."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(gt=0)
    format: str
    quality: int
    version: str = DEFAULT_VERSION

    @classmethod
    def for_format(
        cls,
        width: int,
        format: str,
        quality: Optional[int] = None,
        version: str = DEFAULT_VERSION,
    ) -> "VariantSpec":
        """Build a spec, falling back to the format's default quality."""
        if quality is None:
            quality = default_quality_for(format)
        return cls(width=width, format=format, quality=quality, version=version)

    @property
    def label(self) -> str:
        """Stable label used to report this variant, e.g. ``320w-avif-q50``."""
        return f"{self.width}w-{self.format}-q{self.quality}"


class VariantRecord(_CamelModel):
    """Metadata of a stored variant, without its payload."""

    width: int
    height: int
    format: str
    quality: int
    version: str
    storage_key: str = ""
    content_type: str
    byte_size: int = 0


class EncodedVariant(VariantRecord):
    """Encoder output for one spec, including the encoded bytes."""

    data: bytes = Field(repr=False, exclude=True)

    def with_storage_key(self, storage_key: str) -> "EncodedVariant":
        return self.model_copy(update={"storage_key": storage_key})

    def to_record(self) -> VariantRecord:
        """Drop the payload, keeping only what the result reports."""
        return VariantRecord(**self.model_dump(exclude={"data"}))

    @classmethod
    def from_spec(cls, spec: VariantSpec, height: int, data: bytes) -> "EncodedVariant":
        return cls(
            width=spec.width,
            height=height,
            format=spec.format,
            quality=spec.quality,
            version=spec.version,
            content_type=content_type_for(spec.format),
            byte_size=len(data),
            data=data,
        )


class ProcessingResult(_CamelModel):
    """Outcome of processing one hero image notification."""

    image_id: str
    tenant_id: str
    successful_variants: List[VariantRecord] = Field(default_factory=list)
    failed_variants: Dict[str, str] = Field(default_factory=dict)
    processing_time: float = 0.0

    @computed_field(alias="anyVariantsProcessed")  # type: ignore[prop-decorator]
    @property
    def any_variants_processed(self) -> bool:
        return len(self.successful_variants) > 0

    @property
    def total_variants(self) -> int:
        return len(self.successful_variants) + len(self.failed_variants)

    def summary(self) -> str:
        return (
            f"image_id={self.image_id} tenant_id={self.tenant_id} "
            f"successful={len(self.successful_variants)} "
            f"failed={len(self.failed_variants)}"
        )
