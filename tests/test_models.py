"""Tests for core data models."""

import pytest
from pydantic import ValidationError

from hero_pipeline.core.models import (
    EncodedVariant,
    HeroImageEvent,
    ProcessingResult,
    SourceImageRef,
    VariantRecord,
    VariantSpec,
)


class TestSourceImageRef:
    """Tests for SourceImageRef."""

    def test_from_camel_case_payload(self):
        """Test parsing the wire payload."""
        ref = SourceImageRef.model_validate(
            {
                "canonicalUrl": "https://cdn.example.com/tenant-42/abc123.jpg",
                "imageKey": "tenant-42/abc123",
            }
        )
        assert ref.canonical_url == "https://cdn.example.com/tenant-42/abc123.jpg"
        assert ref.image_key == "tenant-42/abc123"

    def test_populate_by_field_name(self):
        """Test constructing with snake_case names."""
        ref = SourceImageRef(canonical_url="u", image_key="tenant-1/x")
        assert ref.image_key == "tenant-1/x"

    def test_is_immutable(self):
        """Test that the ref cannot be modified."""
        ref = SourceImageRef(canonical_url="u", image_key="tenant-1/x")
        with pytest.raises(ValidationError):
            ref.image_key = "tenant-2/y"

    def test_missing_image_key_rejected(self):
        """Test that imageKey is required."""
        with pytest.raises(ValidationError):
            SourceImageRef.model_validate({"canonicalUrl": "u"})

    def test_empty_image_key_rejected(self):
        """Test that an empty imageKey is rejected."""
        with pytest.raises(ValidationError):
            SourceImageRef.model_validate({"canonicalUrl": "u", "imageKey": ""})


class TestHeroImageEvent:
    """Tests for the event envelope."""

    def test_parse_envelope(self):
        """Test parsing a complete envelope."""
        event = HeroImageEvent.model_validate(
            {
                "detail": {"canonicalUrl": "u", "imageKey": "tenant-1/x"},
                "detail-type": "HeroImageUpdated",
                "source": "hubletix.api",
                "time": "2026-01-10T04:13:00Z",
                "region": "us-east-1",
                "resources": [],
            }
        )
        assert event.detail.image_key == "tenant-1/x"
        assert event.detail_type == "HeroImageUpdated"
        assert event.source == "hubletix.api"
        assert event.time == "2026-01-10T04:13:00Z"

    def test_envelope_fields_optional(self):
        """Test that only detail is required."""
        event = HeroImageEvent.model_validate(
            {"detail": {"canonicalUrl": "u", "imageKey": "tenant-1/x"}}
        )
        assert event.detail_type is None
        assert event.resources == []

    def test_missing_detail_rejected(self):
        """Test that an envelope without detail is rejected."""
        with pytest.raises(ValidationError):
            HeroImageEvent.model_validate({"detail-type": "HeroImageUpdated"})


class TestVariantSpec:
    """Tests for VariantSpec."""

    def test_label(self):
        """Test the stable per-variant label."""
        spec = VariantSpec(width=320, format="avif", quality=50)
        assert spec.label == "320w-avif-q50"

    def test_default_version(self):
        """Test the default version tag."""
        assert VariantSpec(width=320, format="webp", quality=75).version == "v1"

    @pytest.mark.parametrize(
        "fmt,expected_quality",
        [("avif", 50), ("webp", 75), ("jpeg", 80)],
    )
    def test_for_format_default_quality(self, fmt, expected_quality):
        """Test format-dependent default quality."""
        spec = VariantSpec.for_format(640, fmt)
        assert spec.quality == expected_quality

    def test_for_format_explicit_quality(self):
        """Test that an explicit quality wins over the default."""
        assert VariantSpec.for_format(640, "webp", quality=60).quality == 60

    def test_for_format_unknown_format_without_quality(self):
        """Test that unknown formats need an explicit quality."""
        with pytest.raises(KeyError):
            VariantSpec.for_format(640, "heic")

    @pytest.mark.parametrize("width", [0, -10])
    def test_width_must_be_positive(self, width):
        """Test width validation."""
        with pytest.raises(ValidationError):
            VariantSpec(width=width, format="jpeg", quality=80)

    def test_hashable_and_equal(self):
        """Test specs compare by value."""
        a = VariantSpec(width=320, format="avif", quality=50)
        b = VariantSpec(width=320, format="avif", quality=50)
        assert a == b
        assert len({a, b}) == 1


class TestEncodedVariant:
    """Tests for EncodedVariant."""

    def _variant(self) -> EncodedVariant:
        spec = VariantSpec(width=320, format="webp", quality=75)
        return EncodedVariant.from_spec(spec, height=192, data=b"payload")

    def test_from_spec(self):
        """Test deriving fields from the spec."""
        variant = self._variant()
        assert variant.width == 320
        assert variant.height == 192
        assert variant.format == "webp"
        assert variant.quality == 75
        assert variant.version == "v1"
        assert variant.content_type == "image/webp"
        assert variant.byte_size == 7
        assert variant.storage_key == ""

    def test_unknown_format_content_type(self):
        """Test generic content type for unknown formats."""
        spec = VariantSpec(width=10, format="heic", quality=50)
        variant = EncodedVariant.from_spec(spec, height=10, data=b"x")
        assert variant.content_type == "application/octet-stream"

    def test_with_storage_key(self):
        """Test setting the storage key returns a copy."""
        variant = self._variant()
        keyed = variant.with_storage_key("tenant-1/x-320w-webp-q75-v1.webp")
        assert keyed.storage_key == "tenant-1/x-320w-webp-q75-v1.webp"
        assert variant.storage_key == ""
        assert keyed.data == b"payload"

    def test_to_record_drops_payload(self):
        """Test that records carry metadata only."""
        record = self._variant().with_storage_key("k").to_record()
        assert isinstance(record, VariantRecord)
        assert not hasattr(record, "data")
        assert record.storage_key == "k"
        assert record.byte_size == 7

    def test_payload_excluded_from_dump(self):
        """Test that bytes never end up in serialized output."""
        assert "data" not in self._variant().model_dump()


class TestProcessingResult:
    """Tests for ProcessingResult."""

    def _record(self, width: int) -> VariantRecord:
        return VariantRecord(
            width=width,
            height=width // 2,
            format="jpeg",
            quality=80,
            version="v1",
            storage_key=f"k-{width}",
            content_type="image/jpeg",
            byte_size=100,
        )

    def test_any_variants_processed_false_when_empty(self):
        """Test derived flag with no successes."""
        result = ProcessingResult(
            image_id="x", tenant_id="1", failed_variants={"320w-avif-q50": "boom"}
        )
        assert result.any_variants_processed is False
        assert result.total_variants == 1

    def test_any_variants_processed_true(self):
        """Test derived flag with a success."""
        result = ProcessingResult(
            image_id="x", tenant_id="1", successful_variants=[self._record(320)]
        )
        assert result.any_variants_processed is True

    def test_camel_case_dump(self):
        """Test the JSON shape returned to the event substrate."""
        result = ProcessingResult(
            image_id="abc123",
            tenant_id="42",
            successful_variants=[self._record(320)],
            failed_variants={"640w-avif-q50": "EncodeError: boom"},
        )
        payload = result.model_dump(mode="json", by_alias=True)

        assert payload["imageId"] == "abc123"
        assert payload["tenantId"] == "42"
        assert payload["anyVariantsProcessed"] is True
        assert payload["failedVariants"] == {"640w-avif-q50": "EncodeError: boom"}
        assert payload["successfulVariants"][0]["storageKey"] == "k-320"
        assert payload["successfulVariants"][0]["contentType"] == "image/jpeg"

    def test_summary(self):
        """Test the summary line used in logs."""
        result = ProcessingResult(
            image_id="abc123",
            tenant_id="42",
            successful_variants=[self._record(320), self._record(640)],
            failed_variants={"1280w-avif-q50": "err"},
        )
        assert result.summary() == (
            "image_id=abc123 tenant_id=42 successful=2 failed=1"
        )
