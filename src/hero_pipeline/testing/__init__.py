"""Testing utilities and fakes for the hero image pipeline."""

from .fakes import (
    FakeS3Client,
    FakeLogger,
    FailingEncoder,
    S3Object,
    S3Bucket,
    create_test_image,
    image_size,
    make_client_error,
    setup_test_s3_environment,
)

__all__ = [
    "FakeS3Client",
    "FakeLogger",
    "FailingEncoder",
    "S3Object",
    "S3Bucket",
    "create_test_image",
    "image_size",
    "make_client_error",
    "setup_test_s3_environment",
]
