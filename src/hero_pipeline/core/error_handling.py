# src/hero_pipeline/core/error_handling.py

import functools
import logging
import time

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionError as BotocoreConnectionError,
    ReadTimeoutError,
)

from .exceptions import NotFoundError, StorageError

NOT_FOUND_ERROR_CODES = ("NoSuchKey", "NotFound", "404")
RETRYABLE_S3_ERROR_CODES = (
    "SlowDown",
    "ThrottlingException",
    "ProvisionedThroughputExceededException",
    "RequestTimeout",
    "InternalError",
    "ServiceUnavailable",
    "500",
    "503",
)


def _client_error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


def is_retryable_storage_error(error: StorageError) -> bool:
    """Whether a storage error was caused by a transient condition."""
    cause = error.__cause__
    if isinstance(cause, ClientError):
        return _client_error_code(cause) in RETRYABLE_S3_ERROR_CODES
    return isinstance(cause, (BotocoreConnectionError, ReadTimeoutError))


def with_error_handling(func):
    """
    Translate botocore errors raised by a storage call into pipeline errors.

    ``ClientError`` with a not-found code becomes ``NotFoundError``, any other
    ``ClientError`` or ``BotoCoreError`` becomes ``StorageError``. The original
    exception is chained as ``__cause__``.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = logging.getLogger(func.__module__ + '.' + func.__name__)
        try:
            return func(*args, **kwargs)
        except ClientError as e:
            code = _client_error_code(e)
            if code in NOT_FOUND_ERROR_CODES:
                raise NotFoundError(f"Object not found in {func.__name__}: {e}") from e
            logger.debug(f"S3 client error in '{func.__name__}' ({code}): {e}")
            raise StorageError(f"S3 operation failed in {func.__name__}: {e}") from e
        except BotoCoreError as e:
            logger.debug(f"S3 transport error in '{func.__name__}': {e}")
            raise StorageError(f"S3 operation failed in {func.__name__}: {e}") from e
    return wrapper


def retry_s3_operation(max_attempts=3, initial_delay=0.5, backoff_factor=2):
    """
    Decorator to retry S3 operations with exponential backoff.

    Only ``StorageError``s caused by a transient condition are retried;
    ``NotFoundError`` and other storage errors are raised immediately.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = logging.getLogger(func.__module__ + '.' + func.__name__)
            delay = initial_delay
            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except NotFoundError:
                    raise
                except StorageError as e:
                    if not is_retryable_storage_error(e):
                        logger.error(f"S3 operation '{func.__name__}' failed with non-retryable error: {e}")
                        raise
                    if attempt >= max_attempts:
                        logger.error(
                            f"S3 operation '{func.__name__}' failed after {max_attempts} attempts. Error: {e}"
                        )
                        raise
                    logger.info(
                        f"S3 operation '{func.__name__}' failed. Attempt {attempt}/{max_attempts}. "
                        f"Retrying in {delay:.2f}s. Error: {e}"
                    )
                    time.sleep(delay)
                    delay *= backoff_factor
            raise StorageError(f"S3 operation '{func.__name__}' failed after {max_attempts} attempts")
        return wrapper
    return decorator


class BatchOperationContextManager:
    """
    Context manager for the variant fan-out to collect and summarize errors.
    """
    def __init__(self, operation_name="Variant generation"):
        self.operation_name = operation_name
        self.errors = []
        self.logger = logging.getLogger(self.__class__.__module__ + '.' + self.__class__.__name__)

    def __enter__(self):
        self.logger.debug(f"Starting {self.operation_name}.")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.errors:
            failed_items = ", ".join(error["item"] for error in self.errors)
            self.logger.warning(
                f"{self.operation_name} completed with {len(self.errors)} error(s): {failed_items}"
            )
        elif exc_type:
            self.logger.error(
                f"{self.operation_name} failed due to an unhandled exception: {exc_val}",
                exc_info=(exc_type, exc_val, exc_tb)
            )
        else:
            self.logger.debug(f"{self.operation_name} completed successfully.")

        # Never suppress exceptions
        return False

    def add_error(self, error_message: str, item_identifier: str = "Unknown item"):
        """
        Record an error for a specific variant.

        Args:
            error_message (str): The error message or exception string.
            item_identifier (str): The variant label.
        """
        self.errors.append({"item": item_identifier, "error": str(error_message)})
        self.logger.debug(f"Error added for variant '{item_identifier}' in {self.operation_name}: {error_message}")

    @property
    def error_count(self) -> int:
        return len(self.errors)
