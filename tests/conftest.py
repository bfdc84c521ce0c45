"""Shared test harness plumbing."""

import logging

import pytest


@pytest.fixture(autouse=True)
def restore_pipeline_logger():
    """Keep handlers added to the global pipeline logger from leaking across tests."""
    logger = logging.getLogger("hero-pipeline")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
