"""Pytest configuration and shared fixtures."""

import logging

import pytest

from src.core import activity_store


logger = logging.getLogger(__name__)


@pytest.fixture(autouse=True)
def _reset_activity_store():
    """Ensure no store backend leaks between tests."""
    yield
    activity_store.reset_backend()
