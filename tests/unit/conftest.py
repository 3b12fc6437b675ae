"""Pytest configuration and fixtures for unit tests."""

from datetime import date

import pytest

from src.core import activity_store
from tests.unit.mocks import InMemoryActivityStore


@pytest.fixture
def in_memory_store():
    """Provides a fresh InMemoryActivityStore for each test."""
    return InMemoryActivityStore()


@pytest.fixture
def patched_store(monkeypatch, in_memory_store):
    """Patches src.core.activity_store functions to use InMemoryActivityStore."""
    monkeypatch.setattr("src.core.activity_store.list_activity", in_memory_store.list_activity)
    monkeypatch.setattr("src.core.activity_store.get_user_record", in_memory_store.get_user_record)
    monkeypatch.setattr("src.core.activity_store.list_user_records", in_memory_store.list_user_records)
    monkeypatch.setattr("src.core.activity_store.get_league", in_memory_store.get_league)

    return in_memory_store


@pytest.fixture
def registered_store(in_memory_store):
    """Registers InMemoryActivityStore as the store backend for the duration of a test."""
    activity_store.register_backend(in_memory_store)
    yield in_memory_store
    activity_store.reset_backend()


@pytest.fixture
def reference_date() -> date:
    """Fixed 'today' for period resolution (a Wednesday)."""
    return date(2026, 1, 14)
