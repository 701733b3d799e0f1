"""Fixtures for the test suite."""

import pytest

from freya_omnisend.contacts.backends import locmem
from freya_omnisend.contacts.backends.locmem import LocMemBackend
from freya_omnisend.subscriptions.backends.memory import InMemoryBackend


@pytest.fixture(autouse=True)
def clear_locmem_contacts():
    """Start every test with an empty in-memory contact store."""
    locmem.contacts.clear()
    yield
    locmem.contacts.clear()


@pytest.fixture
def contact_client():
    """Return an in-memory contact store."""
    return LocMemBackend()


@pytest.fixture
def subscription_store():
    """Return an empty in-memory subscription store."""
    return InMemoryBackend()
