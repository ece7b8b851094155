"""
Pytest configuration for Django app tests.
"""

from collections.abc import Iterator

from django.contrib.auth import get_user_model
from django.core.cache import cache

import pytest


@pytest.fixture(autouse=True)
def clear_cache() -> Iterator[None]:
    """Start every test with an empty store directory and idempotency cache."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def user():
    """Create a regular (non-staff) user."""
    User = get_user_model()
    return User.objects.create_user(
        username="customer",
        email="customer@example.com",
        password="testpass123",
    )


@pytest.fixture
def staff_user():
    """Create a back-office staff user."""
    User = get_user_model()
    return User.objects.create_user(
        username="staff",
        email="staff@example.com",
        password="testpass123",
        is_staff=True,
    )
