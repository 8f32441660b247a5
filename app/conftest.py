"""
Root pytest configuration for the Django project.

This module configures pytest-django and provides project-wide fixtures
(users and authenticated API clients). App-specific fixtures are defined in
each app's tests/conftest.py.
"""

import os

import django
import pytest

# Ensure Django settings are configured before any tests run
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")
os.environ.setdefault("CHANNEL_LAYER_BACKEND", "memory")


def pytest_configure():
    """Configure Django settings before tests run."""
    django.setup()

    from channels.layers import channel_layers
    from django.conf import settings

    # Disable throttling during tests to prevent rate limit failures
    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = []
    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {}

    # Use fast password hasher for tests (PBKDF2 is too slow with 870K iterations)
    settings.PASSWORD_HASHERS = [
        "django.contrib.auth.hashers.MD5PasswordHasher",
    ]

    # No Redis in the test environment
    settings.CACHES = {
        "default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"},
    }
    settings.CHANNEL_LAYERS = {
        "default": {"BACKEND": "channels.layers.InMemoryChannelLayer"},
    }
    channel_layers.backends.clear()


def pytest_collection_modifyitems(items):
    """
    Auto-mark tests based on filename patterns.

    Mapping:
    - test_integration.py → e2e (full user journey workflows)
    - test_views.py, test_services.py, test_consumers.py, etc. → integration
    - test_models.py, test_registry.py, test_sync.py, etc. → unit
    - Unmatched files → integration (safe default for Django)

    Explicit markers on test functions/classes take precedence.
    """
    e2e_patterns = ["test_integration.py"]

    integration_patterns = [
        "test_views.py",
        "test_services.py",
        "test_consumers.py",
        "test_middleware.py",
        "test_permissions.py",
    ]

    unit_patterns = [
        "test_models.py",
        "test_serializers.py",
        "test_managers.py",
        "test_registry.py",
        "test_broadcast.py",
        "test_sync.py",
        "test_exceptions.py",
    ]

    for item in items:
        existing_markers = {m.name for m in item.iter_markers()}
        if existing_markers & {"unit", "integration", "e2e"}:
            continue

        filename = str(item.fspath).split("/")[-1]

        if any(pattern in filename for pattern in e2e_patterns):
            item.add_marker(pytest.mark.e2e)
        elif any(pattern in filename for pattern in integration_patterns):
            item.add_marker(pytest.mark.integration)
        elif any(pattern in filename for pattern in unit_patterns):
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.integration)


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def user(db):
    """A regular marketplace member."""
    from authentication.tests.factories import UserFactory

    return UserFactory()


@pytest.fixture
def other_user(db):
    """A second regular member."""
    from authentication.tests.factories import UserFactory

    return UserFactory()


@pytest.fixture
def admin_user(db):
    """A marketplace administrator (is_staff=True)."""
    from authentication.tests.factories import AdminFactory

    return AdminFactory()


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    """Unauthenticated API client for public endpoints."""
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def authenticated_client_factory(db):
    """
    Factory to create authenticated clients for any user.

    Usage:
        def test_example(authenticated_client_factory, seller):
            client = authenticated_client_factory(seller)
            response = client.get("/api/v1/chat/conversations/")
    """
    from rest_framework.test import APIClient
    from rest_framework_simplejwt.tokens import RefreshToken

    def _make_client(user):
        client = APIClient()
        refresh = RefreshToken.for_user(user)
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
        return client

    return _make_client


@pytest.fixture
def authenticated_client(user, authenticated_client_factory):
    """API client authenticated with a JWT for the ``user`` fixture."""
    return authenticated_client_factory(user)


# =============================================================================
# Live Channel Fixtures
# =============================================================================


@pytest.fixture
def live_registry():
    """
    The process-wide ConnectionRegistry, emptied before and after the test.

    Usage:
        def test_push(live_registry, seller):
            connection = FakeConnection(seller.id)
            live_registry.register(connection)
    """
    from chat.realtime import get_registry

    registry = get_registry()
    registry.clear()
    yield registry
    registry.clear()
