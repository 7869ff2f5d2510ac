"""Pytest configuration for integration tests.

This module provides integration-test-specific fixtures that ensure
proper test isolation and mocking for API endpoint tests.
"""

from unittest.mock import patch

import pytest


@pytest.fixture(autouse=True)
def backend(mock_backend):
    """Mock BackendClient for all integration tests.

    This fixture patches the BackendClient class before the app is created,
    ensuring the lifespan uses our mock instead of creating a real client.
    The mock answers metadata queries with the shared schema fixtures.
    """
    with patch("toolsmith_server.app.BackendClient") as mock_client_class:
        mock_client_class.return_value = mock_backend
        yield mock_backend
