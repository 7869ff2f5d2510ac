"""Pytest configuration and shared fixtures for toolsmith-server tests.

This module provides common fixtures used across all test modules,
including test app creation, async client setup and sample backend schema.
"""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from toolsmith_server import create_app
from toolsmith_server.backend import (
    ActionInfo,
    AttributeInfo,
    BackendClient,
    BindingKind,
    CustomApiInfo,
    EntityInfo,
    OperationParameter,
)
from toolsmith_server.config import ToolsmithServerSettings
from toolsmith_server.store import JsonConfigStore


@pytest.fixture
def test_settings(tmp_path):
    """Create test settings with an isolated temporary data directory.

    Args:
        tmp_path: Pytest fixture providing a temporary directory.

    Returns:
        ToolsmithServerSettings: Settings instance configured for testing.
    """
    return ToolsmithServerSettings(
        host="127.0.0.1",
        port=8000,
        backend_url="http://backend.test",
        data_dir=str(tmp_path),
        config_file="toolsmith_config.json",
        default_cache_ttl_seconds=3600,
        log_level="DEBUG",
        cors_origins=["*"],
    )


@pytest.fixture
def test_app(test_settings):
    """Create a FastAPI test application instance."""
    return create_app(settings=test_settings)


@pytest_asyncio.fixture
async def async_client(test_app):
    """Create an async HTTP client for testing FastAPI endpoints.

    Yields:
        AsyncClient: Async HTTP client for making test requests.
    """
    # Trigger the lifespan startup manually for tests
    async with test_app.router.lifespan_context(test_app):
        transport = ASGITransport(app=test_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


@pytest.fixture
def config_store(tmp_path):
    """A JSON configuration store in a temporary directory."""
    return JsonConfigStore(tmp_path / "toolsmith_config.json")


@pytest.fixture
def widget_entity():
    """Record type 'widget' with one required creatable string field 'name'."""
    return EntityInfo(
        logical_name="widget",
        entity_set_name="widgets",
        display_name="Widget",
        primary_id_attribute="widgetid",
        primary_name_attribute="name",
        attributes=[
            AttributeInfo(
                logical_name="widgetid",
                attribute_type="uniqueidentifier",
                valid_for_create=True,
                is_primary_id=True,
            ),
            AttributeInfo(
                logical_name="name",
                attribute_type="string",
                display_name="Name",
                valid_for_create=True,
                valid_for_update=True,
                required_level="applicationrequired",
            ),
        ],
    )


@pytest.fixture
def account_entity():
    """Record type 'account' with a mix of field types."""
    return EntityInfo(
        logical_name="account",
        entity_set_name="accounts",
        display_name="Account",
        primary_id_attribute="accountid",
        primary_name_attribute="name",
        attributes=[
            AttributeInfo(
                logical_name="accountid",
                attribute_type="uniqueidentifier",
                valid_for_create=True,
                is_primary_id=True,
            ),
            AttributeInfo(
                logical_name="name",
                attribute_type="string",
                valid_for_create=True,
                valid_for_update=True,
                required_level="applicationrequired",
            ),
            AttributeInfo(
                logical_name="revenue",
                attribute_type="money",
                valid_for_create=True,
                valid_for_update=True,
            ),
            AttributeInfo(
                logical_name="numberofemployees",
                attribute_type="integer",
                valid_for_create=True,
                valid_for_update=True,
            ),
            AttributeInfo(
                logical_name="donotemail",
                attribute_type="boolean",
                valid_for_create=True,
                valid_for_update=True,
            ),
            AttributeInfo(
                logical_name="primarycontactid",
                attribute_type="lookup",
                valid_for_create=True,
                valid_for_update=True,
            ),
            AttributeInfo(
                logical_name="createdon",
                attribute_type="datetime",
                valid_for_create=False,
                valid_for_update=False,
            ),
        ],
    )


@pytest.fixture
def custom_apis():
    """An unbound function, a bound-to-one action and a bound-to-many action."""
    return [
        CustomApiInfo(
            unique_name="new_GetScore",
            display_name="Get Score",
            is_function=True,
            parameters=[
                OperationParameter(name="Category", type="string"),
                OperationParameter(name="Limit", type="integer", optional=True),
            ],
        ),
        CustomApiInfo(
            unique_name="new_Escalate",
            display_name="Escalate",
            binding_kind=BindingKind.BOUND_TO_ONE,
            bound_entity="account",
            parameters=[
                OperationParameter(name="Reason", type="string"),
                OperationParameter(name="Payload", type="entity", optional=True),
            ],
        ),
        CustomApiInfo(
            unique_name="new_BulkTag",
            binding_kind=BindingKind.BOUND_TO_MANY,
            bound_entity="account",
        ),
    ]


@pytest.fixture
def actions():
    """One global action with request and response fields."""
    return [
        ActionInfo(
            unique_name="new_SendInvoice",
            display_name="Send Invoice",
            request_fields=[
                OperationParameter(name="InvoiceNumber", type="string"),
                OperationParameter(name="CopyToOwner", type="boolean", optional=True),
            ],
            response_fields=[OperationParameter(name="TrackingId", type="string")],
        )
    ]


@pytest.fixture
def mock_backend(widget_entity, account_entity, custom_apis, actions):
    """AsyncMock backend client answering metadata queries from the fixtures."""
    backend = AsyncMock(spec=BackendClient)
    backend.base_url = "http://backend.test/api/data/v9.2"
    backend.list_entity_definitions.return_value = [account_entity, widget_entity]
    backend.list_custom_apis.return_value = custom_apis
    backend.list_actions.return_value = actions
    backend.check_connection.return_value = True
    return backend
