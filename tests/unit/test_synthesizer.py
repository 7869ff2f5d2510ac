"""Unit tests for the ToolSynthesizer."""

import pytest

from toolsmith_server.discovery import ProbeResult, ToolSynthesizer
from toolsmith_server.discovery.synthesizer import OPEN_SHAPE_SUFFIX, field_schema


@pytest.mark.parametrize(
    "type_name,expected",
    [
        ("boolean", {"type": "boolean"}),
        ("integer", {"type": "integer"}),
        ("bigint", {"type": "integer"}),
        ("picklist", {"type": "integer"}),
        ("state", {"type": "integer"}),
        ("status", {"type": "integer"}),
        ("decimal", {"type": "number"}),
        ("double", {"type": "number"}),
        ("money", {"type": "number"}),
        ("datetime", {"type": "string", "format": "date-time"}),
        ("uniqueidentifier", {"type": "string", "format": "uuid"}),
        ("lookup", {"type": "string", "format": "uuid"}),
        ("customer", {"type": "string", "format": "uuid"}),
        ("owner", {"type": "string", "format": "uuid"}),
        ("memo", {"type": "string"}),
        ("String", {"type": "string"}),
    ],
)
def test_field_type_mapping(type_name, expected):
    """Test that backend field types map to JSON-Schema types."""
    assert field_schema(type_name) == expected


def test_open_shape_parameters_get_suffix():
    """Test that untyped complex parameters accept any JSON value."""
    schema = field_schema("entity", "Record payload")

    assert "type" not in schema
    assert schema["description"] == "Record payload" + OPEN_SHAPE_SUFFIX


def test_record_type_yields_six_tools(widget_entity):
    """Test the six CRUD/query tools and their names."""
    tools = ToolSynthesizer().record_tools(widget_entity)

    assert [t.name for t in tools] == [
        "create_widget",
        "get_widget",
        "update_widget",
        "delete_widget",
        "list_widget",
        "query_widget",
    ]
    assert all(t.category == "records" for t in tools)
    assert all(t.provenance.resource == "widget" for t in tools)


def test_create_schema_requires_mandatory_fields(widget_entity):
    """Test that create requires mandatory creatable fields, excluding the id."""
    create = ToolSynthesizer().record_tools(widget_entity)[0]

    assert create.input_schema["required"] == ["name"]
    assert create.input_schema["properties"] == {
        "name": {"type": "string", "description": "Name"}
    }
    assert "widgetid" not in create.input_schema["properties"]


def test_read_only_fields_never_writable(account_entity):
    """Test that read-only fields stay out of create and update schemas."""
    tools = {t.name: t for t in ToolSynthesizer().record_tools(account_entity)}

    create_props = tools["create_account"].input_schema["properties"]
    update_props = tools["update_account"].input_schema["properties"]
    assert "createdon" not in create_props
    assert "createdon" not in update_props
    assert create_props["revenue"]["type"] == "number"
    assert create_props["donotemail"]["type"] == "boolean"
    assert create_props["primarycontactid"]["format"] == "uuid"


def test_update_requires_id(account_entity):
    """Test that update takes updatable fields plus a required id."""
    update = ToolSynthesizer().record_tools(account_entity)[2]

    assert update.input_schema["required"] == ["id"]
    assert "name" in update.input_schema["properties"]
    assert "id" in update.input_schema["properties"]


def test_record_keywords_include_verb_synonyms(account_entity):
    """Test record tool keywords."""
    create = ToolSynthesizer().record_tools(account_entity)[0]

    assert "create" in create.keywords
    assert "add" in create.keywords
    assert "account" in create.keywords
    assert "accounts" in create.keywords


def test_bound_to_one_custom_api_gets_target_id(custom_apis):
    """Test that bound-to-one operations require target_id."""
    tool = ToolSynthesizer().custom_api_tool(custom_apis[1])

    assert tool.name == "customapi_new_Escalate"
    assert tool.input_schema["required"] == ["target_id", "Reason"]
    assert tool.input_schema["properties"]["target_id"]["format"] == "uuid"
    assert tool.input_schema["properties"]["Payload"]["description"].endswith(
        OPEN_SHAPE_SUFFIX
    )
    assert tool.provenance.binding_kind == "bound_to_one"
    assert tool.provenance.call_style == "action"
    assert tool.provenance.bound_entity == "account"


def test_function_custom_api(custom_apis):
    """Test that optional parameters are not required and functions are tagged."""
    tool = ToolSynthesizer().custom_api_tool(custom_apis[0])

    assert tool.input_schema["required"] == ["Category"]
    assert tool.input_schema["properties"]["Limit"] == {"type": "integer"}
    assert tool.provenance.call_style == "function"
    assert tool.category == "custom_apis"


def test_bound_to_many_records_entity(custom_apis):
    """Test that bound-to-many tools record their entity without target_id."""
    tool = ToolSynthesizer().custom_api_tool(custom_apis[2])

    assert "target_id" not in tool.input_schema["properties"]
    assert tool.provenance.bound_entity == "account"
    assert tool.provenance.binding_kind == "bound_to_many"


def test_action_schema_from_request_fields(actions):
    """Test global action tools use request fields only."""
    tool = ToolSynthesizer().action_tool(actions[0])

    assert tool.name == "action_new_SendInvoice"
    assert set(tool.input_schema["properties"]) == {"InvoiceNumber", "CopyToOwner"}
    assert tool.input_schema["required"] == ["InvoiceNumber"]
    assert "TrackingId" in tool.description
    assert tool.category == "actions"


def test_blacklist_is_case_insensitive(widget_entity, account_entity, custom_apis, actions):
    """Test that blacklisted entities and operations are skipped entirely."""
    probe = ProbeResult(
        entities=[account_entity, widget_entity],
        custom_apis=custom_apis,
        actions=actions,
    )
    tools = ToolSynthesizer(["WIDGET", "new_escalate"]).synthesize(probe)
    names = {t.name for t in tools}

    assert not any(name.endswith("_widget") for name in names)
    assert "customapi_new_Escalate" not in names
    assert "create_account" in names
    assert "customapi_new_GetScore" in names
    assert "action_new_SendInvoice" in names
    assert len(tools) == 6 + 2 + 1
