"""Integration tests for the plans and patterns API endpoints."""

import pytest


@pytest.mark.asyncio
async def test_run_plan_with_data_flow(async_client, backend):
    """Test that a later step reads an earlier step's result."""
    backend.create_record.return_value = {"id": "abc-123"}
    backend.update_record.return_value = {"id": "abc-123"}

    response = await async_client.post(
        "/api/v1/plans/run",
        json={
            "steps": [
                {"tool": "create_account", "args": {"name": "Contoso"}, "output_as": "acc"},
                {
                    "tool": "update_account",
                    "args": {"id": "{{acc.id}}", "numberofemployees": 10},
                },
            ]
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["executed"] == 2
    assert data["context"] == {"acc": {"id": "abc-123"}}
    backend.update_record.assert_awaited_once_with(
        "account", "abc-123", {"numberofemployees": 10}
    )


@pytest.mark.asyncio
async def test_run_plan_stops_on_error(async_client, backend):
    """Test that the failing step ends the plan."""
    backend.list_records.return_value = {"records": []}

    response = await async_client.post(
        "/api/v1/plans/run",
        json={
            "steps": [
                {"tool": "list_widget"},
                {"tool": "create_widget", "args": {}},
                {"tool": "list_account"},
            ]
        },
    )

    data = response.json()
    assert data["success"] is False
    assert data["executed"] == 2
    assert data["total"] == 3
    assert data["results"][1]["error"]["kind"] == "invalid_argument"
    backend.list_records.assert_awaited_once()


@pytest.mark.asyncio
async def test_run_plan_accepts_camel_case(async_client, backend):
    """Test the stopOnError and outputAs aliases."""
    backend.list_records.return_value = {"records": [], "count": None, "next_link": None}

    response = await async_client.post(
        "/api/v1/plans/run",
        json={
            "stopOnError": False,
            "steps": [
                {"tool": "create_widget", "args": {}},
                {"tool": "list_widget", "outputAs": "widgets"},
            ],
        },
    )

    data = response.json()
    assert data["executed"] == 2
    assert "widgets" in data["context"]


@pytest.mark.asyncio
async def test_run_empty_plan(async_client):
    """Test that an empty plan is rejected."""
    response = await async_client.post("/api/v1/plans/run", json={"steps": []})

    assert response.status_code == 400
    assert response.json()["detail"]["error"]["code"] == "empty_plan"


@pytest.mark.asyncio
async def test_successful_plan_is_recorded_as_pattern(async_client, backend, test_app):
    """Test that patterns reflect completed multi-step plans."""
    backend.list_records.return_value = {"records": []}

    await async_client.post(
        "/api/v1/plans/run",
        json={"steps": [{"tool": "list_widget"}, {"tool": "list_account"}]},
    )
    await test_app.state.background_tasks.drain()

    response = await async_client.get("/api/v1/patterns")

    assert response.status_code == 200
    data = response.json()
    assert data["total_patterns"] == 1
    assert data["update_count"] == 1
    assert data["patterns"][0]["tools"] == ["list_widget", "list_account"]
    assert data["insights"]["top_sequences"][0] == {
        "sequence": ["list_widget", "list_account"],
        "count": 1,
    }


@pytest.mark.asyncio
async def test_patterns_limit_bounds(async_client):
    """Test the limit query validation."""
    response = await async_client.get("/api/v1/patterns", params={"limit": 51})

    assert response.status_code == 422
