from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from linear_agent.http_server import _normalize_parameters, app


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def mock_provider():
    provider = MagicMock()
    provider.get_teams = AsyncMock(return_value={"teams": {"nodes": [{"id": "t1"}]}})
    provider.get_states = AsyncMock(return_value={"workflowStates": {"nodes": []}})
    provider.delete_issue = AsyncMock(return_value={"issueDelete": {"success": True}})
    with patch("linear_agent.mcp_server.get_provider", return_value=provider):
        yield provider


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_list_tools(client):
    body = client.get("/tools").json()

    assert body["count"] == 13
    assert "create_issue" in {t["name"] for t in body["tools"]}


def test_call_json_tool(client, mock_provider):
    """返回 JSON 的工具结果被解析后放入 data"""
    response = client.post("/call_tool", json={"tool_name": "get_teams"})

    body = response.json()
    assert response.status_code == 200
    assert body["success"] is True
    assert body["data"]["data"]["teams"]["nodes"] == [{"id": "t1"}]


def test_call_text_tool(client, mock_provider):
    """返回纯文本的工具结果包装为 message"""
    response = client.post(
        "/call_tool",
        json={"tool_name": "delete_issue", "parameters": {"issue_id": "i1"}},
    )

    assert response.json()["data"] == {"message": "Successfully deleted issue i1"}


def test_call_with_string_bool(client, mock_provider):
    client.post(
        "/call_tool",
        json={"tool_name": "get_states", "parameters": {"force_refresh": "true"}},
    )

    mock_provider.get_states.assert_awaited_once_with(force_refresh=True)


def test_unknown_tool(client):
    response = client.post("/call_tool", json={"tool_name": "drop_database"})

    assert response.status_code == 400


def test_bad_parameter_name(client, mock_provider):
    response = client.post(
        "/call_tool",
        json={"tool_name": "get_teams", "parameters": {"unexpected": 1}},
    )

    assert response.status_code == 400


def test_normalize_parameters():
    assert _normalize_parameters(
        {"priority": "2", "first": "x", "force_refresh": "no", "title": "t"}
    ) == {"priority": 2, "first": "x", "force_refresh": False, "title": "t"}
