"""
MCP Server 工具测试

测试策略:
- 返回 JSON 的工具: 解析 JSON 后验证结构化数据
- 返回纯文本的工具: 验证关键信息存在，而非精确匹配文案
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from linear_agent import mcp_server
from linear_agent.core.exceptions import GraphQLOperationError, LabelCreationError
from linear_agent.schemas.issue import CreateIssueInput


@pytest.fixture
def mock_provider():
    """Mock LinearProvider"""
    provider = MagicMock()
    provider.create_issue = AsyncMock()
    provider.create_issues = AsyncMock()
    provider.update_issue = AsyncMock()
    provider.update_issues = AsyncMock()
    provider.search_issues = AsyncMock()
    provider.delete_issue = AsyncMock()
    provider.create_project_with_issues = AsyncMock()
    provider.get_project = AsyncMock()
    provider.search_projects = AsyncMock()
    provider.get_teams = AsyncMock()
    provider.get_states = AsyncMock()
    provider.get_labels = AsyncMock()
    provider.get_current_user = AsyncMock()
    with patch("linear_agent.mcp_server.get_provider", return_value=provider):
        yield provider


@pytest.fixture
def team_id(monkeypatch):
    monkeypatch.setattr(mcp_server.settings, "LINEAR_TEAM_ID", "team-default")
    return "team-default"


def test_tool_registration():
    tools = mcp_server.mcp._tool_manager.list_tools()
    tool_names = {t.name for t in tools}

    assert tool_names == {
        "create_issue",
        "create_issues",
        "update_issue",
        "bulk_update_issues",
        "search_issues",
        "delete_issue",
        "create_project_with_issues",
        "get_project",
        "search_projects",
        "get_teams",
        "get_states",
        "get_labels",
        "get_user",
    }


def test_create_issue_metadata():
    tool = next(
        t for t in mcp_server.mcp._tool_manager.list_tools() if t.name == "create_issue"
    )

    assert "agent" in tool.description
    required = tool.parameters.get("required", [])
    assert "title" in required
    assert "team_id" not in required


def test_provider_is_shared_until_reset():
    with patch("linear_agent.mcp_server.LinearProvider") as mock_cls:
        mcp_server.reset_provider()
        first = mcp_server.get_provider()
        second = mcp_server.get_provider()
        mcp_server.reset_provider()

    assert first is second
    mock_cls.assert_called_once_with()


def test_mask_sensitive_in_error():
    masked = mcp_server._mask_sensitive_in_error(
        "bad key lin_api_abc123XYZ, authorization: secretvalue"
    )

    assert "abc123XYZ" not in masked
    assert "secretvalue" not in masked
    assert "lin_api_***" in masked


class TestCreateIssue:
    @pytest.mark.asyncio
    async def test_success_uses_default_team(self, mock_provider, team_id):
        """未提供 team_id 时使用 LINEAR_TEAM_ID"""
        mock_provider.create_issue.return_value = {
            "issueCreate": {
                "success": True,
                "issue": {
                    "identifier": "ENG-42",
                    "title": "修复登录页面崩溃问题",
                    "url": "https://linear.app/acme/issue/ENG-42",
                    "project": {"name": "Q3"},
                },
            }
        }

        result = await mcp_server.create_issue(
            title="修复登录页面崩溃问题", description="SSO 登录后白屏", priority=1
        )

        assert "ENG-42" in result
        assert "Q3" in result
        issue = mock_provider.create_issue.await_args.args[0]
        assert isinstance(issue, CreateIssueInput)
        assert issue.team_id == team_id
        assert issue.priority == 1

    @pytest.mark.asyncio
    async def test_missing_team(self, mock_provider, monkeypatch):
        monkeypatch.setattr(mcp_server.settings, "LINEAR_TEAM_ID", None)

        result = json.loads(await mcp_server.create_issue(title="t", description="d"))

        assert result["success"] is False
        assert result["error"]["code"] == "ERR_VALIDATION"
        assert "team_id" in result["error"]["message"]
        mock_provider.create_issue.assert_not_called()

    @pytest.mark.asyncio
    async def test_label_failure(self, mock_provider, team_id):
        mock_provider.create_issue.side_effect = LabelCreationError("agent", team_id)

        result = json.loads(await mcp_server.create_issue(title="t", description="d"))

        assert result["error"]["code"] == "ERR_LINEAR"
        assert "Failed to create label 'agent'" in result["error"]["message"]

    @pytest.mark.asyncio
    async def test_transport_failure_is_masked(self, mock_provider, team_id):
        mock_provider.create_issue.side_effect = GraphQLOperationError(
            "invalid key lin_api_SECRET123"
        )

        result = json.loads(await mcp_server.create_issue(title="t", description="d"))

        assert result["error"]["code"] == "ERR_LINEAR"
        assert "SECRET123" not in result["error"]["message"]

    @pytest.mark.asyncio
    async def test_unexpected_error(self, mock_provider, team_id):
        """未知异常只返回通用信息"""
        mock_provider.create_issue.side_effect = RuntimeError("internal detail")

        result = json.loads(await mcp_server.create_issue(title="t", description="d"))

        assert result["error"]["code"] == "ERR_INTERNAL"
        assert "internal detail" not in result["error"]["message"]


class TestBatchTools:
    @pytest.mark.asyncio
    async def test_create_issues_accepts_camel_case(self, mock_provider, team_id):
        mock_provider.create_issues.return_value = {
            "issueBatchCreate": {
                "success": True,
                "issues": [{"identifier": "ENG-1", "title": "A", "url": "u1"}],
            }
        }

        result = await mcp_server.create_issues(
            [
                {"title": "A", "description": "d", "teamId": "team-x", "stateId": "s1"},
                {"title": "B", "description": "d"},
            ]
        )

        assert "ENG-1" in result
        issues = mock_provider.create_issues.await_args.args[0]
        assert [i.team_id for i in issues] == ["team-x", team_id]
        assert issues[0].state_id == "s1"

    @pytest.mark.asyncio
    async def test_create_issues_missing_title(self, mock_provider, team_id):
        result = json.loads(await mcp_server.create_issues([{"description": "d"}]))

        assert result["error"]["code"] == "ERR_VALIDATION"
        mock_provider.create_issues.assert_not_called()

    @pytest.mark.asyncio
    async def test_bulk_update(self, mock_provider):
        mock_provider.update_issues.return_value = {
            "issueBatchUpdate": {"success": True, "issues": [{"id": "i1"}]}
        }

        result = await mcp_server.bulk_update_issues(["i1"], {"stateId": "s-done"})

        assert "Successfully updated 1 issues" in result
        ids, update = mock_provider.update_issues.await_args.args
        assert ids == ["i1"]
        assert update.state_id == "s-done"

    @pytest.mark.asyncio
    async def test_create_project_with_issues(self, mock_provider):
        mock_provider.create_project_with_issues.return_value = {
            "projectCreate": {
                "success": True,
                "project": {"id": "p1", "name": "Q3", "url": "https://linear.app/p1"},
            },
            "issueBatchCreate": {"success": True, "issues": []},
        }

        result = await mcp_server.create_project_with_issues(
            name="Q3", team_ids=["team-1"], issues=[{"title": "A", "description": "d"}]
        )

        assert "Project: Q3" in result
        project, issues = mock_provider.create_project_with_issues.await_args.args
        assert project.team_ids == ["team-1"]
        assert issues[0].team_id == "team-1"


class TestQueryTools:
    @pytest.mark.asyncio
    async def test_search_issues(self, mock_provider):
        mock_provider.search_issues.return_value = {
            "issues": {"nodes": [{"id": "i1"}], "pageInfo": {"hasNextPage": False}}
        }

        result = json.loads(
            await mcp_server.search_issues(query="crash", priority=0, first=10)
        )

        assert result["success"] is True
        assert result["data"]["issues"]["nodes"] == [{"id": "i1"}]
        args = mock_provider.search_issues.await_args.args[0]
        assert args.query == "crash"
        assert args.priority == 0
        assert mock_provider.search_issues.await_args.kwargs["first"] == 10

    @pytest.mark.asyncio
    async def test_get_states_force_refresh(self, mock_provider):
        mock_provider.get_states.return_value = {"workflowStates": {"nodes": []}}

        result = json.loads(await mcp_server.get_states(force_refresh=True))

        assert result["success"] is True
        mock_provider.get_states.assert_awaited_once_with(force_refresh=True)

    @pytest.mark.asyncio
    async def test_search_projects(self, mock_provider):
        mock_provider.search_projects.return_value = {"searchProjects": {"nodes": []}}

        result = json.loads(await mcp_server.search_projects("roadmap"))

        assert result["data"] == {"searchProjects": {"nodes": []}}
        mock_provider.search_projects.assert_awaited_once_with("roadmap")

    @pytest.mark.asyncio
    async def test_get_user(self, mock_provider):
        mock_provider.get_current_user.return_value = {"viewer": {"id": "u1"}}

        result = json.loads(await mcp_server.get_user())

        assert result["data"]["viewer"]["id"] == "u1"
