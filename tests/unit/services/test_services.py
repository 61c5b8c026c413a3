from unittest.mock import AsyncMock, MagicMock

import pytest

from linear_agent.core.exceptions import DomainError
from linear_agent.schemas.issue import CreateIssueInput, SearchIssuesInput, UpdateIssueInput
from linear_agent.services.issue_service import IssueService
from linear_agent.services.project_service import ProjectService
from linear_agent.schemas.project import ProjectInput


@pytest.fixture
def mock_provider():
    provider = MagicMock()
    provider.create_issue = AsyncMock()
    provider.create_issues = AsyncMock()
    provider.update_issue = AsyncMock()
    provider.update_issues = AsyncMock()
    provider.search_issues = AsyncMock()
    provider.delete_issue = AsyncMock()
    provider.create_project_with_issues = AsyncMock()
    return provider


def _issue(title="Fix login"):
    return CreateIssueInput(title=title, description="desc", team_id="team-1")


class TestIssueService:
    @pytest.mark.asyncio
    async def test_create_issue_success(self, mock_provider):
        mock_provider.create_issue.return_value = {
            "issueCreate": {
                "success": True,
                "issue": {
                    "identifier": "ENG-1",
                    "title": "Fix login",
                    "url": "https://linear.app/x/issue/ENG-1",
                    "project": None,
                },
            }
        }

        text = await IssueService(mock_provider).create_issue(_issue())

        assert "ENG-1" in text
        assert "https://linear.app/x/issue/ENG-1" in text
        assert "Project: None" in text

    @pytest.mark.asyncio
    async def test_create_issue_failure(self, mock_provider):
        mock_provider.create_issue.return_value = {"issueCreate": {"success": False}}

        with pytest.raises(DomainError, match="Failed to create issue"):
            await IssueService(mock_provider).create_issue(_issue())

    @pytest.mark.asyncio
    async def test_create_issues_lists_each_issue(self, mock_provider):
        mock_provider.create_issues.return_value = {
            "issueBatchCreate": {
                "success": True,
                "issues": [
                    {"identifier": "ENG-1", "title": "A", "url": "u1"},
                    {"identifier": "ENG-2", "title": "B", "url": "u2"},
                ],
            }
        }

        text = await IssueService(mock_provider).create_issues([_issue("A"), _issue("B")])

        assert text.startswith("Successfully created 2 issues")
        assert "ENG-1: A" in text
        assert "ENG-2: B" in text

    @pytest.mark.asyncio
    async def test_create_issues_empty(self, mock_provider):
        with pytest.raises(ValueError):
            await IssueService(mock_provider).create_issues([])

        mock_provider.create_issues.assert_not_called()

    @pytest.mark.asyncio
    async def test_bulk_update(self, mock_provider):
        mock_provider.update_issues.return_value = {
            "issueBatchUpdate": {"success": True, "issues": [{"id": "i1"}, {"id": "i2"}]}
        }

        text = await IssueService(mock_provider).bulk_update_issues(
            ["i1", "i2"], UpdateIssueInput(priority=2)
        )

        assert text == "Successfully updated 2 issues"

    @pytest.mark.asyncio
    async def test_bulk_update_empty_ids(self, mock_provider):
        with pytest.raises(ValueError):
            await IssueService(mock_provider).bulk_update_issues([], UpdateIssueInput())

    @pytest.mark.asyncio
    async def test_update_issue_failure(self, mock_provider):
        mock_provider.update_issue.return_value = {"issueUpdate": {"success": False}}

        with pytest.raises(DomainError, match="Failed to update issue"):
            await IssueService(mock_provider).update_issue("i1", UpdateIssueInput(title="x"))

    @pytest.mark.asyncio
    async def test_delete_issue(self, mock_provider):
        mock_provider.delete_issue.return_value = {"issueDelete": {"success": True}}

        text = await IssueService(mock_provider).delete_issue("i1")

        assert text == "Successfully deleted issue i1"

    @pytest.mark.asyncio
    async def test_search_is_passthrough(self, mock_provider):
        payload = {"issues": {"nodes": [], "pageInfo": {"hasNextPage": False}}}
        mock_provider.search_issues.return_value = payload
        args = SearchIssuesInput(query="crash")

        result = await IssueService(mock_provider).search_issues(args, first=5)

        assert result is payload
        mock_provider.search_issues.assert_awaited_once_with(
            args, first=5, after=None, order_by="updatedAt"
        )


class TestProjectService:
    @pytest.mark.asyncio
    async def test_create_project_with_issues(self, mock_provider):
        mock_provider.create_project_with_issues.return_value = {
            "projectCreate": {
                "success": True,
                "project": {"id": "p1", "name": "Q3", "url": "https://linear.app/p1"},
            },
            "issueBatchCreate": {
                "success": True,
                "issues": [{"identifier": "ENG-1", "title": "A"}],
            },
        }

        text = await ProjectService(mock_provider).create_project_with_issues(
            ProjectInput(name="Q3", team_ids=["team-1"]), [_issue("A")]
        )

        assert "Successfully created project with 1 issues" in text
        assert "Project: Q3" in text
        assert "ENG-1: A" in text
