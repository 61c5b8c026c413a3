from typing import Any, Dict, List, Optional
import logging

from linear_agent.core.exceptions import DomainError
from linear_agent.providers.linear.linear_provider import LinearProvider
from linear_agent.schemas.issue import (
    CreateIssueInput,
    SearchIssuesInput,
    UpdateIssueInput,
)

logger = logging.getLogger(__name__)


def _format_issue_line(issue: Dict[str, Any]) -> str:
    return f"- {issue.get('identifier')}: {issue.get('title')}\n  URL: {issue.get('url')}"


class IssueService:
    """
    Issue 业务服务 (Application Layer)
    负责解释 payload 中的 success 标志，并把结果整理成面向 Agent 的文本。
    """

    def __init__(self, provider: LinearProvider):
        self.provider = provider

    async def create_issue(self, input: CreateIssueInput) -> str:
        """
        创建一个 Issue
        :return: 成功消息，包含 identifier 和 URL
        """
        logger.info(
            "Creating issue: team_id=%s, title_len=%d", input.team_id, len(input.title)
        )
        result = await self.provider.create_issue(input)
        payload = result.get("issueCreate") or {}
        issue = payload.get("issue")
        if not payload.get("success") or not issue:
            raise DomainError("Failed to create issue", payload)

        project = issue.get("project")
        logger.info("Issue created successfully: %s", issue.get("identifier"))
        return (
            "Successfully created issue\n"
            f"Issue: {issue.get('identifier')}\n"
            f"Title: {issue.get('title')}\n"
            f"URL: {issue.get('url')}\n"
            f"Project: {project['name'] if project else 'None'}"
        )

    async def create_issues(self, issues: List[CreateIssueInput]) -> str:
        """批量创建 Issue"""
        if not issues:
            raise ValueError("issues 不能为空")

        result = await self.provider.create_issues(issues)
        payload = result.get("issueBatchCreate") or {}
        if not payload.get("success"):
            raise DomainError("Failed to create issues", payload)

        created = payload.get("issues") or []
        logger.info("Created %d issues", len(created))
        return f"Successfully created {len(created)} issues:\n" + "\n".join(
            _format_issue_line(issue) for issue in created
        )

    async def update_issue(self, issue_id: str, input: UpdateIssueInput) -> str:
        result = await self.provider.update_issue(issue_id, input)
        payload = result.get("issueUpdate") or {}
        if not payload.get("success"):
            raise DomainError("Failed to update issue", payload)

        issue = payload.get("issue") or {}
        return f"Successfully updated issue {issue.get('identifier', issue_id)}"

    async def bulk_update_issues(
        self, issue_ids: List[str], input: UpdateIssueInput
    ) -> str:
        """批量更新 Issue（同一组字段应用到所有 issue）"""
        if not issue_ids:
            raise ValueError("issue_ids 不能为空")

        result = await self.provider.update_issues(issue_ids, input)
        payload = result.get("issueBatchUpdate") or {}
        if not payload.get("success"):
            raise DomainError("Failed to update issues", payload)

        return f"Successfully updated {len(payload.get('issues') or [])} issues"

    async def search_issues(
        self,
        args: SearchIssuesInput,
        first: int = 50,
        after: Optional[str] = None,
        order_by: str = "updatedAt",
    ) -> Dict[str, Any]:
        return await self.provider.search_issues(
            args, first=first, after=after, order_by=order_by
        )

    async def delete_issue(self, issue_id: str) -> str:
        result = await self.provider.delete_issue(issue_id)
        payload = result.get("issueDelete") or {}
        if not payload.get("success"):
            raise DomainError("Failed to delete issue", payload)

        logger.info("Issue deleted: id=%s", issue_id)
        return f"Successfully deleted issue {issue_id}"
