import logging
from typing import Any, Dict, List

from linear_agent.providers.linear.linear_provider import LinearProvider
from linear_agent.schemas.issue import CreateIssueInput
from linear_agent.schemas.project import ProjectInput

logger = logging.getLogger(__name__)


class ProjectService:
    """Project 业务服务"""

    def __init__(self, provider: LinearProvider):
        self.provider = provider

    async def create_project_with_issues(
        self, project: ProjectInput, issues: List[CreateIssueInput]
    ) -> str:
        """
        创建项目及其下的 issue

        失败时由 Provider 抛出 ProjectCreationError / IssueBatchCreationError
        """
        result = await self.provider.create_project_with_issues(project, issues)
        created_project = result["projectCreate"]["project"]
        created_issues = result["issueBatchCreate"].get("issues") or []

        logger.info(
            "Project %s created with %d issues",
            created_project.get("id"),
            len(created_issues),
        )
        lines = [
            f"Successfully created project with {len(created_issues)} issues",
            f"Project: {created_project.get('name')}",
            f"URL: {created_project.get('url')}",
        ]
        lines.extend(
            f"- {issue.get('identifier')}: {issue.get('title')}"
            for issue in created_issues
        )
        return "\n".join(lines)

    async def get_project(self, project_id: str) -> Dict[str, Any]:
        return await self.provider.get_project(project_id)

    async def search_projects(self, term: str) -> Dict[str, Any]:
        return await self.provider.search_projects(term)
