import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from linear_agent.core.cache import ReferenceDataCache, ResourceKind
from linear_agent.core.exceptions import IssueBatchCreationError, ProjectCreationError
from linear_agent.core.executor import OperationExecutor, Transport
from linear_agent.core.graphql_client import get_graphql_client
from linear_agent.graphql import (
    CREATE_BATCH_ISSUES_MUTATION,
    CREATE_ISSUE_MUTATION,
    CREATE_PROJECT_MUTATION,
    DELETE_ISSUE_MUTATION,
    FILTER_PROJECTS_QUERY,
    GET_ISSUE_LABEL_QUERY,
    GET_PROJECT_QUERY,
    GET_TEAMS_QUERY,
    GET_USER_QUERY,
    SEARCH_ISSUES_QUERY,
    SEARCH_PROJECTS_QUERY,
    UPDATE_BATCH_ISSUES_MUTATION,
    UPDATE_ISSUE_MUTATION,
)
from linear_agent.providers.linear.filters import build_issue_filter
from linear_agent.providers.linear.managers import AgentLabelManager
from linear_agent.schemas.issue import (
    CreateIssueInput,
    SearchIssuesInput,
    UpdateIssueInput,
)
from linear_agent.schemas.project import ProjectInput
from linear_agent.schemas.team import IssueLabelCreateInput, Label

logger = logging.getLogger(__name__)


class LinearProvider:
    """
    Linear 操作门面 (Provider Layer)
    串联 OperationExecutor、ReferenceDataCache 与 AgentLabelManager

    设计说明:
    - 缓存与标签记忆属于实例状态，多个 Provider 之间互不共享
    - 单次调用的封装不检查 payload 中的 success 标志，原样返回
    - 只有 create_project_with_issues 会根据 success 标志做流程控制
    """

    def __init__(self, transport: Optional[Transport] = None):
        self.executor = OperationExecutor(transport or get_graphql_client())
        self.cache = ReferenceDataCache(self.executor)
        self.labels = AgentLabelManager(self.executor, self.cache)

    # ========== Labels ==========

    async def create_issue_label(self, label: IssueLabelCreateInput) -> Dict[str, Any]:
        return await self.labels.create_issue_label(label)

    async def create_or_get_agent_label(
        self, team_id: str, force_refresh: bool = False
    ) -> Label:
        return await self.labels.resolve(team_id, force_refresh=force_refresh)

    async def get_labels(self, force_refresh: bool = False) -> Dict[str, Any]:
        return await self.cache.get_or_refresh(
            ResourceKind.ISSUE_LABELS, force_refresh=force_refresh
        )

    async def get_label(self, label_id: str) -> Dict[str, Any]:
        return await self.executor.execute(GET_ISSUE_LABEL_QUERY, {"id": label_id})

    # ========== Issues ==========

    async def create_issue(self, input: CreateIssueInput) -> Dict[str, Any]:
        """
        创建单个 issue，并自动追加 agent 标签（已有标签在前，agent 标签在后）

        注意: 会原地修改 input.label_ids
        """
        label = await self.labels.resolve(input.team_id)
        input.label_ids = [*(input.label_ids or []), label.id]
        logger.info(
            "Creating issue: team_id=%s, label_count=%d",
            input.team_id,
            len(input.label_ids),
        )
        return await self.executor.execute(
            CREATE_ISSUE_MUTATION, {"input": input.to_variables()}
        )

    async def create_issues(self, issues: List[CreateIssueInput]) -> Dict[str, Any]:
        """
        批量创建 issue，并为每个 issue 自动追加其团队的 agent 标签

        每个不同的 team_id 并发解析一次标签；任一解析失败则整批放弃，不发 mutation。
        注意: 会原地修改每个 issue 的 label_ids
        """
        team_ids = list(dict.fromkeys(issue.team_id for issue in issues))
        labels = await asyncio.gather(
            *(self.labels.resolve(team_id) for team_id in team_ids)
        )
        label_by_team = dict(zip(team_ids, labels))

        for issue in issues:
            issue.label_ids = [*(issue.label_ids or []), label_by_team[issue.team_id].id]

        logger.info(
            "Creating %d issues across %d teams", len(issues), len(team_ids)
        )
        return await self.create_batch_issues(issues)

    async def create_batch_issues(
        self, issues: List[CreateIssueInput]
    ) -> Dict[str, Any]:
        """批量创建 issue（不追加标签）"""
        return await self.executor.execute(
            CREATE_BATCH_ISSUES_MUTATION,
            {"input": {"issues": [issue.to_variables() for issue in issues]}},
        )

    async def update_issue(
        self, issue_id: str, input: UpdateIssueInput
    ) -> Dict[str, Any]:
        return await self.executor.execute(
            UPDATE_ISSUE_MUTATION, {"id": issue_id, "input": input.to_variables()}
        )

    async def update_issues(
        self, issue_ids: List[str], input: UpdateIssueInput
    ) -> Dict[str, Any]:
        return await self.executor.execute(
            UPDATE_BATCH_ISSUES_MUTATION,
            {"ids": list(issue_ids), "input": input.to_variables()},
        )

    async def delete_issue(self, issue_id: str) -> Dict[str, Any]:
        return await self.executor.execute(DELETE_ISSUE_MUTATION, {"id": issue_id})

    async def search_issues(
        self,
        args: SearchIssuesInput,
        first: int = 50,
        after: Optional[str] = None,
        order_by: str = "updatedAt",
    ) -> Dict[str, Any]:
        """
        按结构化条件搜索 issue

        Args:
            args: 搜索条件，未提供的字段不会出现在 filter 中
            first: 返回条数
            after: 分页游标（原样透传）
            order_by: 排序字段

        Returns:
            issues payload，包含 pageInfo 与 nodes
        """
        issue_filter = build_issue_filter(args)
        logger.debug(
            "Searching issues: filter_keys=%s, first=%d, after=%s, order_by=%s",
            list(issue_filter),
            first,
            after,
            order_by,
        )
        return await self.executor.execute(
            SEARCH_ISSUES_QUERY,
            {
                "filter": issue_filter,
                "first": first,
                "after": after,
                "orderBy": order_by,
            },
        )

    # ========== Projects ==========

    async def create_project(self, input: ProjectInput) -> Dict[str, Any]:
        return await self.executor.execute(
            CREATE_PROJECT_MUTATION, {"input": input.to_variables()}
        )

    async def create_project_with_issues(
        self, project: ProjectInput, issues: List[CreateIssueInput]
    ) -> Dict[str, Any]:
        """
        创建项目并在其下批量创建 issue

        流程:
        1. 创建项目，success=false 或缺少 project 时抛出 ProjectCreationError，不再创建 issue
        2. 将新项目 ID 写入每个 issue 的 project_id（原地修改）
        3. 批量创建 issue，success=false 时抛出 IssueBatchCreationError

        只尝试一次项目创建、最多一次批量创建，不做部分重试。

        Returns:
            {"projectCreate": ..., "issueBatchCreate": ...}
        """
        project_result = await self.create_project(project)
        project_payload = project_result.get("projectCreate") or {}
        created_project = project_payload.get("project")
        if not project_payload.get("success") or not created_project:
            logger.error("Project creation reported failure: %s", project.name)
            raise ProjectCreationError(project_payload)

        project_id = created_project["id"]
        for issue in issues:
            issue.project_id = project_id
        logger.info(
            "Project created: id=%s, creating %d issues", project_id, len(issues)
        )

        issues_result = await self.create_batch_issues(issues)
        issues_payload = issues_result.get("issueBatchCreate") or {}
        if not issues_payload.get("success"):
            logger.error(
                "Issue batch creation reported failure: project_id=%s", project_id
            )
            raise IssueBatchCreationError(issues_payload)

        return {
            "projectCreate": project_payload,
            "issueBatchCreate": issues_payload,
        }

    async def get_project(self, project_id: str) -> Dict[str, Any]:
        return await self.executor.execute(GET_PROJECT_QUERY, {"id": project_id})

    async def search_projects(
        self, term_or_filter: Union[str, Mapping[str, Any]]
    ) -> Dict[str, Any]:
        """
        搜索项目

        Args:
            term_or_filter: 关键词（走 searchProjects）或 ProjectFilter 字典（走 projects）
        """
        if isinstance(term_or_filter, str):
            return await self.executor.execute(
                SEARCH_PROJECTS_QUERY, {"term": term_or_filter}
            )
        return await self.executor.execute(
            FILTER_PROJECTS_QUERY, {"filter": dict(term_or_filter)}
        )

    # ========== Teams / States / Users ==========

    async def get_teams(self) -> Dict[str, Any]:
        return await self.executor.execute(GET_TEAMS_QUERY)

    async def get_states(self, force_refresh: bool = False) -> Dict[str, Any]:
        return await self.cache.get_or_refresh(
            ResourceKind.WORKFLOW_STATES, force_refresh=force_refresh
        )

    async def get_current_user(self) -> Dict[str, Any]:
        return await self.executor.execute(GET_USER_QUERY)
