"""
AgentLabelManager - 标记标签解析器

每个通过本层创建的 issue 都会自动带上固定的 "agent" 标签。
本管理器负责按团队确保该标签存在，并记住解析结果避免重复查询/创建。

缓存层级:
- Agent-Label Map: team_id -> Label（永久记忆，不过期，只能通过 force_refresh 重新解析）
- 标签列表: 由 ReferenceDataCache 负责，解析路径上总是强制刷新

使用示例:
    manager = AgentLabelManager(executor, cache)

    label = await manager.resolve("team-123")
    # 再次调用命中记忆，不发请求
    label = await manager.resolve("team-123")
"""

import logging
from typing import Any, Dict

from linear_agent.core.cache import ReferenceDataCache, ResourceKind
from linear_agent.core.exceptions import LabelCreationError
from linear_agent.core.executor import OperationExecutor
from linear_agent.graphql import CREATE_ISSUE_LABEL_MUTATION
from linear_agent.schemas.team import IssueLabelCreateInput, Label

logger = logging.getLogger(__name__)

AGENT_LABEL_NAME = "agent"
AGENT_LABEL_DESCRIPTION = "Automation"


class AgentLabelManager:
    """
    标记标签管理器 (Manager Layer)

    核心职责:
    1. 记忆优先: 已解析过的团队直接返回，无网络请求、无过期检查
    2. 查找: 强制刷新标签列表后按名称线性查找
    3. 创建: 找不到时创建标签，成功后写入记忆

    注意:
    - 远端重命名/删除标签后，记忆不会自动感知，需显式 force_refresh
    - 没有锁保护，仅适用于单事件循环
    """

    def __init__(
        self,
        executor: OperationExecutor,
        cache: ReferenceDataCache,
        label_name: str = AGENT_LABEL_NAME,
    ):
        self.executor = executor
        self.cache = cache
        self.label_name = label_name

        # Agent-Label Map: team_id -> Label
        self._agent_labels: Dict[str, Label] = {}

    def get_cached(self, team_id: str) -> Label | None:
        return self._agent_labels.get(team_id)

    async def create_issue_label(self, label: IssueLabelCreateInput) -> Dict[str, Any]:
        """
        创建 issue 标签

        Returns:
            issueLabelCreate payload（原样返回，不检查 success）
        """
        return await self.executor.execute(
            CREATE_ISSUE_LABEL_MUTATION, {"input": label.to_variables()}
        )

    async def resolve(self, team_id: str, force_refresh: bool = False) -> Label:
        """
        获取或创建团队的标记标签

        Args:
            team_id: 团队 ID
            force_refresh: 是否跳过记忆重新解析

        Returns:
            标记标签

        Raises:
            GraphQLOperationError: 查询或创建请求失败
            LabelCreationError: 创建 mutation 返回 success=false
        """
        if not force_refresh:
            cached = self._agent_labels.get(team_id)
            if cached is not None:
                logger.debug("Agent label memo hit: team_id=%s", team_id)
                return cached

        # 总是绕过标签缓存，避免标签刚在别处创建后仍返回"不存在"
        labels = await self.cache.get_or_refresh(
            ResourceKind.ISSUE_LABELS, force_refresh=True
        )
        nodes = labels.get("issueLabels", {}).get("nodes", [])
        found = next((n for n in nodes if n.get("name") == self.label_name), None)

        if found is not None:
            label = Label.model_validate(found)
            self._agent_labels[team_id] = label
            logger.info(
                "Agent label found: team_id=%s, label_id=%s", team_id, label.id
            )
            return label

        logger.info(
            "Agent label '%s' not found, creating for team_id=%s",
            self.label_name,
            team_id,
        )
        result = await self.create_issue_label(
            IssueLabelCreateInput(
                name=self.label_name,
                team_id=team_id,
                description=AGENT_LABEL_DESCRIPTION,
            )
        )
        payload = result.get("issueLabelCreate") or {}
        if not payload.get("success") or not payload.get("issueLabel"):
            logger.error(
                "Failed to create agent label: team_id=%s, payload=%s",
                team_id,
                payload,
            )
            raise LabelCreationError(self.label_name, team_id, payload)

        label = Label.model_validate(payload["issueLabel"])
        self._agent_labels[team_id] = label
        logger.info(
            "Agent label created: team_id=%s, label_id=%s", team_id, label.id
        )
        return label
