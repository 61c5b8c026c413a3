import enum
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from linear_agent.core.executor import OperationExecutor
from linear_agent.graphql import (
    GET_ISSUE_LABELS_QUERY,
    GET_WORKFLOW_STATES_QUERY,
    GraphQLDocument,
)

logger = logging.getLogger(__name__)


class ResourceKind(str, enum.Enum):
    WORKFLOW_STATES = "workflow_states"
    ISSUE_LABELS = "issue_labels"


_DOCUMENTS: Dict[ResourceKind, GraphQLDocument] = {
    ResourceKind.WORKFLOW_STATES: GET_WORKFLOW_STATES_QUERY,
    ResourceKind.ISSUE_LABELS: GET_ISSUE_LABELS_QUERY,
}


@dataclass
class CacheEntry:
    data: Dict[str, Any]
    timestamp: float


class ReferenceDataCache:
    """
    参考数据缓存（workflow states / issue labels）

    - 两类资源各占一个槽位，互不影响
    - 未过期且非强制刷新时直接返回缓存，不发请求
    - 刷新失败时保留旧条目并向上抛出异常，不会用过期数据兜底
    """

    TTL = 30 * 60  # 30分钟

    def __init__(self, executor: OperationExecutor, ttl: Optional[float] = None):
        self.executor = executor
        self.ttl = self.TTL if ttl is None else ttl
        self._entries: Dict[ResourceKind, CacheEntry] = {}
        logger.debug("ReferenceDataCache initialized with TTL=%d seconds", self.ttl)

    async def get_or_refresh(
        self, kind: ResourceKind, force_refresh: bool = False
    ) -> Dict[str, Any]:
        entry = self._entries.get(kind)
        now = time.time()

        if not force_refresh and entry is not None and now - entry.timestamp < self.ttl:
            logger.debug(
                "Cache hit: kind=%s, age=%.0fs", kind.value, now - entry.timestamp
            )
            return entry.data

        logger.debug(
            "Cache %s: kind=%s",
            "bypass" if force_refresh else "miss",
            kind.value,
        )
        data = await self.executor.execute(_DOCUMENTS[kind])
        self._entries[kind] = CacheEntry(data=data, timestamp=now)
        return data

    def get_entry(self, kind: ResourceKind) -> Optional[CacheEntry]:
        return self._entries.get(kind)

    def invalidate(self, kind: ResourceKind) -> None:
        if self._entries.pop(kind, None) is not None:
            logger.debug("Cache invalidated: kind=%s", kind.value)

    def clear(self):
        cache_size = len(self._entries)
        self._entries.clear()
        logger.info("Cache cleared: removed %d entries", cache_size)
