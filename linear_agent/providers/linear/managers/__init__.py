"""
Linear Manager 层 - 业务编排与缓存管理

核心组件:
- AgentLabelManager: 标记标签解析器，按团队记忆 "agent" 标签
"""

from .label_manager import AGENT_LABEL_NAME, AgentLabelManager

__all__ = [
    "AGENT_LABEL_NAME",
    "AgentLabelManager",
]
