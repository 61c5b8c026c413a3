from typing import Any, Dict

from linear_agent.providers.linear.linear_provider import LinearProvider


class TeamService:
    """团队、状态、标签与当前用户的只读查询"""

    def __init__(self, provider: LinearProvider):
        self.provider = provider

    async def get_teams(self) -> Dict[str, Any]:
        return await self.provider.get_teams()

    async def get_states(self, force_refresh: bool = False) -> Dict[str, Any]:
        return await self.provider.get_states(force_refresh=force_refresh)

    async def get_labels(self, force_refresh: bool = False) -> Dict[str, Any]:
        return await self.provider.get_labels(force_refresh=force_refresh)

    async def get_user(self) -> Dict[str, Any]:
        return await self.provider.get_current_user()
