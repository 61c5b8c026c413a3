from typing import List, Optional

from pydantic import Field

from linear_agent.schemas.base import GraphQLInput


class ProjectInput(GraphQLInput):
    name: str
    description: Optional[str] = None
    # Linear 要求 teamIds（数组）而不是单个 teamId
    team_ids: List[str] = Field(min_length=1)
    state: Optional[str] = None
