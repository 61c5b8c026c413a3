from typing import Optional

from pydantic import BaseModel

from linear_agent.schemas.base import GraphQLInput


class TeamRef(BaseModel):
    id: str
    name: Optional[str] = None

    model_config = {"extra": "ignore"}


class Label(BaseModel):
    id: str
    name: str
    team: Optional[TeamRef] = None

    # Allow extra fields for forward compatibility
    model_config = {"extra": "ignore"}


class IssueLabelCreateInput(GraphQLInput):
    name: str
    team_id: str
    color: Optional[str] = None
    description: Optional[str] = None
