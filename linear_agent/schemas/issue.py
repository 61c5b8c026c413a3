from typing import List, Optional

from linear_agent.schemas.base import GraphQLInput


class CreateIssueInput(GraphQLInput):
    title: str
    description: str
    team_id: str
    assignee_id: Optional[str] = None
    priority: Optional[int] = None  # 0=无, 1=紧急, 2=高, 3=中, 4=低
    project_id: Optional[str] = None
    state_id: Optional[str] = None
    label_ids: Optional[List[str]] = None


class UpdateIssueInput(GraphQLInput):
    title: Optional[str] = None
    description: Optional[str] = None
    assignee_id: Optional[str] = None
    priority: Optional[int] = None
    project_id: Optional[str] = None
    state_id: Optional[str] = None


class SearchIssuesInput(GraphQLInput):
    """结构化的 issue 搜索条件，所有字段均可选"""

    query: Optional[str] = None
    ids: Optional[List[str]] = None
    project_id: Optional[str] = None
    team_ids: Optional[List[str]] = None
    assignee_ids: Optional[List[str]] = None
    state_ids: Optional[List[str]] = None
    label_ids: Optional[List[str]] = None
    priority: Optional[int] = None
