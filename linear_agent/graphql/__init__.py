"""
GraphQL 文档注册表

所有 query / mutation 在导入时构造一次，之后只读复用。

使用示例:
    from linear_agent.graphql import get_document, GET_TEAMS_QUERY

    document = get_document("GetTeams")
    assert document is GET_TEAMS_QUERY
"""

from .documents import GraphQLDocument, build_registry
from .mutations import (
    ALL_MUTATIONS,
    CREATE_BATCH_ISSUES_MUTATION,
    CREATE_ISSUE_LABEL_MUTATION,
    CREATE_ISSUE_MUTATION,
    CREATE_PROJECT_MUTATION,
    DELETE_ISSUE_MUTATION,
    UPDATE_BATCH_ISSUES_MUTATION,
    UPDATE_ISSUE_MUTATION,
)
from .queries import (
    ALL_QUERIES,
    FILTER_PROJECTS_QUERY,
    GET_ISSUE_LABEL_QUERY,
    GET_ISSUE_LABELS_QUERY,
    GET_PROJECT_QUERY,
    GET_TEAMS_QUERY,
    GET_USER_QUERY,
    GET_WORKFLOW_STATES_QUERY,
    SEARCH_ISSUES_QUERY,
    SEARCH_PROJECTS_QUERY,
)

DOCUMENTS = build_registry(ALL_QUERIES, ALL_MUTATIONS)


def get_document(name: str) -> GraphQLDocument:
    """按操作名获取文档，未注册时抛出 KeyError"""
    try:
        return DOCUMENTS[name]
    except KeyError:
        raise KeyError(
            f"Unknown GraphQL document: {name}. Available: {sorted(DOCUMENTS)}"
        ) from None


__all__ = [
    "DOCUMENTS",
    "GraphQLDocument",
    "get_document",
    "CREATE_BATCH_ISSUES_MUTATION",
    "CREATE_ISSUE_LABEL_MUTATION",
    "CREATE_ISSUE_MUTATION",
    "CREATE_PROJECT_MUTATION",
    "DELETE_ISSUE_MUTATION",
    "UPDATE_BATCH_ISSUES_MUTATION",
    "UPDATE_ISSUE_MUTATION",
    "FILTER_PROJECTS_QUERY",
    "GET_ISSUE_LABEL_QUERY",
    "GET_ISSUE_LABELS_QUERY",
    "GET_PROJECT_QUERY",
    "GET_TEAMS_QUERY",
    "GET_USER_QUERY",
    "GET_WORKFLOW_STATES_QUERY",
    "SEARCH_ISSUES_QUERY",
    "SEARCH_PROJECTS_QUERY",
]
