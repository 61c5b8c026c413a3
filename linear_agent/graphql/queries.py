from linear_agent.graphql.documents import query

SEARCH_ISSUES_QUERY = query(
    "SearchIssues",
    """
query SearchIssues(
  $filter: IssueFilter
  $first: Int
  $after: String
  $orderBy: PaginationOrderBy
) {
  issues(filter: $filter, first: $first, after: $after, orderBy: $orderBy) {
    pageInfo {
      hasNextPage
      endCursor
    }
    nodes {
      id
      identifier
      title
      description
      url
      state { id name type color }
      assignee { id name email }
      team { id name key }
      project { id name }
      priority
      labels { nodes { id name color } }
      createdAt
      updatedAt
    }
  }
}
""",
)

GET_TEAMS_QUERY = query(
    "GetTeams",
    """
query GetTeams {
  teams {
    nodes {
      id
      name
      key
      description
      states { nodes { id name type color } }
      labels { nodes { id name color } }
    }
  }
}
""",
)

GET_WORKFLOW_STATES_QUERY = query(
    "WorkflowStates",
    """
query WorkflowStates {
  workflowStates {
    nodes {
      id
      name
      team { id name }
    }
  }
}
""",
)

GET_ISSUE_LABELS_QUERY = query(
    "IssueLabels",
    """
query IssueLabels {
  issueLabels {
    nodes {
      id
      name
      team { id name }
    }
  }
}
""",
)

GET_ISSUE_LABEL_QUERY = query(
    "IssueLabel",
    """
query IssueLabel($id: String!) {
  issueLabel(id: $id) {
    id
    name
    team { id name }
  }
}
""",
)

GET_USER_QUERY = query(
    "GetUser",
    """
query GetUser {
  viewer {
    id
    name
    email
    teams { nodes { id name key } }
  }
}
""",
)

SEARCH_PROJECTS_QUERY = query(
    "SearchProjects",
    """
query SearchProjects($term: String!) {
  searchProjects(term: $term) {
    nodes {
      id
      name
      description
      url
      teams { nodes { id name } }
    }
  }
}
""",
)

# 按结构化 filter 查询项目（如 {"name": {"eq": "Q1 Planning"}}）
FILTER_PROJECTS_QUERY = query(
    "FilterProjects",
    """
query FilterProjects($filter: ProjectFilter) {
  projects(filter: $filter) {
    nodes {
      id
      name
      description
      url
      teams { nodes { id name } }
    }
  }
}
""",
)

GET_PROJECT_QUERY = query(
    "GetProject",
    """
query GetProject($id: String!) {
  project(id: $id) {
    id
    name
    description
    url
    teams { nodes { id name } }
    issues {
      nodes {
        id
        title
        updatedAt
        createdAt
        state { name }
        assignee { id name }
        labels { nodes { name } }
      }
    }
  }
}
""",
)

ALL_QUERIES = (
    SEARCH_ISSUES_QUERY,
    GET_TEAMS_QUERY,
    GET_WORKFLOW_STATES_QUERY,
    GET_ISSUE_LABELS_QUERY,
    GET_ISSUE_LABEL_QUERY,
    GET_USER_QUERY,
    SEARCH_PROJECTS_QUERY,
    FILTER_PROJECTS_QUERY,
    GET_PROJECT_QUERY,
)
