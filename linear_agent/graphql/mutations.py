from linear_agent.graphql.documents import mutation

CREATE_ISSUE_MUTATION = mutation(
    "CreateIssue",
    """
mutation CreateIssue($input: IssueCreateInput!) {
  issueCreate(input: $input) {
    success
    issue {
      id
      identifier
      title
      url
      team { id name }
      project { id name }
    }
  }
}
""",
)

CREATE_PROJECT_MUTATION = mutation(
    "CreateProject",
    """
mutation CreateProject($input: ProjectCreateInput!) {
  projectCreate(input: $input) {
    success
    project {
      id
      name
      url
    }
    lastSyncId
  }
}
""",
)

CREATE_BATCH_ISSUES_MUTATION = mutation(
    "CreateBatchIssues",
    """
mutation CreateBatchIssues($input: IssueBatchCreateInput!) {
  issueBatchCreate(input: $input) {
    success
    issues {
      id
      identifier
      title
      url
    }
    lastSyncId
  }
}
""",
)

UPDATE_ISSUE_MUTATION = mutation(
    "UpdateIssue",
    """
mutation UpdateIssue($id: String!, $input: IssueUpdateInput!) {
  issueUpdate(id: $id, input: $input) {
    success
    issue {
      id
      identifier
      title
      url
      project { name }
      state { name }
    }
  }
}
""",
)

UPDATE_BATCH_ISSUES_MUTATION = mutation(
    "UpdateIssues",
    """
mutation UpdateIssues($ids: [UUID!]!, $input: IssueUpdateInput!) {
  issueBatchUpdate(ids: $ids, input: $input) {
    success
    issues {
      id
      identifier
      title
      url
      project { name }
      state { name }
    }
  }
}
""",
)

DELETE_ISSUE_MUTATION = mutation(
    "DeleteIssue",
    """
mutation DeleteIssue($id: String!) {
  issueDelete(id: $id) {
    success
  }
}
""",
)

CREATE_ISSUE_LABEL_MUTATION = mutation(
    "IssueLabelCreate",
    """
mutation IssueLabelCreate($input: IssueLabelCreateInput!) {
  issueLabelCreate(input: $input) {
    success
    issueLabel {
      id
      name
      team { id name }
    }
  }
}
""",
)

ALL_MUTATIONS = (
    CREATE_ISSUE_MUTATION,
    CREATE_PROJECT_MUTATION,
    CREATE_BATCH_ISSUES_MUTATION,
    UPDATE_ISSUE_MUTATION,
    UPDATE_BATCH_ISSUES_MUTATION,
    DELETE_ISSUE_MUTATION,
    CREATE_ISSUE_LABEL_MUTATION,
)
