"""
Issue 搜索条件 -> Linear IssueFilter 的转换

纯函数，不发请求。每个可选字段对应一个显式分支：
标量使用 eq，列表使用 in；未提供（None）的字段完全省略（不写 null 占位）。
空列表会保留为 {"in": []}，即不匹配任何 issue；空字符串的 query / project_id 视为未提供。
"""

from typing import Any, Dict

from linear_agent.schemas.issue import SearchIssuesInput


def build_issue_filter(args: SearchIssuesInput) -> Dict[str, Any]:
    """
    构造 Linear IssueFilter

    Args:
        args: 结构化搜索条件

    Returns:
        filter 字典，无任何条件时为 {}

    Examples:
        >>> build_issue_filter(SearchIssuesInput(priority=2))
        {'priority': {'eq': 2}}
    """
    issue_filter: Dict[str, Any] = {}

    if args.query:
        issue_filter["search"] = args.query
    if args.ids is not None:
        issue_filter["id"] = {"in": list(args.ids)}
    if args.project_id:
        issue_filter["project"] = {"id": {"eq": args.project_id}}
    if args.team_ids is not None:
        issue_filter["team"] = {"id": {"in": list(args.team_ids)}}
    if args.assignee_ids is not None:
        issue_filter["assignee"] = {"id": {"in": list(args.assignee_ids)}}
    if args.state_ids is not None:
        issue_filter["state"] = {"id": {"in": list(args.state_ids)}}
    if args.label_ids is not None:
        issue_filter["labels"] = {"id": {"in": list(args.label_ids)}}
    # priority=0（无优先级）同样是有效条件
    if args.priority is not None:
        issue_filter["priority"] = {"eq": args.priority}

    return issue_filter
