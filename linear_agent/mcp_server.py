"""
MCP Server - Linear Agent 工具接口

提供给 LLM 调用的工具集，用于操作 Linear 中的 issue、项目与团队。

工具列表:
- create_issue: 创建单个 issue（自动打上 agent 标签）
- create_issues: 批量创建 issue（自动打上 agent 标签）
- update_issue / bulk_update_issues: 更新 issue
- search_issues: 按条件搜索 issue（支持分页游标）
- delete_issue: 删除 issue
- create_project_with_issues: 创建项目并批量创建其下 issue
- get_project / search_projects: 项目查询
- get_teams / get_states / get_labels / get_user: 参考数据查询

重要说明:
- 所有 ID 均为 Linear 的 UUID，可先调用 get_teams / get_states / get_labels 获取
- team_id 未提供时使用环境变量 LINEAR_TEAM_ID
"""

import json
import logging
import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from linear_agent.core.config import settings
from linear_agent.core.exceptions import LinearAgentError
from linear_agent.providers.linear.linear_provider import LinearProvider
from linear_agent.schemas.issue import (
    CreateIssueInput,
    SearchIssuesInput,
    UpdateIssueInput,
)
from linear_agent.schemas.project import ProjectInput
from linear_agent.services.issue_service import IssueService
from linear_agent.services.project_service import ProjectService
from linear_agent.services.team_service import TeamService


def _mask_sensitive_in_error(error_msg: str) -> str:
    """
    对错误信息中的敏感数据进行脱敏

    Args:
        error_msg: 原始错误信息

    Returns:
        脱敏后的错误信息
    """
    # Linear Personal API Key
    error_msg = re.sub(r"lin_(api|oauth)_[a-zA-Z0-9]+", r"lin_\1_***", error_msg)
    # 替换 token/secret/key 相关的敏感值 (case insensitive)
    error_msg = re.sub(
        r"(?i)(token|secret|api_key|authorization)[=:\s]+[^\s,;\"']+",
        r"\1=***",
        error_msg,
    )
    return error_msg


def _error_response(
    operation: str,
    error_msg: str,
    error_code: Optional[str] = None,
) -> str:
    """
    生成统一的错误响应 JSON

    Args:
        operation: 操作名称，如 "创建 issue"
        error_msg: 错误信息（会自动脱敏）
        error_code: 错误码（可选），如 "ERR_GRAPHQL"、"ERR_VALIDATION"

    Returns:
        JSON 格式的错误响应字符串
    """
    safe_msg = _mask_sensitive_in_error(error_msg)
    response: Dict[str, Any] = {
        "success": False,
        "error": {
            "message": f"{operation}失败: {safe_msg}",
        },
    }
    if error_code:
        response["error"]["code"] = error_code
    return json.dumps(response, ensure_ascii=False, indent=2)


def _success_response(data: Any, message: Optional[str] = None) -> str:
    """生成统一的成功响应 JSON"""
    response: Dict[str, Any] = {
        "success": True,
        "data": data,
    }
    if message:
        response["message"] = message
    return json.dumps(response, ensure_ascii=False, indent=2)


def _extract_safe_error_message(exc: Exception, max_length: int = 200) -> str:
    """从异常中提取安全的错误消息，移除堆栈跟踪"""
    lines = str(exc).split("\n")
    safe_lines = []
    for line in lines:
        if line.strip().startswith(('File "', "Traceback")):
            break
        safe_lines.append(line)

    result = " ".join(safe_lines[:3]).strip()
    return result[:max_length]


def _handle_error(operation: str, exc: Exception) -> str:
    """将异常转换为错误响应；未知异常只返回通用信息"""
    if isinstance(exc, ValueError):
        logger.warning("%s: invalid parameters: %s", operation, exc)
        return _error_response(
            operation, _extract_safe_error_message(exc), "ERR_VALIDATION"
        )
    if isinstance(exc, LinearAgentError):
        logger.error("%s: %s", operation, exc)
        return _error_response(
            operation, _extract_safe_error_message(exc), "ERR_LINEAR"
        )
    logger.critical("Unexpected error in %s: %s", operation, exc, exc_info=True)
    return _error_response(operation, "系统内部错误", "ERR_INTERNAL")


# 检查是否已经配置过日志，避免重复配置
if not logging.root.handlers:
    log_dir = Path("log")
    if log_dir.exists() and log_dir.is_dir():
        logging.basicConfig(
            level=settings.get_log_level(),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            filename=str(log_dir / "agent.log"),
            filemode="a",
            encoding="utf-8",
        )
    else:
        # 如果没有 log 目录，输出到 stderr（stdout 是 MCP 的通信通道）
        logging.basicConfig(
            level=settings.get_log_level(),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            stream=sys.stderr,
        )

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("Linear")

# 每个进程一个 Provider：缓存与 agent 标签记忆在所有工具调用间共享
_provider: Optional[LinearProvider] = None


def get_provider() -> LinearProvider:
    global _provider
    if _provider is None:
        logger.debug("Creating LinearProvider for MCP server")
        _provider = LinearProvider()
    return _provider


def reset_provider() -> None:
    """重置 Provider（主要用于测试）"""
    global _provider
    _provider = None


def _resolve_team_id(team_id: Optional[str]) -> str:
    team_id = (team_id or "").strip() or settings.LINEAR_TEAM_ID
    if not team_id:
        raise ValueError("必须提供 team_id，或配置环境变量 LINEAR_TEAM_ID")
    return team_id


@mcp.tool()
async def create_issue(
    title: str,
    description: str,
    team_id: Optional[str] = None,
    assignee_id: Optional[str] = None,
    priority: Optional[int] = None,
    project_id: Optional[str] = None,
    state_id: Optional[str] = None,
    label_ids: Optional[List[str]] = None,
) -> str:
    """
    在 Linear 中创建一个新的 issue。

    系统会自动为 issue 追加 "agent" 标签，用于标识由 Agent 创建的 issue。

    Args:
        title: issue 标题，必填。
        description: issue 描述（Markdown），必填。
        team_id: 团队 ID（可选），不指定时使用 LINEAR_TEAM_ID。
        assignee_id: 负责人用户 ID。
        priority: 优先级，0=无, 1=紧急, 2=高, 3=中, 4=低。
        project_id: 所属项目 ID。
        state_id: 工作流状态 ID（可通过 get_states 获取）。
        label_ids: 额外的标签 ID 列表。

    Returns:
        成功时返回 issue 标识、标题与 URL。
        失败时返回错误信息。

    Examples:
        create_issue(title="修复登录页面崩溃问题", description="SSO 登录后白屏", priority=1)
    """
    try:
        issue = CreateIssueInput(
            title=title,
            description=description,
            team_id=_resolve_team_id(team_id),
            assignee_id=assignee_id,
            priority=priority,
            project_id=project_id,
            state_id=state_id,
            label_ids=label_ids,
        )
        return await IssueService(get_provider()).create_issue(issue)
    except Exception as e:
        return _handle_error("创建 issue", e)


@mcp.tool()
async def create_issues(issues: List[Dict[str, Any]]) -> str:
    """
    批量创建 issue，每个 issue 都会自动追加其团队的 "agent" 标签。

    Args:
        issues: issue 列表，每项字段同 create_issue
                （title, description, teamId/team_id, assigneeId, priority, projectId, stateId, labelIds）。

    Returns:
        成功时返回创建的 issue 列表。
        失败时返回错误信息（任一团队标签解析失败则整批不会创建）。
    """
    try:
        inputs = []
        for item in issues:
            team_id = _resolve_team_id(item.get("team_id") or item.get("teamId"))
            fields = {k: v for k, v in item.items() if k not in ("team_id", "teamId")}
            inputs.append(CreateIssueInput.model_validate({**fields, "team_id": team_id}))
        return await IssueService(get_provider()).create_issues(inputs)
    except Exception as e:
        return _handle_error("批量创建 issue", e)


@mcp.tool()
async def update_issue(
    issue_id: str,
    title: Optional[str] = None,
    description: Optional[str] = None,
    assignee_id: Optional[str] = None,
    priority: Optional[int] = None,
    project_id: Optional[str] = None,
    state_id: Optional[str] = None,
) -> str:
    """
    更新单个 issue，只修改传入的字段。

    Args:
        issue_id: issue ID 或标识（如 "ENG-123"），必填。
        title / description / assignee_id / priority / project_id / state_id: 要修改的字段。
    """
    try:
        update = UpdateIssueInput(
            title=title,
            description=description,
            assignee_id=assignee_id,
            priority=priority,
            project_id=project_id,
            state_id=state_id,
        )
        return await IssueService(get_provider()).update_issue(issue_id, update)
    except Exception as e:
        return _handle_error("更新 issue", e)


@mcp.tool()
async def bulk_update_issues(issue_ids: List[str], update: Dict[str, Any]) -> str:
    """
    批量更新 issue，将同一组字段应用到所有 issue。

    Args:
        issue_ids: issue ID 列表。
        update: 要修改的字段，如 {"stateId": "...", "priority": 2}。
    """
    try:
        update_input = UpdateIssueInput.model_validate(update)
        return await IssueService(get_provider()).bulk_update_issues(
            issue_ids, update_input
        )
    except Exception as e:
        return _handle_error("批量更新 issue", e)


@mcp.tool()
async def search_issues(
    query: Optional[str] = None,
    ids: Optional[List[str]] = None,
    project_id: Optional[str] = None,
    team_ids: Optional[List[str]] = None,
    assignee_ids: Optional[List[str]] = None,
    state_ids: Optional[List[str]] = None,
    label_ids: Optional[List[str]] = None,
    priority: Optional[int] = None,
    first: int = 50,
    after: Optional[str] = None,
    order_by: str = "updatedAt",
) -> str:
    """
    按条件搜索 issue，所有条件均可选，多个条件之间为 AND 关系。

    Args:
        query: 全文关键词。
        ids: 限定 issue ID 列表。
        project_id: 项目 ID。
        team_ids / assignee_ids / state_ids / label_ids: ID 列表。
        priority: 优先级（0-4）。
        first: 返回条数，默认 50。
        after: 分页游标（上一页返回的 pageInfo.endCursor）。
        order_by: 排序字段，updatedAt（默认）或 createdAt。

    Returns:
        JSON 格式的 issue 列表与 pageInfo。
    """
    try:
        args = SearchIssuesInput(
            query=query,
            ids=ids,
            project_id=project_id,
            team_ids=team_ids,
            assignee_ids=assignee_ids,
            state_ids=state_ids,
            label_ids=label_ids,
            priority=priority,
        )
        result = await IssueService(get_provider()).search_issues(
            args, first=first, after=after, order_by=order_by
        )
        return _success_response(result)
    except Exception as e:
        return _handle_error("搜索 issue", e)


@mcp.tool()
async def delete_issue(issue_id: str) -> str:
    """
    删除单个 issue。

    Args:
        issue_id: issue ID，必填。
    """
    try:
        return await IssueService(get_provider()).delete_issue(issue_id)
    except Exception as e:
        return _handle_error("删除 issue", e)


@mcp.tool()
async def create_project_with_issues(
    name: str,
    team_ids: List[str],
    issues: List[Dict[str, Any]],
    description: Optional[str] = None,
) -> str:
    """
    创建项目，并在该项目下批量创建 issue。

    项目创建失败时不会创建任何 issue。

    Args:
        name: 项目名称，必填。
        team_ids: 项目所属团队 ID 列表，至少一个。
        issues: issue 列表，字段同 create_issue（teamId 可省略，默认取 team_ids[0]）。
        description: 项目描述。
    """
    try:
        project = ProjectInput(name=name, description=description, team_ids=team_ids)
        inputs = [
            CreateIssueInput.model_validate({"team_id": team_ids[0], **item})
            for item in issues
        ]
        return await ProjectService(get_provider()).create_project_with_issues(
            project, inputs
        )
    except Exception as e:
        return _handle_error("创建项目", e)


@mcp.tool()
async def get_project(project_id: str) -> str:
    """
    获取项目详情（包含团队与项目下的 issue）。

    Args:
        project_id: 项目 ID，必填。
    """
    try:
        result = await ProjectService(get_provider()).get_project(project_id)
        return _success_response(result)
    except Exception as e:
        return _handle_error("获取项目", e)


@mcp.tool()
async def search_projects(term: str) -> str:
    """
    按关键词搜索项目。

    Args:
        term: 搜索关键词，必填。
    """
    try:
        result = await ProjectService(get_provider()).search_projects(term)
        return _success_response(result)
    except Exception as e:
        return _handle_error("搜索项目", e)


@mcp.tool()
async def get_teams() -> str:
    """
    列出所有团队，以及每个团队的工作流状态和标签。

    当你不知道 team_id / state_id 时，先调用此工具。
    """
    try:
        return _success_response(await TeamService(get_provider()).get_teams())
    except Exception as e:
        return _handle_error("获取团队列表", e)


@mcp.tool()
async def get_states(force_refresh: bool = False) -> str:
    """
    列出所有工作流状态（结果缓存 30 分钟）。

    Args:
        force_refresh: 是否跳过缓存强制刷新。
    """
    try:
        result = await TeamService(get_provider()).get_states(force_refresh)
        return _success_response(result)
    except Exception as e:
        return _handle_error("获取状态列表", e)


@mcp.tool()
async def get_labels(force_refresh: bool = False) -> str:
    """
    列出所有 issue 标签（结果缓存 30 分钟）。

    Args:
        force_refresh: 是否跳过缓存强制刷新。
    """
    try:
        result = await TeamService(get_provider()).get_labels(force_refresh)
        return _success_response(result)
    except Exception as e:
        return _handle_error("获取标签列表", e)


@mcp.tool()
async def get_user() -> str:
    """获取当前 API Key 对应的用户信息及其所属团队。"""
    try:
        return _success_response(await TeamService(get_provider()).get_user())
    except Exception as e:
        return _handle_error("获取用户信息", e)


def main():
    """
    MCP Server 入口点
    """
    logger.info("Starting MCP Server (Linear Agent)")
    logger.info("Log level: %s", settings.LOG_LEVEL)

    try:
        mcp.run()
    except KeyboardInterrupt:
        logger.info("MCP Server stopped by user")
    except Exception as e:
        logger.critical("MCP Server crashed: %s", e, exc_info=True)
        raise


if __name__ == "__main__":
    main()
