"""
HTTP API 包装器 - 将 MCP Server 的工具包装成 HTTP 服务供 n8n 等调用

启动方式:
    python -m linear_agent.http_server

API 端点:
    POST /call_tool
    请求体: {"tool_name": "get_teams", "parameters": {...}}
    返回: MCP 工具的执行结果
"""

import json
import logging
import sys
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

# =============================================================================
# 日志配置：Stderr + File
# =============================================================================
log_dir = Path("log")
log_dir.mkdir(exist_ok=True)
log_file = log_dir / "agent.log"

formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

# Stderr Handler (用于调试，且不污染 stdout)
stderr_handler = logging.StreamHandler(sys.stderr)
stderr_handler.setFormatter(formatter)

# File Handler (用于持久化)
file_handler = logging.FileHandler(log_file, encoding="utf-8")
file_handler.setFormatter(formatter)

logging.basicConfig(
    level=logging.INFO,
    handlers=[stderr_handler, file_handler],
    force=True,
)

# 确保 Uvicorn 的日志也去 stderr 和文件，而不是 stdout
for logger_name in ["uvicorn", "uvicorn.error", "uvicorn.access"]:
    logger_obj = logging.getLogger(logger_name)
    logger_obj.handlers = [stderr_handler, file_handler]
    logger_obj.propagate = False

logger = logging.getLogger(__name__)
logger.info("Logging configured. Log file: %s", log_file.absolute())

from linear_agent.core.config import settings  # noqa: E402


# =============================================================================
# 工具注册表 - 集中管理所有可用工具
# =============================================================================
@dataclass
class ToolDefinition:
    """工具定义"""

    name: str
    description: str
    func: Callable[..., Awaitable[str]]


# 延迟导入工具函数，避免循环依赖
def _get_tool_registry() -> dict[str, ToolDefinition]:
    """获取工具注册表（延迟加载）"""
    from linear_agent import mcp_server

    tools = [
        ("create_issue", "创建 issue（自动追加 agent 标签）"),
        ("create_issues", "批量创建 issue（自动追加 agent 标签）"),
        ("update_issue", "更新单个 issue"),
        ("bulk_update_issues", "批量更新 issue"),
        ("search_issues", "按条件搜索 issue"),
        ("delete_issue", "删除 issue"),
        ("create_project_with_issues", "创建项目并批量创建其下 issue"),
        ("get_project", "获取项目详情"),
        ("search_projects", "按关键词搜索项目"),
        ("get_teams", "列出团队及其状态和标签"),
        ("get_states", "列出工作流状态"),
        ("get_labels", "列出 issue 标签"),
        ("get_user", "获取当前用户信息"),
    ]
    return {
        name: ToolDefinition(
            name=name, description=description, func=getattr(mcp_server, name)
        )
        for name, description in tools
    }


# 缓存注册表
_tool_registry: dict[str, ToolDefinition] | None = None


def get_tool_registry() -> dict[str, ToolDefinition]:
    """获取工具注册表（带缓存）"""
    global _tool_registry
    if _tool_registry is None:
        _tool_registry = _get_tool_registry()
    return _tool_registry


class ToolCallRequest(BaseModel):
    """工具调用请求模型"""

    tool_name: str
    parameters: dict[str, Any] = {}


class ToolCallResponse(BaseModel):
    """工具调用响应模型"""

    success: bool
    data: Any = None
    error: str | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    logger.info("Starting HTTP wrapper for MCP Server")
    yield
    logger.info("Shutting down HTTP wrapper")


app = FastAPI(
    title="Linear MCP Server HTTP Wrapper",
    description="将 Linear MCP Server 包装成 HTTP API 供外部调用",
    version="0.1.0",
    lifespan=lifespan,
)


def _normalize_parameters(parameters: dict[str, Any]) -> dict[str, Any]:
    """
    标准化工具参数类型

    将 JSON 中可能传为字符串的数值/布尔参数转换为正确类型。
    """
    int_fields = {"priority", "first"}
    bool_fields = {"force_refresh"}

    normalized = {}
    for key, value in parameters.items():
        if key in int_fields and isinstance(value, str) and value.strip():
            try:
                normalized[key] = int(value)
            except ValueError:
                normalized[key] = value
        elif key in bool_fields and isinstance(value, str):
            normalized[key] = value.strip().lower() in ("1", "true", "yes")
        else:
            normalized[key] = value
    return normalized


async def call_mcp_tool(tool_name: str, parameters: dict[str, Any]) -> Any:
    """
    调用 MCP 工具
    """
    logger.info("Calling MCP tool: %s with params: %s", tool_name, list(parameters))

    registry = get_tool_registry()
    tool_def = registry.get(tool_name)
    if tool_def is None:
        raise ValueError(f"不支持的工具: {tool_name}。支持的工具: {list(registry)}")

    result = await tool_def.func(**_normalize_parameters(parameters))

    # MCP 工具返回字符串：JSON 则解析，否则包装为 message
    if isinstance(result, str):
        try:
            return json.loads(result)
        except json.JSONDecodeError:
            return {"message": result}
    return result


@app.post("/call_tool", response_model=ToolCallResponse)
async def call_tool(request: ToolCallRequest):
    """
    调用 MCP 工具的 HTTP 接口
    """
    registry = get_tool_registry()
    if request.tool_name not in registry:
        raise HTTPException(
            status_code=400,
            detail=f"不支持的工具: {request.tool_name}。支持的工具: {list(registry)}",
        )

    try:
        result = await call_mcp_tool(request.tool_name, request.parameters)
        return ToolCallResponse(success=True, data=result)
    except (TypeError, ValueError) as e:
        # 参数名错误或类型错误
        logger.warning("Validation error: %s", e)
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Internal error: %s", e, exc_info=True)
        return ToolCallResponse(success=False, error=f"调用工具失败: {str(e)}")


@app.get("/health")
async def health_check():
    """健康检查接口"""
    return {"status": "healthy", "service": "linear-mcp-http-wrapper"}


@app.get("/tools")
async def list_available_tools():
    """获取可用工具列表"""
    registry = get_tool_registry()
    tools = [
        {"name": tool_def.name, "description": tool_def.description}
        for tool_def in registry.values()
    ]
    return {"tools": tools, "count": len(tools)}


def main():
    """启动 HTTP 包装器服务器"""
    import uvicorn

    # 强制将 stdout 重定向到 stderr，防止任何库（如 uvicorn）污染 stdout
    original_stdout = sys.stdout
    sys.stdout = sys.stderr

    logger.info(
        "Starting HTTP wrapper server on http://%s:%d",
        settings.HTTP_HOST,
        settings.HTTP_PORT,
    )

    try:
        # log_config=None 让 uvicorn 继承上面配置好的 logging
        uvicorn.run(
            "linear_agent.http_server:app",
            host=settings.HTTP_HOST,
            port=settings.HTTP_PORT,
            reload=False,
            log_config=None,
        )
    finally:
        sys.stdout = original_stdout


if __name__ == "__main__":
    main()
