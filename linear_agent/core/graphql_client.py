"""
Linear GraphQL 传输层

负责认证注入与单次 HTTP 往返，不理解具体的 query/mutation。
上层通过 OperationExecutor 调用 raw_request。
"""

import logging
import threading
from typing import Any, Dict, List, Optional

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from linear_agent.core.config import settings

logger = logging.getLogger(__name__)

_graphql_client = None
_graphql_client_lock = threading.Lock()  # 线程安全锁

# 仅重试连接建立阶段的异常：此时请求尚未到达服务端，重发不会导致 mutation 重复执行
RETRYABLE_EXCEPTIONS = (
    httpx.ConnectError,
    httpx.ConnectTimeout,
)


def _mask_token(token: str, visible_chars: int = 4) -> str:
    """对 token 进行脱敏处理，仅显示前几个字符"""
    if not token or len(token) <= visible_chars:
        return "***"
    return f"{token[:visible_chars]}***"


class GraphQLTransportError(Exception):
    """GraphQL 请求失败（HTTP 错误或响应体中包含 errors）"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.errors = errors or []


class LinearAuth(httpx.Auth):
    """
    Linear API 认证
    Personal API Key 直接放在 Authorization 头中（无 Bearer 前缀）
    """

    def __init__(self, api_key: str):
        self.api_key = api_key

    def auth_flow(self, request: httpx.Request):
        request.headers["Authorization"] = self.api_key
        yield request


class GraphQLClient:
    """
    Linear GraphQL 异步客户端

    特性:
    - 自动注入认证头 (Authorization)
    - 连接失败自动重试（指数退避）
    - HTTP 错误 / GraphQL errors 统一抛出 GraphQLTransportError
    """

    # 重试配置
    MAX_RETRIES = 3
    RETRY_MIN_WAIT = 1  # 最小等待时间（秒）
    RETRY_MAX_WAIT = 10  # 最大等待时间（秒）

    def __init__(
        self,
        api_key: Optional[str] = None,
        endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        api_key = api_key or settings.LINEAR_API_KEY
        if not api_key:
            raise ValueError(
                "LINEAR_API_KEY 环境变量未配置。"
                "请在 Linear 设置 > API 中创建 Personal API Key 后写入 .env"
            )

        self.endpoint = endpoint or settings.LINEAR_API_URL
        logger.info(
            "Initializing GraphQLClient: endpoint=%s, api_key=%s",
            self.endpoint,
            _mask_token(api_key),
        )
        self.client = httpx.AsyncClient(
            headers={"Content-Type": "application/json"},
            auth=LinearAuth(api_key),
            timeout=httpx.Timeout(timeout or settings.LINEAR_TIMEOUT),
            trust_env=False,  # 禁用环境变量代理，避免 socksio 依赖问题
        )
        logger.debug("GraphQLClient initialized successfully")

    def _get_retry_decorator(self):
        """获取重试装饰器配置"""
        return retry(
            stop=stop_after_attempt(self.MAX_RETRIES),
            wait=wait_exponential(
                multiplier=1, min=self.RETRY_MIN_WAIT, max=self.RETRY_MAX_WAIT
            ),
            retry=retry_if_exception_type(RETRYABLE_EXCEPTIONS),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    async def _post_with_retry(self, payload: Dict[str, Any]) -> httpx.Response:
        @self._get_retry_decorator()
        async def _do_request():
            logger.debug("POST %s", self.endpoint)
            return await self.client.post(self.endpoint, json=payload)

        return await _do_request()

    async def raw_request(
        self, query: str, variables: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        执行一次 GraphQL 请求

        Args:
            query: GraphQL 文档正文
            variables: 变量（可选）

        Returns:
            {"data": ..., "status": int}

        Raises:
            GraphQLTransportError: HTTP 错误、GraphQL errors 或缺少 data 字段
            httpx.HTTPError: 网络层错误（重试耗尽后）
        """
        payload: Dict[str, Any] = {"query": query}
        if variables is not None:
            payload["variables"] = variables

        response = await self._post_with_retry(payload)
        logger.debug("Response status: %d", response.status_code)

        try:
            body = response.json()
        except ValueError:
            body = None

        errors = body.get("errors") if isinstance(body, dict) else None
        if errors:
            messages = "; ".join(e.get("message", "Unknown error") for e in errors)
            logger.error(
                "GraphQL errors (HTTP %d): %s", response.status_code, messages
            )
            raise GraphQLTransportError(
                messages, status_code=response.status_code, errors=errors
            )

        if response.status_code >= 400:
            logger.error(
                "HTTP error %d from %s: %s",
                response.status_code,
                self.endpoint,
                response.text[:200],
            )
            raise GraphQLTransportError(
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        if not isinstance(body, dict) or "data" not in body:
            raise GraphQLTransportError(
                "Response body has no data field", status_code=response.status_code
            )

        return {"data": body["data"], "status": response.status_code}

    async def close(self):
        """关闭客户端连接"""
        logger.info("Closing GraphQLClient connection")
        await self.client.aclose()
        logger.debug("GraphQLClient connection closed")


def get_graphql_client() -> GraphQLClient:
    """
    获取全局单例传输客户端（线程安全）

    使用双重检查锁定模式，防止多线程/多协程并发时重复实例化。

    Returns:
        GraphQLClient: 传输客户端实例

    Raises:
        ValueError: 未配置 LINEAR_API_KEY
    """
    global _graphql_client

    # 快速路径：已初始化则直接返回
    if _graphql_client is not None:
        logger.debug("Reusing existing GraphQLClient singleton instance")
        return _graphql_client

    # 慢路径：使用锁保护初始化
    with _graphql_client_lock:
        # 双重检查：防止等待锁期间其他线程已完成初始化
        if _graphql_client is not None:
            logger.debug(
                "Reusing existing GraphQLClient singleton instance (after lock)"
            )
            return _graphql_client

        logger.debug("Creating new GraphQLClient singleton instance")
        _graphql_client = GraphQLClient()

    return _graphql_client
