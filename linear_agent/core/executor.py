import logging
from typing import Any, Dict, Optional, Protocol

from linear_agent.core.exceptions import GraphQLOperationError
from linear_agent.graphql import GraphQLDocument

logger = logging.getLogger(__name__)


class Transport(Protocol):
    async def raw_request(
        self, query: str, variables: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]: ...


class OperationExecutor:
    """
    GraphQL 操作执行器

    每次调用恰好发起一次 raw_request，返回响应中的 data 字段（不做结构校验）。
    传输层的任何 Exception 以及缺少 data 字段的响应统一包装为 GraphQLOperationError；
    非 Exception（如 asyncio.CancelledError）原样抛出。
    """

    def __init__(self, transport: Transport):
        self.transport = transport

    async def execute(
        self,
        document: GraphQLDocument,
        variables: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        logger.debug(
            "Executing %s %s: variables=%s",
            document.operation,
            document.name,
            list(variables) if variables else [],
        )
        try:
            response = await self.transport.raw_request(document.body, variables)
        except Exception as e:
            logger.error("%s %s failed: %s", document.operation, document.name, e)
            raise GraphQLOperationError(str(e)) from e

        if not isinstance(response, dict) or "data" not in response:
            logger.error(
                "%s %s returned no data field", document.operation, document.name
            )
            raise GraphQLOperationError("Response has no data field")

        return response["data"]
