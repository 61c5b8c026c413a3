"""
异常定义

层级:
- LinearAgentError: 基类
  - GraphQLOperationError: 传输层失败（网络、认证、查询校验），由 OperationExecutor 统一包装
  - DomainError: 传输成功但 payload 中 success=false 的业务失败
    - ProjectCreationError
    - IssueBatchCreationError
    - LabelCreationError
"""


class LinearAgentError(Exception):
    """linear_agent 所有异常的基类"""

    pass


class GraphQLOperationError(LinearAgentError):
    """GraphQL 操作失败（传输层）"""

    MESSAGE_PREFIX = "GraphQL operation failed"

    def __init__(self, message: str):
        super().__init__(f"{self.MESSAGE_PREFIX}: {message}")
        self.original_message = message


class DomainError(LinearAgentError):
    """远端返回 success=false 的业务失败"""

    def __init__(self, message: str, payload: dict | None = None):
        super().__init__(message)
        self.payload = payload


class ProjectCreationError(DomainError):
    def __init__(self, payload: dict | None = None):
        super().__init__("Failed to create project", payload)


class IssueBatchCreationError(DomainError):
    def __init__(self, payload: dict | None = None):
        super().__init__("Failed to create issues", payload)


class LabelCreationError(DomainError):
    def __init__(self, label_name: str, team_id: str, payload: dict | None = None):
        super().__init__(
            f"Failed to create label '{label_name}' for team {team_id}", payload
        )
        self.label_name = label_name
        self.team_id = team_id
