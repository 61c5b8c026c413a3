from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class GraphQLInput(BaseModel):
    """
    GraphQL 输入对象基类
    Python 侧使用 snake_case，序列化到请求变量时使用 camelCase
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_variables(self) -> Dict[str, Any]:
        # 未设置的可选字段直接省略，不发送 null
        return self.model_dump(by_alias=True, exclude_none=True)
