from dataclasses import dataclass
from typing import Dict, Iterable, Literal


@dataclass(frozen=True)
class GraphQLDocument:
    """具名的 GraphQL 操作文档（query 或 mutation），构造后不可变"""

    name: str
    operation: Literal["query", "mutation"]
    body: str

    def __post_init__(self):
        if self.operation not in ("query", "mutation"):
            raise ValueError(f"Unsupported operation type: {self.operation}")
        if f"{self.operation} {self.name}" not in self.body:
            raise ValueError(
                f"Document body does not declare {self.operation} {self.name}"
            )


def query(name: str, body: str) -> GraphQLDocument:
    return GraphQLDocument(name=name, operation="query", body=body.strip())


def mutation(name: str, body: str) -> GraphQLDocument:
    return GraphQLDocument(name=name, operation="mutation", body=body.strip())


def build_registry(*groups: Iterable[GraphQLDocument]) -> Dict[str, GraphQLDocument]:
    """按名称建立文档注册表，名称重复时报错"""
    registry: Dict[str, GraphQLDocument] = {}
    for group in groups:
        for document in group:
            if document.name in registry:
                raise ValueError(f"Duplicate GraphQL document name: {document.name}")
            registry[document.name] = document
    return registry
