from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field


class BaseGqlQuery(BaseModel, ABC):  # pyright: ignore[reportUnsafeMultipleInheritance]
    @staticmethod
    @abstractmethod
    def graphql_query() -> str: ...

    @staticmethod
    @abstractmethod
    def to_graphql_query_variables(*args: Any, **kwargs: Any) -> dict[str, Any]: ...  # pyright: ignore[reportAny]


class TotalCount(BaseModel):
    total_count: int = Field(validation_alias="totalCount")


class CountedNodes[T](BaseModel):
    nodes: list[T]
    total_count: int = Field(validation_alias="totalCount")
