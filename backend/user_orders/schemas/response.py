from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ErrorDetail(BaseModel):
    code: int
    message: str


class ApiResponse(BaseModel, Generic[T]):
    """
    Result envelope returned by every service operation.

    Only the fields that were explicitly set are serialized: a failure
    without data carries no "data" key, while an operation that sets
    data=None reports "data": null.
    """

    success: bool
    message: str
    data: Optional[T] = None
    error: Optional[Any] = None

    def to_content(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)
