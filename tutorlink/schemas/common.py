# tutorlink/schemas/common.py
# Response envelope shared by every endpoint: {success, message, data}

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for bodies whose wire format is camelCase (tutor requests, assign body)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class DataResponse(BaseModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: T


class Pagination(BaseModel):
    page: int
    limit: int
    total: int


class PagedResponse(BaseModel, Generic[T]):
    success: bool = True
    data: List[T]
    pagination: Pagination
