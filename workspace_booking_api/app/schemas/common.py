"""
Shared schema pieces: the camelCase base model and response envelopes.

The console speaks camelCase JSON (``reservationDate``, ``pageSize``)
while the Python side uses snake_case attributes.  ``ApiModel`` maps
between the two; input accepts either spelling.
"""

from typing import Generic, List, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

T = TypeVar("T")

# Largest id SQLite can store in an INTEGER column.
MAX_ID = 2**63 - 1


class ApiModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


class Pagination(ApiModel):
    page: int
    page_size: int
    total: int
    total_pages: int


class DataResponse(ApiModel, Generic[T]):
    success: bool = True
    data: T


class ListResponse(ApiModel, Generic[T]):
    success: bool = True
    data: List[T]


class PageResponse(ApiModel, Generic[T]):
    success: bool = True
    data: List[T]
    pagination: Pagination
