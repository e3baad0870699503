from pydantic import BaseModel
from typing import List, Any


class MessageResponse(BaseModel):
    message: str


class PaginatedResponse(BaseModel):
    items: List[Any]
    total: int
    page: int
    page_size: int
    pages: int

    @classmethod
    def build(cls, items: List[Any], total: int, page: int, page_size: int) -> "PaginatedResponse":
        pages = (total + page_size - 1) // page_size if page_size else 0
        return cls(items=items, total=total, page=page, page_size=page_size, pages=pages)
