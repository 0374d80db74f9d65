"""Shared response schemas."""

import math

from pydantic import BaseModel, Field

MAX_PAGE_SIZE = 100


class Pagination(BaseModel):
    """Page metadata returned by every listing endpoint."""

    current_page: int
    per_page: int
    total_items: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, per_page: int, total_items: int) -> "Pagination":
        total_pages = math.ceil(total_items / per_page) if per_page else 0
        return cls(
            current_page=page,
            per_page=per_page,
            total_items=total_items,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


class MessageResponse(BaseModel):
    success: bool = True
    message: str = Field(..., description="Human readable outcome")


def page_offset(page: int, limit: int) -> int:
    """Offset for a 1-based page number."""
    return (page - 1) * limit
