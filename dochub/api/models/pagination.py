"""Pagination metadata for list responses."""

from pydantic import Field

from dochub.api.models import CamelModel

MAX_PER_PAGE = 100


class PaginationMeta(CamelModel):
    """Pagination metadata for responses."""

    page: int = Field(..., description="Current page number")
    per_page: int = Field(..., description="Items per page")
    total: int = Field(..., description="Total number of items")
    total_pages: int = Field(..., description="Total number of pages")
    has_next: bool = Field(..., description="Whether there is a next page")
    has_prev: bool = Field(..., description="Whether there is a previous page")


def create_pagination_meta(page: int, per_page: int, total: int) -> PaginationMeta:
    """
    Create pagination metadata from query parameters and total count.

    Args:
        page: Current page number (1-indexed)
        per_page: Items per page
        total: Total number of items
    """
    total_pages = (total + per_page - 1) // per_page if total > 0 else 0

    return PaginationMeta(
        page=page,
        per_page=per_page,
        total=total,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


__all__ = ["MAX_PER_PAGE", "PaginationMeta", "create_pagination_meta"]
