"""
Pagination Utility Module

Page clamping and page metadata shared by list endpoints.
"""
from typing import Any, Dict, Tuple


def clamp_page(page: int, page_size: int, max_page_size: int) -> Tuple[int, int]:
    """Clamp page to >= 1 and page_size to [1, max_page_size]"""
    page = max(1, page)
    page_size = max(1, min(max_page_size, page_size))
    return page, page_size


def page_offset(page: int, page_size: int) -> int:
    return (page - 1) * page_size


def build_page_meta(total: int, page: int, page_size: int) -> Dict[str, Any]:
    """
    Create the pagination block of a list response.

    Args:
        total: Total count of matching items (pre-pagination)
        page: Current page number (1-indexed)
        page_size: Items per page

    Returns:
        Dictionary with total, page, page_size, total_pages, has_next_page, has_previous_page
    """
    total_pages = (total + page_size - 1) // page_size if total > 0 else 1

    return {
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": total_pages,
        "has_next_page": page < total_pages,
        "has_previous_page": page > 1,
    }
