"""
Unit Tests for pagination helpers
"""
from app.utils.pagination import build_page_meta, clamp_page, page_offset


def test_clamp_page_lower_bounds():
    assert clamp_page(0, 0, 500) == (1, 1)
    assert clamp_page(-3, -10, 500) == (1, 1)


def test_clamp_page_upper_bound():
    assert clamp_page(2, 10_000, 500) == (2, 500)


def test_page_offset():
    assert page_offset(1, 100) == 0
    assert page_offset(3, 25) == 50


def test_meta_for_empty_result():
    meta = build_page_meta(0, 1, 100)
    assert meta["total_pages"] == 1
    assert meta["has_next_page"] is False
    assert meta["has_previous_page"] is False


def test_meta_middle_page():
    meta = build_page_meta(250, 2, 100)
    assert meta["total_pages"] == 3
    assert meta["has_next_page"] is True
    assert meta["has_previous_page"] is True
