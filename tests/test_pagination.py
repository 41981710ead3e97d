import pytest

from app.core.exceptions import InvalidArgument
from app.core.pagination import (
    ASC,
    DESC,
    create_page_response,
    normalize_direction,
    page_query,
    validate_sort_column,
)


@pytest.mark.parametrize(
    "total, size, expected_pages",
    [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (100, 1, 100)],
)
def test_total_pages_is_ceiling(total, size, expected_pages):
    page = create_page_response([], 0, size, total)
    assert page.total_pages == expected_pages


def test_navigation_flags_middle_page():
    page = create_page_response([], 1, 10, 35)
    assert page.total_pages == 4
    assert page.has_next is True
    assert page.has_previous is True
    assert page.first is False
    assert page.last is False


def test_navigation_flags_last_page():
    page = create_page_response([], 3, 10, 35)
    assert page.has_next is False
    assert page.last is True


def test_empty_result_is_first_and_last():
    page = create_page_response([], 0, 10, 0)
    assert page.first is True
    assert page.last is True
    assert page.has_next is False
    assert page.has_previous is False


def test_page_query_clamps_values():
    q = page_query(-3, 0)
    assert q.page == 0
    assert q.size == 1

    q = page_query(2, 1000)
    assert q.size == 100
    assert q.offset == 200

    q = page_query(None, None)
    assert q.page == 0
    assert q.size == 10


def test_direction_only_desc_is_descending():
    assert normalize_direction("desc") == DESC
    assert normalize_direction("DeSc") == DESC
    assert normalize_direction("asc") == ASC
    assert normalize_direction("sideways") == ASC
    assert normalize_direction(None, DESC) == DESC
    assert normalize_direction("", DESC) == DESC


def test_sort_column_whitelist():
    allowed = ("created_at", "view_count")
    assert validate_sort_column(None, allowed, "created_at") == "created_at"
    assert validate_sort_column("view_count", allowed, "created_at") == "view_count"

    with pytest.raises(InvalidArgument) as exc:
        validate_sort_column("password", allowed, "created_at")
    assert exc.value.field == "sort"
    assert "created_at, view_count" in exc.value.message
