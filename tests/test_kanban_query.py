"""
Unit tests for Kanban column query construction and sort toggling.
"""
import pytest

from app.db.models.application import ApplicationStatus
from app.kanban.query import InvalidQueryError, SortConfig, build_column_query, toggle_sort


def test_minimal_query_has_only_required_keys():
    """Test empty search and no sort leave the descriptor minimal."""
    params = build_column_query(ApplicationStatus.APPLIED, 1, page_size=20)
    assert params == {"status": "applied", "page": 1, "limit": 20}


def test_query_includes_search_and_sort_when_set():
    params = build_column_query(
        "offer", 3, page_size=20, search="google", sort=SortConfig("company", "asc")
    )
    assert params == {
        "status": "offer",
        "page": 3,
        "limit": 20,
        "search": "google",
        "sortBy": "company",
        "sortOrder": "asc",
    }


def test_blank_search_is_omitted():
    params = build_column_query("interview", 1, page_size=20, search="   ")
    assert "search" not in params


def test_sort_without_field_is_omitted():
    params = build_column_query("interview", 1, page_size=20, sort=SortConfig())
    assert "sortBy" not in params
    assert "sortOrder" not in params


def test_query_is_deterministic():
    sort = SortConfig("position", "desc")
    assert build_column_query("rejected", 2, 20, "acme", sort) == build_column_query("rejected", 2, 20, "acme", sort)


@pytest.mark.parametrize("stage", ["ghosted", "", None, "Applied"])
def test_unknown_stage_raises(stage):
    with pytest.raises(InvalidQueryError):
        build_column_query(stage, 1)


@pytest.mark.parametrize("page", [0, -1, 1.5, "2", True])
def test_invalid_page_raises(page):
    with pytest.raises(InvalidQueryError):
        build_column_query("applied", page)


def test_invalid_page_size_raises():
    with pytest.raises(InvalidQueryError):
        build_column_query("applied", 1, page_size=0)


def test_toggle_same_field_flips_order():
    """Test re-selecting the active field reverses the direction both ways."""
    assert toggle_sort(SortConfig("company", "desc"), "company") == SortConfig("company", "asc")
    assert toggle_sort(SortConfig("company", "asc"), "company") == SortConfig("company", "desc")


def test_toggle_new_field_starts_descending():
    """Test a different field always resets to descending."""
    assert toggle_sort(SortConfig("company", "asc"), "position") == SortConfig("position", "desc")
    assert toggle_sort(SortConfig("company", "desc"), "position") == SortConfig("position", "desc")
    assert toggle_sort(SortConfig(), "company") == SortConfig("company", "desc")
