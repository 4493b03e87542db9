"""
Tests for utils/pagination.py
"""
import pytest

from utils.pagination import paginate


def test_slices_requested_page():
    page = paginate(list(range(25)), page=2, per_page=10)
    assert page.items == list(range(10, 20))
    assert page.pages == 3
    assert page.has_prev and page.has_next


def test_last_partial_page():
    page = paginate(list(range(25)), page=3, per_page=10)
    assert page.items == [20, 21, 22, 23, 24]
    assert not page.has_next


@pytest.mark.parametrize("requested,expected", [(0, 1), (-3, 1), ("abc", 1), (None, 1), (99, 3), ("2", 2)])
def test_page_is_clamped(requested, expected):
    assert paginate(list(range(25)), page=requested, per_page=10).page == expected


def test_empty_result():
    page = paginate([], page=4, per_page=10)
    assert page.items == []
    assert page.to_dict() == {
        "page": 1,
        "per_page": 10,
        "total": 0,
        "pages": 0,
        "has_prev": False,
        "has_next": False,
    }
