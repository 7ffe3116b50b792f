"""
Pytest fixtures for Bookdraw tests.
"""

import random

import pytest

from ..engine_core.state import AppState, Book, Series, SeriesState, SeriesStatus
from ..engine_core.picker import create_initial_state
from ..api.service import PickerService
from ..store import InMemoryStateStore


def make_book(book_id, series_name=None, order=None, total=None, genres=None):
    """Build a catalog book; series fields are optional."""
    series = Series(name=series_name, order=order, total=total) if series_name else None
    return Book(
        id=book_id,
        title=book_id.replace("_", " ").title(),
        author="Test Author",
        genres=genres or ["Fiction"],
        series=series,
    )


@pytest.fixture
def catalog() -> list[Book]:
    """Two standalones plus a 3-book and a 2-book series."""
    return [
        make_book("standalone_1"),
        make_book("standalone_2", genres=["Mystery"]),
        make_book("series_a_1", "Series A", 1, 3),
        make_book("series_a_2", "Series A", 2, 3),
        make_book("series_a_3", "Series A", 3, 3),
        make_book("series_b_1", "Series B", 1, 2),
        make_book("series_b_2", "Series B", 2, 2),
    ]


@pytest.fixture
def small_catalog() -> list[Book]:
    """S1, S2 and a 3-book series A."""
    return [
        make_book("S1"),
        make_book("S2"),
        make_book("A1", "A", 1, 3),
        make_book("A2", "A", 2, 3),
        make_book("A3", "A", 3, 3),
    ]


@pytest.fixture
def initial_state(catalog) -> AppState:
    return create_initial_state(catalog)


@pytest.fixture
def series_a_active(initial_state) -> AppState:
    """Series A pilot read and continued."""
    return initial_state._copy_with(
        completed_book_ids=["series_a_1"],
    ).with_series_state("Series A", SeriesState(SeriesStatus.ACTIVE, 2))


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def service(catalog, rng) -> PickerService:
    """Service over an in-memory store."""
    return PickerService(catalog=catalog, store=InMemoryStateStore(), rng=rng)
