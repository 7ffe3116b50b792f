"""
Tests for catalog loading and validation.
"""

import json

import pytest

from ..catalog import (
    CatalogError,
    CatalogValidationError,
    book_to_dict,
    load_catalog,
    parse_catalog,
    sample_catalog,
    validate_catalog,
)
from .conftest import make_book


def write_catalog(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestLoadCatalog:
    """Tests for reading catalog files."""

    def test_load(self, tmp_path):
        path = write_catalog(tmp_path / "books.json", [
            {
                "id": "mistborn_1",
                "title": "The Final Empire",
                "author": "Brandon Sanderson",
                "genres": ["Fantasy"],
                "series": {"name": "Mistborn", "order": 1, "total": 3},
                "coverUrl": "https://example.com/1.jpg",
            },
            {"id": "circe", "title": "Circe", "author": "Madeline Miller", "series": None},
        ])

        books = load_catalog(path)

        assert [b.id for b in books] == ["mistborn_1", "circe"]
        assert books[0].series.name == "Mistborn"
        assert books[0].series.total == 3
        assert books[0].cover_url == "https://example.com/1.jpg"
        assert books[1].is_standalone
        assert books[1].genres == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogError, match="not found"):
            load_catalog(tmp_path / "nope.json")

    def test_bad_json(self, tmp_path):
        path = tmp_path / "books.json"
        path.write_text("[{", encoding="utf-8")

        with pytest.raises(CatalogError):
            load_catalog(path)

    def test_not_a_list(self, tmp_path):
        path = write_catalog(tmp_path / "books.json", {"books": []})

        with pytest.raises(CatalogError, match="array"):
            load_catalog(path)

    def test_missing_fields(self):
        with pytest.raises(CatalogError):
            parse_catalog([{"id": "x"}])

    def test_bad_series_order(self):
        with pytest.raises(CatalogError):
            parse_catalog([{
                "id": "x", "title": "X", "author": "Y",
                "series": {"name": "S", "order": 0, "total": 1},
            }])

    def test_book_to_dict(self):
        book = make_book("a_1", "A", 1, 2)

        data = book_to_dict(book)

        assert data["series"] == {"name": "A", "order": 1, "total": 2}
        assert "coverUrl" not in data
        assert parse_catalog([data])[0] == book


class TestValidateCatalog:
    """Tests for the series authoring rules."""

    def test_fixture_catalog_is_valid(self, catalog):
        result = validate_catalog(catalog)
        assert result.valid
        assert result.errors == []

    def test_sample_catalog_is_valid(self):
        assert validate_catalog(sample_catalog()).valid

    def test_empty_catalog_warns(self):
        result = validate_catalog([])
        assert result.valid
        assert result.warnings == ["Catalog is empty"]

    def test_duplicate_ids(self):
        result = validate_catalog([make_book("x"), make_book("x")])
        assert "Duplicate book id: x" in result.errors

    def test_missing_pilot(self):
        result = validate_catalog([make_book("a_2", "A", 2, 2)])

        assert not result.valid
        assert 'Series "A" must have exactly one Book 1 (found 0)' in result.errors
        assert 'Series "A" is missing book(s) 1' in result.errors

    def test_two_pilots(self):
        result = validate_catalog([
            make_book("a_1", "A", 1, 2),
            make_book("a_1b", "A", 1, 2),
            make_book("a_2", "A", 2, 2),
        ])
        assert 'Series "A" must have exactly one Book 1 (found 2)' in result.errors

    def test_duplicate_order(self):
        result = validate_catalog([
            make_book("a_1", "A", 1, 3),
            make_book("a_2", "A", 2, 3),
            make_book("a_2b", "A", 2, 3),
        ])

        assert 'Series "A" has more than one Book 2' in result.errors
        assert 'Series "A" is missing book(s) 3' in result.errors

    def test_order_beyond_total(self):
        result = validate_catalog([
            make_book("a_1", "A", 1, 1),
            make_book("a_2", "A", 2, 1),
        ])
        assert 'Series "A" Book 2 exceeds total 1' in result.errors

    def test_conflicting_totals(self):
        result = validate_catalog([
            make_book("a_1", "A", 1, 2),
            make_book("a_2", "A", 2, 3),
        ])
        assert result.errors == ['Series "A" has conflicting totals: [2, 3]']

    def test_raise_on_error(self):
        with pytest.raises(CatalogValidationError) as exc_info:
            validate_catalog([make_book("x"), make_book("x")], raise_on_error=True)

        assert exc_info.value.errors == ["Duplicate book id: x"]
