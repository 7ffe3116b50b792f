"""
Catalog Loader - Reads the static book list from JSON.

The file is an array of books in the club's catalog format:

    {
        "id": "mistborn_1",
        "title": "The Final Empire",
        "author": "Brandon Sanderson",
        "genres": ["Fantasy"],
        "series": {"name": "Mistborn", "order": 1, "total": 3},
        "coverUrl": "https://..."
    }

"series" is null for standalones.
"""

from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from ..engine_core.state import Book, Series

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Raised when a catalog file cannot be loaded."""


class SeriesRecord(BaseModel):
    name: str = Field(min_length=1)
    order: int = Field(ge=1)
    total: int = Field(ge=1)


class BookRecord(BaseModel):
    """One catalog entry as written in the JSON file."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1)
    title: str
    author: str
    genres: list[str] = Field(default_factory=list)
    series: Optional[SeriesRecord] = None
    description: Optional[str] = None
    cover_url: Optional[str] = Field(None, alias="coverUrl")

    def to_book(self) -> Book:
        return Book(
            id=self.id,
            title=self.title,
            author=self.author,
            genres=list(self.genres),
            series=(
                Series(name=self.series.name, order=self.series.order, total=self.series.total)
                if self.series else None
            ),
            description=self.description,
            cover_url=self.cover_url,
        )


_CATALOG_ADAPTER = TypeAdapter(list[BookRecord])


def parse_catalog(data: list[dict[str, Any]]) -> list[Book]:
    """Build books from already-decoded JSON data."""
    try:
        records = _CATALOG_ADAPTER.validate_python(data)
    except ValidationError as e:
        raise CatalogError(f"Invalid catalog: {e}") from e
    return [record.to_book() for record in records]


def load_catalog(path: str | Path) -> list[Book]:
    """Load a catalog file. Book order in the file is preserved."""
    path = Path(path).expanduser()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise CatalogError(f"Catalog not found: {path}")
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogError(f"Cannot read catalog {path}: {e}") from e

    if not isinstance(data, list):
        raise CatalogError(f"Catalog {path} must be a JSON array of books")

    books = parse_catalog(data)
    logger.info("Loaded %d books from %s", len(books), path)
    return books


def book_to_dict(book: Book) -> dict[str, Any]:
    """Inverse of the file format, for writing catalogs back out."""
    return BookRecord(
        id=book.id,
        title=book.title,
        author=book.author,
        genres=list(book.genres),
        series=(
            SeriesRecord(name=book.series.name, order=book.series.order, total=book.series.total)
            if book.series else None
        ),
        description=book.description,
        cover_url=book.cover_url,
    ).model_dump(by_alias=True, exclude_none=True)
