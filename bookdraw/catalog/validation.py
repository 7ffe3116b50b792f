"""
Catalog Validation - Checks the authoring rules the picker relies on.

Validates that:
1. Book ids are unique
2. Each series has exactly one Book 1
3. Orders within a series are unique and run 1..total without gaps
4. All books of a series agree on total

The picker itself trusts the catalog; run this when a catalog is loaded.
"""

from __future__ import annotations
from collections import defaultdict
from dataclasses import dataclass

from ..engine_core.state import Book


class CatalogValidationError(Exception):
    """Raised when catalog validation fails."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Catalog validation failed with {len(errors)} error(s)")


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def validate_catalog(catalog: list[Book], raise_on_error: bool = False) -> ValidationResult:
    """
    Validate a book catalog.

    Returns ValidationResult with errors and warnings.
    Raises CatalogValidationError if raise_on_error=True and errors exist.
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not catalog:
        warnings.append("Catalog is empty")

    seen_ids: set[str] = set()
    series_books: dict[str, list[Book]] = defaultdict(list)

    for book in catalog:
        if book.id in seen_ids:
            errors.append(f"Duplicate book id: {book.id}")
        seen_ids.add(book.id)

        if not book.title:
            warnings.append(f"Book {book.id} has no title")

        if book.series:
            series_books[book.series.name].append(book)

    for name, books in series_books.items():
        errors.extend(_validate_series(name, books))

    if raise_on_error and errors:
        raise CatalogValidationError(errors)
    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


def _validate_series(name: str, books: list[Book]) -> list[str]:
    errors: list[str] = []

    totals = {b.series.total for b in books}
    if len(totals) > 1:
        errors.append(f'Series "{name}" has conflicting totals: {sorted(totals)}')
        return errors
    total = totals.pop()

    orders = [b.series.order for b in books]
    pilots = orders.count(1)
    if pilots != 1:
        errors.append(f'Series "{name}" must have exactly one Book 1 (found {pilots})')

    duplicates = sorted({o for o in orders if orders.count(o) > 1 and o != 1})
    for order in duplicates:
        errors.append(f'Series "{name}" has more than one Book {order}')

    out_of_range = sorted(o for o in set(orders) if o > total)
    for order in out_of_range:
        errors.append(f'Series "{name}" Book {order} exceeds total {total}')

    missing = sorted(set(range(1, total + 1)) - set(orders))
    if missing:
        errors.append(
            f'Series "{name}" is missing book(s) {", ".join(str(o) for o in missing)}'
        )

    return errors
