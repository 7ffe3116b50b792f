"""
Catalog - The static list of books the club picks from.

This module contains:
- JSON catalog loading
- Validation of the series authoring rules
- A small sample catalog
"""

from .loader import BookRecord, CatalogError, book_to_dict, load_catalog, parse_catalog
from .validation import CatalogValidationError, ValidationResult, validate_catalog
from .sample import SAMPLE_BOOKS, sample_catalog

__all__ = [
    "BookRecord",
    "CatalogError",
    "book_to_dict",
    "load_catalog",
    "parse_catalog",
    "CatalogValidationError",
    "ValidationResult",
    "validate_catalog",
    "SAMPLE_BOOKS",
    "sample_catalog",
]
