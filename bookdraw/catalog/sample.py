"""
Sample Catalog - A small built-in book list.

Used when no catalog file is configured, and handy for trying the
picker out. A real club ships its own JSON catalog.
"""

from ..engine_core.state import Book, Series


def _series(name: str, order: int, total: int) -> Series:
    return Series(name=name, order=order, total=total)


SAMPLE_BOOKS: list[Book] = [
    # Standalones
    Book(
        id="project_hail_mary",
        title="Project Hail Mary",
        author="Andy Weir",
        genres=["Science Fiction"],
    ),
    Book(
        id="piranesi",
        title="Piranesi",
        author="Susanna Clarke",
        genres=["Fantasy", "Mystery"],
    ),
    Book(
        id="the_remains_of_the_day",
        title="The Remains of the Day",
        author="Kazuo Ishiguro",
        genres=["Literary Fiction"],
    ),
    Book(
        id="circe",
        title="Circe",
        author="Madeline Miller",
        genres=["Fantasy", "Mythology"],
    ),

    # Mistborn
    Book(
        id="mistborn_1",
        title="The Final Empire",
        author="Brandon Sanderson",
        genres=["Fantasy"],
        series=_series("Mistborn", 1, 3),
    ),
    Book(
        id="mistborn_2",
        title="The Well of Ascension",
        author="Brandon Sanderson",
        genres=["Fantasy"],
        series=_series("Mistborn", 2, 3),
    ),
    Book(
        id="mistborn_3",
        title="The Hero of Ages",
        author="Brandon Sanderson",
        genres=["Fantasy"],
        series=_series("Mistborn", 3, 3),
    ),

    # Murderbot
    Book(
        id="murderbot_1",
        title="All Systems Red",
        author="Martha Wells",
        genres=["Science Fiction"],
        series=_series("The Murderbot Diaries", 1, 2),
    ),
    Book(
        id="murderbot_2",
        title="Artificial Condition",
        author="Martha Wells",
        genres=["Science Fiction"],
        series=_series("The Murderbot Diaries", 2, 2),
    ),
]


def sample_catalog() -> list[Book]:
    """Fresh copy of the sample catalog."""
    return list(SAMPLE_BOOKS)
