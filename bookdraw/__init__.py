"""
Bookdraw - Book Club Picker

A deterministic, series-aware picker for choosing a club's next book.
The engine works on a shared snapshot and a static catalog and provides:
- App mode derivation (decision required, series lock, random draw)
- Eligibility rules for the random draw
- Series state transitions (continue, pause, drop, resume)
- A store, service and HTTP API around them
"""

__version__ = "0.1.0"
