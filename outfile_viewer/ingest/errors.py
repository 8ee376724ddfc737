"""Structural ingestion failures.

Row-level problems (wrong token count, unparsable samples) are never raised;
they are counted into ``ParsedTable.warnings``. Only the conditions below reject
a whole file, and they reject that file alone.
"""

from __future__ import annotations


class OutFileError(ValueError):
    """Base class for a file that cannot produce a plottable table."""

    def __init__(self, message: str, source_id: str = "") -> None:
        super().__init__(message)
        self.source_id = source_id


class NoHeaderFound(OutFileError):
    """End of input was reached without a header row containing ``Time``."""


class NoDataRows(OutFileError):
    """A header was found but no valid data row followed it."""


class IngestCancelled(OutFileError):
    """Parsing was abandoned at a line boundary; nothing was produced."""
