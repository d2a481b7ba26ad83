"""CSV import file checks and preview.

The server parses, validates and persists imported rows. Locally we only
check that the chosen file is a CSV and show its first rows so the user can
confirm they picked the right file.
"""

import csv
import io
import mimetypes
from dataclasses import dataclass
from pathlib import Path

from budgetplan.errors import CsvValidationError

PREVIEW_LINES = 5

CSV_MEDIA_TYPE = "text/csv"

# Media types different platforms report for .csv files
CSV_MEDIA_TYPES = frozenset({CSV_MEDIA_TYPE, "application/csv", "text/x-csv", "application/vnd.ms-excel"})


@dataclass(frozen=True)
class CsvPreview:
    """First rows of a CSV file, split into cells. Display only."""

    rows: list[list[str]]

    @property
    def width(self) -> int:
        return max((len(row) for row in self.rows), default=0)


def guess_media_type(path: Path) -> str | None:
    """Guess the media type of a file from its name."""
    if path.suffix.lower() == ".csv":
        return CSV_MEDIA_TYPE
    media_type, _ = mimetypes.guess_type(path.name)
    return media_type


def validate_csv_file(path: Path) -> str:
    """Check that a file can be offered for import.

    Args:
        path: File chosen by the user.

    Returns:
        The file's media type.

    Raises:
        CsvValidationError: If the file is not a CSV.
    """
    media_type = guess_media_type(path)
    if media_type not in CSV_MEDIA_TYPES:
        raise CsvValidationError(f"Please select a valid CSV file (got {media_type or 'unknown type'})")

    return media_type


def build_preview(text: str, limit: int = PREVIEW_LINES) -> CsvPreview:
    """Split the first ``limit`` rows of CSV text into cells.

    Quoted fields with embedded commas stay in one cell. No schema check
    is made: the header is shown like any other row.
    """
    reader = csv.reader(io.StringIO(text))
    rows: list[list[str]] = []
    for row in reader:
        if len(rows) >= limit:
            break
        rows.append(row)
    return CsvPreview(rows=rows)

