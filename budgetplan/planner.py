"""Budget planning session: the imperative shell around the matrix core.

A ``BudgetPlanner`` plays the role of the planning page. It keeps one
``PageState``, moves it only through ``reduce``, talks to the projections
API and reports outcomes through a notifier.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol

import requests
from rich.console import Console

from budgetplan import api
from budgetplan.domain.csv_preview import build_preview, validate_csv_file
from budgetplan.domain.matrix import BudgetMatrix, ParseResult, build_projections, matrix_from_payload, parse_amount
from budgetplan.domain.models import CategoryId, CategoryKind, MonthNumber, Year
from budgetplan.domain.state import (
    Action,
    CloseImport,
    ImportFailed,
    ImportStarted,
    ImportSucceeded,
    LoadFailed,
    LoadMatrix,
    MarkSaved,
    OpenImport,
    PageState,
    Phase,
    SaveFailed,
    SaveStarted,
    SelectYear,
    SetCell,
    initial_state,
    reduce,
)
from budgetplan.errors import (
    AmountError,
    ConflictError,
    CsvImportError,
    CsvValidationError,
    ExportError,
    FetchError,
    SaveError,
    StateError,
)

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "presupuesto_{year}.csv"


class Notifier(Protocol):
    """Receives user-facing outcome messages."""

    def success(self, title: str, message: str) -> None: ...

    def error(self, title: str, message: str) -> None: ...


class ConsoleNotifier:
    """Print notifications to the terminal."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def success(self, title: str, message: str) -> None:
        self.console.print(f"[green]✓ {title}[/green] [dim]{message}[/dim]")

    def error(self, title: str, message: str) -> None:
        self.console.print(f"[red]{title}:[/red] {message}", style="bold")


@dataclass
class RecordingNotifier:
    """Keep notifications in memory."""

    messages: list[tuple[str, str, str]] = field(default_factory=list)

    def success(self, title: str, message: str) -> None:
        self.messages.append(("success", title, message))

    def error(self, title: str, message: str) -> None:
        self.messages.append(("error", title, message))


def export_filename(year: int) -> str:
    return EXPORT_FILENAME.format(year=year)


def _is_conflict(error: requests.RequestException) -> bool:
    response = getattr(error, "response", None)
    return response is not None and response.status_code == 409


class BudgetPlanner:
    """Load, edit, save, import and export one year's budget matrix."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        notifier: Optional[Notifier] = None,
        strict_amounts: bool = False,
        year: Optional[Year] = None,
    ) -> None:
        self.base_url = base_url
        self.token = token
        self.notifier: Notifier = notifier or ConsoleNotifier()
        self.strict_amounts = strict_amounts
        self.state: PageState = initial_state(year or Year(0))
        self._import_path: Path | None = None

    @property
    def matrix(self) -> BudgetMatrix:
        if self.state.matrix is None:
            raise StateError("No matrix loaded")
        return self.state.matrix

    @property
    def modified(self) -> bool:
        return self.state.modified

    @property
    def phase(self) -> Phase:
        return self.state.phase

    def _dispatch(self, action: Action) -> PageState:
        self.state = reduce(self.state, action)
        return self.state

    def _fetch(self) -> BudgetMatrix:
        year = self.state.year
        try:
            payload = api.fetch_matrix(self.base_url, year, self.token)
            matrix = matrix_from_payload(payload)
        except (requests.RequestException, KeyError, TypeError, ValueError) as e:
            logger.error("Loading budget %s failed: %s", year, e)
            self._dispatch(LoadFailed(str(e)))
            self.notifier.error("Load failed", f"Could not load the {year} budget")
            raise FetchError(f"Could not load the {year} budget", e) from e

        self._dispatch(LoadMatrix(matrix))
        logger.info(
            "Loaded %s: %d income and %d expense categories",
            year,
            len(matrix.income_categories),
            len(matrix.expense_categories),
        )
        return matrix

    def load(self, year: Year) -> BudgetMatrix:
        """Load a year's matrix, discarding any unsaved edits.

        Raises:
            FetchError: If the matrix cannot be fetched or decoded.
        """
        if self.state.modified:
            logger.warning("Discarding unsaved edits for %s", self.state.year)
        self._dispatch(SelectYear(year))
        return self._fetch()

    def set_cell(self, category_id: CategoryId, month: MonthNumber, kind: CategoryKind, raw_value: str) -> ParseResult:
        """Edit one cell and recompute all totals.

        Returns:
            Parse diagnostics for the value. A coerced value is still applied
            unless strict amounts are enabled.

        Raises:
            AmountError: If strict amounts are enabled and the value is malformed.
            CellError: If the category or month does not exist.
            StateError: If the page is not ready for editing.
        """
        result = parse_amount(raw_value)
        if result.coerced:
            if self.strict_amounts:
                raise AmountError(f"Invalid amount '{raw_value}': {result.reason}")
            logger.warning("Amount '%s' read as %s (%s)", raw_value, result.amount, result.reason)

        self._dispatch(SetCell(category_id, month, kind, raw_value))
        return result

    def save(self) -> int:
        """Send every positive cell to the server and reload the matrix.

        Returns:
            Number of projection records sent.

        Raises:
            StateError: If nothing is loaded or a save is already running.
            ConflictError: If the server reports the matrix changed meanwhile.
            SaveError: If the request fails. Local edits are kept.
            FetchError: If the reload after a successful save fails.
        """
        self._dispatch(SaveStarted())
        matrix = self.matrix
        projections = build_projections(matrix)

        try:
            api.save_projections(self.base_url, matrix.year, projections, self.token, matrix.revision)
        except requests.RequestException as e:
            self._dispatch(SaveFailed(str(e)))
            if _is_conflict(e):
                logger.warning("Save of %s rejected: budget changed on the server", matrix.year)
                self.notifier.error("Save failed", "The budget was changed by someone else, reload and retry")
                raise ConflictError(f"The {matrix.year} budget changed on the server", e) from e
            logger.error("Saving budget %s failed: %s", matrix.year, e)
            self.notifier.error("Save failed", "Could not save the projections")
            raise SaveError(f"Could not save the {matrix.year} projections", e) from e

        self._dispatch(MarkSaved())
        logger.info("Saved %d projections for %s", len(projections), matrix.year)
        self.notifier.success("Projections saved", f"{matrix.year} budget saved")
        self._fetch()
        return len(projections)

    def check_import_file(self, path: Path) -> None:
        """Reject a missing or non-CSV file without touching the network.

        Raises:
            CsvValidationError: If the file is missing or not a CSV.
        """
        try:
            if not path.is_file():
                raise CsvValidationError(f"File not found: {path}")
            validate_csv_file(path)
        except CsvValidationError as e:
            self.notifier.error("Invalid file", str(e))
            raise

    def open_import(self, path: Path) -> list[list[str]]:
        """Check a CSV file and open the import dialog with its preview.

        Returns:
            The preview rows.

        Raises:
            CsvValidationError: If the file is missing or not a CSV. No request is made.
            StateError: If the page is not ready.
        """
        self.check_import_file(path)

        text = path.read_text(encoding="utf-8-sig", errors="replace")
        preview = build_preview(text)
        self._dispatch(OpenImport(preview))
        self._import_path = path
        return preview.rows

    def close_import(self) -> None:
        self._dispatch(CloseImport())
        self._import_path = None

    def import_csv(self) -> int:
        """Upload the file of the open import dialog and reload the matrix.

        The import supersedes local edits: they are dropped on success.

        Returns:
            Number of records the server imported.

        Raises:
            StateError: If no import dialog is open or an import is running.
            CsvImportError: If the upload fails or the reply has no readable count.
                The dialog stays open.
            FetchError: If the reload after a successful import fails.
        """
        path = self._import_path
        if path is None:
            raise StateError("No file selected for import")
        self._dispatch(ImportStarted())
        year = self.state.year

        try:
            result = api.upload_csv(self.base_url, path, year, self.token)
            records = int(result.get("recordsImported", result.get("processed", 0)) or 0)
        except (requests.RequestException, OSError, AttributeError, TypeError, ValueError) as e:
            self._dispatch(ImportFailed(str(e)))
            logger.error("Importing %s failed: %s", path.name, e)
            self.notifier.error("Import failed", "Could not process the CSV file")
            raise CsvImportError(f"Could not import {path.name}", e) from e

        self._dispatch(ImportSucceeded(records))
        self._import_path = None
        logger.info("Imported %d records from %s into %s", records, path.name, year)
        self.notifier.success("Import complete", f"Imported {records} budget records")
        self._fetch()
        return records

    def export_csv(self, output_dir: Path | None = None, year: Optional[Year] = None) -> Path:
        """Download the server's CSV export of a year, the current one by default.

        The matrix and the modified flag are left untouched.

        Returns:
            Path of the written file.

        Raises:
            ExportError: If the download fails.
            OSError: If the file cannot be written.
        """
        if year is None:
            year = self.state.year
        try:
            text = api.download_csv(self.base_url, year, self.token)
        except requests.RequestException as e:
            logger.error("Exporting budget %s failed: %s", year, e)
            self.notifier.error("Export failed", "Could not export the file")
            raise ExportError(f"Could not export the {year} budget", e) from e

        target_dir = output_dir or Path.cwd()
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / export_filename(year)
        path.write_text(text, encoding="utf-8")

        logger.info("Exported %s to %s", year, path)
        self.notifier.success("Export complete", f"{year} budget exported to {path}")
        return path
