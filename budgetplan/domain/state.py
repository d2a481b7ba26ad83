"""Planning page state as a pure reducer.

The page moves through these phases:

    IDLE -> LOADING -> READY <-> SAVING
                       READY <-> IMPORT_DIALOG_OPEN <-> IMPORTING

Selecting a year goes back to LOADING from any phase and drops unsaved
edits. Saving and importing are only allowed from READY and from an open
import dialog respectively, so a second save or import cannot start while
one is in flight.
"""

from dataclasses import dataclass, replace
from enum import Enum

from budgetplan.domain.csv_preview import CsvPreview
from budgetplan.domain.matrix import BudgetMatrix, ParseResult, set_cell
from budgetplan.domain.models import CategoryId, CategoryKind, MonthNumber, Year
from budgetplan.errors import StateError


class Phase(str, Enum):
    """Where the page is in its lifecycle."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    SAVING = "saving"
    IMPORT_DIALOG_OPEN = "import_dialog_open"
    IMPORTING = "importing"


@dataclass(frozen=True)
class PageState:
    """Immutable state of the planning page."""

    year: Year
    phase: Phase = Phase.IDLE
    matrix: BudgetMatrix | None = None
    modified: bool = False
    last_error: str | None = None
    import_preview: CsvPreview | None = None
    diagnostics: tuple[ParseResult, ...] = ()

    @property
    def can_save(self) -> bool:
        return self.phase is Phase.READY and self.matrix is not None

    @property
    def can_import(self) -> bool:
        return self.phase is Phase.IMPORT_DIALOG_OPEN


@dataclass(frozen=True)
class SelectYear:
    year: Year


@dataclass(frozen=True)
class LoadMatrix:
    matrix: BudgetMatrix


@dataclass(frozen=True)
class LoadFailed:
    message: str


@dataclass(frozen=True)
class SetCell:
    category_id: CategoryId
    month: MonthNumber
    kind: CategoryKind
    raw_value: str


@dataclass(frozen=True)
class SaveStarted:
    pass


@dataclass(frozen=True)
class MarkSaved:
    pass


@dataclass(frozen=True)
class SaveFailed:
    message: str


@dataclass(frozen=True)
class OpenImport:
    preview: CsvPreview


@dataclass(frozen=True)
class CloseImport:
    pass


@dataclass(frozen=True)
class ImportStarted:
    pass


@dataclass(frozen=True)
class ImportSucceeded:
    records_imported: int


@dataclass(frozen=True)
class ImportFailed:
    message: str


Action = (
    SelectYear
    | LoadMatrix
    | LoadFailed
    | SetCell
    | SaveStarted
    | MarkSaved
    | SaveFailed
    | OpenImport
    | CloseImport
    | ImportStarted
    | ImportSucceeded
    | ImportFailed
)


def initial_state(year: Year) -> PageState:
    return PageState(year=year)


def _require(state: PageState, *phases: Phase) -> None:
    if state.phase not in phases:
        allowed = ", ".join(p.value for p in phases)
        raise StateError(f"Action not allowed while {state.phase.value} (needs {allowed})")


def reduce(state: PageState, action: Action) -> PageState:
    """Apply an action to the page state.

    Args:
        state: Current state.
        action: Action to apply.

    Returns:
        The next state.

    Raises:
        StateError: If the action is not allowed in the current phase.
        CellError: If a SetCell action references an unknown cell.
    """
    if isinstance(action, SelectYear):
        return PageState(year=action.year, phase=Phase.LOADING)

    if isinstance(action, LoadMatrix):
        return replace(
            state,
            phase=Phase.READY,
            matrix=action.matrix,
            year=action.matrix.year,
            modified=False,
            last_error=None,
            import_preview=None,
            diagnostics=(),
        )

    if isinstance(action, LoadFailed):
        _require(state, Phase.LOADING)
        # A failed reload after save or import keeps the matrix editable
        phase = Phase.IDLE if state.matrix is None else Phase.READY
        return replace(state, phase=phase, last_error=action.message)

    if isinstance(action, SetCell):
        _require(state, Phase.READY)
        if state.matrix is None:
            raise StateError("No matrix loaded")
        matrix, result = set_cell(state.matrix, action.category_id, action.month, action.kind, action.raw_value)
        diagnostics = state.diagnostics + (result,) if result.coerced else state.diagnostics
        return replace(state, matrix=matrix, modified=True, diagnostics=diagnostics)

    if isinstance(action, SaveStarted):
        if not state.can_save:
            raise StateError(f"Cannot save while {state.phase.value}")
        return replace(state, phase=Phase.SAVING, last_error=None)

    if isinstance(action, MarkSaved):
        _require(state, Phase.SAVING)
        return replace(state, phase=Phase.LOADING, modified=False, diagnostics=())

    if isinstance(action, SaveFailed):
        _require(state, Phase.SAVING)
        return replace(state, phase=Phase.READY, last_error=action.message)

    if isinstance(action, OpenImport):
        _require(state, Phase.READY, Phase.IMPORT_DIALOG_OPEN)
        return replace(state, phase=Phase.IMPORT_DIALOG_OPEN, import_preview=action.preview, last_error=None)

    if isinstance(action, CloseImport):
        _require(state, Phase.IMPORT_DIALOG_OPEN)
        return replace(state, phase=Phase.READY, import_preview=None)

    if isinstance(action, ImportStarted):
        if not state.can_import:
            raise StateError(f"Cannot import while {state.phase.value}")
        return replace(state, phase=Phase.IMPORTING, last_error=None)

    if isinstance(action, ImportSucceeded):
        _require(state, Phase.IMPORTING)
        return replace(state, phase=Phase.LOADING, modified=False, import_preview=None, diagnostics=())

    if isinstance(action, ImportFailed):
        _require(state, Phase.IMPORTING)
        return replace(state, phase=Phase.IMPORT_DIALOG_OPEN, last_error=action.message)

    raise TypeError(f"Unknown action: {action!r}")
