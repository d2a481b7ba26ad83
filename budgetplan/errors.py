"""Exception types raised by budgetplan.

Client-side problems (bad cell reference, wrong file type, an action the
current page phase does not allow) are raised before any network call.
Remote problems wrap the underlying requests exception in ``cause``.
"""


class BudgetPlanError(Exception):
    """Base class for every budgetplan error."""


class CellError(BudgetPlanError):
    """A cell edit referenced an unknown category or an invalid month."""


class AmountError(BudgetPlanError):
    """A cell value could not be parsed and strict amounts are enabled."""


class StateError(BudgetPlanError):
    """The requested action is not allowed in the current page phase."""


class CsvValidationError(BudgetPlanError):
    """The selected import file is missing or is not a CSV file."""


class RemoteError(BudgetPlanError):
    """A call to the budget projections API failed."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class FetchError(RemoteError):
    """Loading the matrix for a year failed."""


class SaveError(RemoteError):
    """Saving the projections failed."""


class ConflictError(SaveError):
    """The server rejected the save because the matrix changed since it was loaded."""


class CsvImportError(RemoteError):
    """Uploading a CSV file for import failed."""


class ExportError(RemoteError):
    """Downloading the CSV export failed."""
