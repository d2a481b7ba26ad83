"""Domain models and types for budgetplan.

This package contains the functional core:
- Pure functions with no side effects
- No I/O operations
- Easy to test
- Matrix arithmetic separated from the HTTP client and the terminal
"""

from budgetplan.domain.models import MONTHS, Amount, CategoryId, CategoryKind, MonthNumber, Year

__all__ = ["Amount", "CategoryId", "CategoryKind", "MONTHS", "MonthNumber", "Year"]
