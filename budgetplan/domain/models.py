"""Domain type definitions for budgetplan.

These NewTypes provide semantic clarity and help with type checking:
- Amount: Projected amount in pesos (non-negative)
- MonthNumber: Calendar month, 1 (January) to 12 (December)
- CategoryId: Server identifier of an income or expense category
- Year: Fiscal year the matrix belongs to
"""

from enum import Enum
from typing import NewType

# Amounts travel as JSON numbers, so they stay floats end to end
Amount = NewType("Amount", float)

MonthNumber = NewType("MonthNumber", int)

CategoryId = NewType("CategoryId", int)

Year = NewType("Year", int)

MONTHS: tuple[MonthNumber, ...] = tuple(MonthNumber(m) for m in range(1, 13))


class CategoryKind(str, Enum):
    """Which side of the matrix a category lives on."""

    INCOME = "income"
    EXPENSE = "expense"
