"""Pure functions for the budget projection matrix.

This module contains the functional core for the planning matrix:
- No I/O operations (no HTTP, no console, no files)
- No side effects: every edit returns a new matrix
- Derived totals are always recomputed from cell state, never edited
- Easy to test

A matrix holds one fiscal year of income and expense categories, each with
an amount per month. Monthly totals, yearly totals and the net line
(income minus expense) are derived from the cells.
"""

import math
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

from budgetplan.domain.models import MONTHS, Amount, CategoryId, CategoryKind, MonthNumber, Year
from budgetplan.errors import CellError

# Leading decimal number, the same prefix a browser's parseFloat accepts
_NUMBER_PREFIX = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing a raw cell value.

    ``amount`` is always usable. ``coerced`` is True when the input was not a
    clean non-negative number and ``amount`` was substituted or truncated.
    """

    raw: str
    amount: Amount
    coerced: bool = False
    reason: str | None = None


@dataclass(frozen=True)
class BudgetCategory:
    """Immutable income or expense line of the matrix."""

    category_id: CategoryId
    category_name: str
    kind: CategoryKind
    months: Mapping[MonthNumber, Amount] = field(default_factory=dict)
    category_color: str | None = None

    @property
    def total_year(self) -> Amount:
        """Sum of the twelve monthly amounts."""
        return category_total(self.months)

    def amount(self, month: MonthNumber) -> Amount:
        return self.months.get(month, Amount(0.0))


@dataclass(frozen=True)
class MatrixTotals:
    """Derived aggregates of a matrix."""

    monthly_income: dict[MonthNumber, Amount]
    monthly_expense: dict[MonthNumber, Amount]
    monthly_net: dict[MonthNumber, Amount]
    yearly_income: Amount
    yearly_expense: Amount
    yearly_net: Amount


@dataclass(frozen=True)
class BudgetMatrix:
    """Immutable projection matrix for one fiscal year."""

    year: Year
    income_categories: tuple[BudgetCategory, ...]
    expense_categories: tuple[BudgetCategory, ...]
    totals: MatrixTotals
    revision: str | None = None

    def categories(self, kind: CategoryKind) -> tuple[BudgetCategory, ...]:
        if kind is CategoryKind.INCOME:
            return self.income_categories
        return self.expense_categories

    def all_categories(self) -> tuple[BudgetCategory, ...]:
        return self.income_categories + self.expense_categories


@dataclass(frozen=True)
class Projection:
    """A single planned (category, month, amount) record sent on save."""

    category_id: CategoryId
    month: MonthNumber
    projected_amount: Amount

    def to_payload(self) -> dict[str, Any]:
        return {
            "categoryId": self.category_id,
            "month": self.month,
            "projectedAmount": self.projected_amount,
        }


def parse_amount(raw: str) -> ParseResult:
    """Parse a free-form cell value into an amount.

    Thousands separators (commas) and surrounding whitespace are stripped.
    Anything that does not start with a number, and any negative value,
    becomes 0. Trailing characters after a valid number are dropped.
    Never raises: malformed input is reported through ``coerced``.

    Args:
        raw: Text typed by the user.

    Returns:
        ParseResult with the amount to apply.
    """
    text = raw.replace(",", "").strip()
    if not text:
        return ParseResult(raw=raw, amount=Amount(0.0), coerced=raw != "", reason="empty value" if raw else None)

    match = _NUMBER_PREFIX.match(text)
    if match is None:
        return ParseResult(raw=raw, amount=Amount(0.0), coerced=True, reason="not a number")

    value = float(match.group(0))
    if math.isinf(value):
        return ParseResult(raw=raw, amount=Amount(0.0), coerced=True, reason="number out of range")
    if value < 0:
        return ParseResult(raw=raw, amount=Amount(0.0), coerced=True, reason="negative amount")
    if match.end() != len(text):
        return ParseResult(raw=raw, amount=Amount(value), coerced=True, reason="ignored trailing characters")

    return ParseResult(raw=raw, amount=Amount(value))


def normalize_months(months: Mapping[Any, Any] | None) -> dict[MonthNumber, Amount]:
    """Build a full month → amount mapping, defaulting missing months to 0.

    Keys may be ints or numeric strings (JSON object keys). Values may be
    numbers, numeric strings or None.
    """
    normalized = {month: Amount(0.0) for month in MONTHS}
    if not months:
        return normalized

    for key, value in months.items():
        try:
            month = MonthNumber(int(key))
        except (TypeError, ValueError):
            continue
        if month not in normalized:
            continue
        if value is None:
            continue
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            normalized[month] = Amount(float(value)) if value > 0 else Amount(0.0)
        else:
            normalized[month] = parse_amount(str(value)).amount

    return normalized


def category_total(months: Mapping[MonthNumber, Amount]) -> Amount:
    """Sum all monthly amounts of a category."""
    return Amount(sum(months.get(month, 0.0) for month in MONTHS))


def monthly_sums(categories: Iterable[BudgetCategory]) -> dict[MonthNumber, Amount]:
    """Sum a set of categories month by month."""
    sums = {month: 0.0 for month in MONTHS}
    for category in categories:
        for month in MONTHS:
            sums[month] += category.amount(month)
    return {month: Amount(total) for month, total in sums.items()}


def compute_totals(
    income_categories: Sequence[BudgetCategory],
    expense_categories: Sequence[BudgetCategory],
) -> MatrixTotals:
    """Recompute every derived aggregate from cell state.

    Args:
        income_categories: Income lines of the matrix.
        expense_categories: Expense lines of the matrix.

    Returns:
        MatrixTotals with monthly and yearly income, expense and net.
    """
    income = monthly_sums(income_categories)
    expense = monthly_sums(expense_categories)
    net = {month: Amount(income[month] - expense[month]) for month in MONTHS}

    yearly_income = Amount(sum(income.values()))
    yearly_expense = Amount(sum(expense.values()))

    return MatrixTotals(
        monthly_income=income,
        monthly_expense=expense,
        monthly_net=net,
        yearly_income=yearly_income,
        yearly_expense=yearly_expense,
        yearly_net=Amount(yearly_income - yearly_expense),
    )


def build_matrix(
    year: Year,
    income_categories: Iterable[BudgetCategory],
    expense_categories: Iterable[BudgetCategory],
    revision: str | None = None,
) -> BudgetMatrix:
    """Assemble a matrix and compute its totals."""
    income = tuple(income_categories)
    expense = tuple(expense_categories)
    return BudgetMatrix(
        year=year,
        income_categories=income,
        expense_categories=expense,
        totals=compute_totals(income, expense),
        revision=revision,
    )


def recalculate(matrix: BudgetMatrix) -> BudgetMatrix:
    """Return the matrix with all derived totals rebuilt from its cells."""
    return replace(matrix, totals=compute_totals(matrix.income_categories, matrix.expense_categories))


def empty_matrix(year: Year, income_names: Sequence[str], expense_names: Sequence[str]) -> BudgetMatrix:
    """Create a matrix with zeroed categories, numbering ids from 1."""
    income = [
        BudgetCategory(CategoryId(i), name, CategoryKind.INCOME, normalize_months(None))
        for i, name in enumerate(income_names, start=1)
    ]
    offset = len(income_names)
    expense = [
        BudgetCategory(CategoryId(offset + i), name, CategoryKind.EXPENSE, normalize_months(None))
        for i, name in enumerate(expense_names, start=1)
    ]
    return build_matrix(year, income, expense)


def set_cell(
    matrix: BudgetMatrix,
    category_id: CategoryId,
    month: MonthNumber,
    kind: CategoryKind,
    raw_value: str,
) -> tuple[BudgetMatrix, ParseResult]:
    """Set one cell from user input and recompute the matrix.

    Args:
        matrix: Current matrix.
        category_id: Category to edit; must exist among categories of ``kind``.
        month: Month number 1-12.
        kind: Income or expense side.
        raw_value: Free-form text typed by the user.

    Returns:
        Tuple of (new_matrix, parse_result). The parsed amount is applied
        even when it was coerced.

    Raises:
        CellError: If the month is out of range or the category is unknown.
    """
    if month not in MONTHS:
        raise CellError(f"Month must be between 1 and 12, got {month}")

    categories = matrix.categories(kind)
    index = next((i for i, c in enumerate(categories) if c.category_id == category_id), None)
    if index is None:
        raise CellError(f"No {kind.value} category with id {category_id}")

    result = parse_amount(raw_value)
    target = categories[index]
    months = dict(target.months)
    months[month] = result.amount
    updated = categories[:index] + (replace(target, months=months),) + categories[index + 1 :]

    if kind is CategoryKind.INCOME:
        matrix = replace(matrix, income_categories=updated)
    else:
        matrix = replace(matrix, expense_categories=updated)

    return recalculate(matrix), result


def build_projections(matrix: BudgetMatrix) -> list[Projection]:
    """Flatten the matrix into the records sent on save.

    Only positive amounts are emitted: a cell cleared to 0 disappears from
    the server side instead of being stored as an explicit zero.
    """
    projections: list[Projection] = []
    for category in matrix.all_categories():
        for month in MONTHS:
            amount = category.amount(month)
            if amount > 0:
                projections.append(Projection(category.category_id, month, amount))
    return projections


def find_category(matrix: BudgetMatrix, ref: str, kind: CategoryKind | None = None) -> BudgetCategory:
    """Find a category by id or case-insensitive name.

    Args:
        matrix: Matrix to search.
        ref: Category id (digits) or name.
        kind: Restrict the search to one side of the matrix.

    Returns:
        The matching category.

    Raises:
        CellError: If nothing matches or the name exists on both sides.
    """
    pool = matrix.categories(kind) if kind else matrix.all_categories()
    needle = ref.strip()

    matches = [c for c in pool if c.category_name.lower() == needle.lower()]
    if not matches and needle.isdigit():
        matches = [c for c in pool if c.category_id == int(needle)]

    if not matches:
        raise CellError(f"Category '{ref}' not found")
    if len(matches) > 1:
        raise CellError(f"Category '{ref}' is ambiguous, specify the kind (income or expense)")
    return matches[0]


def _category_from_payload(data: Mapping[str, Any], kind: CategoryKind) -> BudgetCategory:
    return BudgetCategory(
        category_id=CategoryId(int(data["categoryId"])),
        category_name=str(data.get("categoryName", "")),
        kind=kind,
        months=normalize_months(data.get("months")),
        category_color=data.get("categoryColor"),
    )


def matrix_from_payload(payload: Mapping[str, Any]) -> BudgetMatrix:
    """Decode the matrix JSON returned by the server.

    Totals sent by the server are ignored and recomputed locally.

    Raises:
        KeyError: If a category lacks its ``categoryId``.
        ValueError: If the payload has no usable year.
    """
    income = [_category_from_payload(c, CategoryKind.INCOME) for c in payload.get("incomeCategories") or []]
    expense = [_category_from_payload(c, CategoryKind.EXPENSE) for c in payload.get("expenseCategories") or []]
    revision = payload.get("revision")
    return build_matrix(
        Year(int(payload["year"])),
        income,
        expense,
        revision=str(revision) if revision is not None else None,
    )


def _category_to_payload(category: BudgetCategory) -> dict[str, Any]:
    data: dict[str, Any] = {
        "categoryId": category.category_id,
        "categoryName": category.category_name,
        "months": {str(month): category.amount(month) for month in MONTHS},
        "totalYear": category.total_year,
    }
    if category.category_color is not None:
        data["categoryColor"] = category.category_color
    return data


def matrix_to_payload(matrix: BudgetMatrix) -> dict[str, Any]:
    """Encode a matrix in the server's JSON shape."""
    totals = matrix.totals
    payload: dict[str, Any] = {
        "year": matrix.year,
        "incomeCategories": [_category_to_payload(c) for c in matrix.income_categories],
        "expenseCategories": [_category_to_payload(c) for c in matrix.expense_categories],
        "monthlyTotals": {
            "income": {str(m): v for m, v in totals.monthly_income.items()},
            "expense": {str(m): v for m, v in totals.monthly_expense.items()},
            "net": {str(m): v for m, v in totals.monthly_net.items()},
        },
        "yearlyTotals": {
            "income": totals.yearly_income,
            "expense": totals.yearly_expense,
            "net": totals.yearly_net,
        },
    }
    if matrix.revision is not None:
        payload["revision"] = matrix.revision
    return payload
