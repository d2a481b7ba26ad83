"""Display helpers for amounts, months and years."""

from budgetplan.domain.models import Amount, MonthNumber, Year

MONTH_NAMES = (
    "Enero",
    "Febrero",
    "Marzo",
    "Abril",
    "Mayo",
    "Junio",
    "Julio",
    "Agosto",
    "Septiembre",
    "Octubre",
    "Noviembre",
    "Diciembre",
)

YEAR_OPTIONS = 5


def month_label(month: MonthNumber, short: bool = False) -> str:
    """Spanish name of a month number (1-12)."""
    name = MONTH_NAMES[month - 1]
    return name[:3] if short else name


def format_currency(amount: Amount) -> str:
    """Format an amount as whole pesos, e.g. ``$1,000`` or ``-$250``."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.0f}"


def format_cell(amount: Amount) -> str:
    """Format an editable cell: blank for zero, grouped digits otherwise."""
    if amount <= 0:
        return ""
    if amount == int(amount):
        return f"{amount:,.0f}"
    return f"{amount:,.2f}"


def year_options(current: Year) -> list[Year]:
    """Years offered by the year picker: last year and the next few."""
    return [Year(current + offset - 1) for offset in range(YEAR_OPTIONS)]


def parse_month(text: str) -> MonthNumber | None:
    """Read a month given as a number (1-12) or a Spanish name or prefix.

    Returns:
        The month number, or None if the text matches no month.
    """
    text = text.strip().lower()
    if text.isdigit():
        value = int(text)
        return MonthNumber(value) if 1 <= value <= 12 else None

    if len(text) < 3:
        return None
    for index, name in enumerate(MONTH_NAMES, start=1):
        if name.lower().startswith(text):
            return MonthNumber(index)
    return None
