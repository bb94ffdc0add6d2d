from datetime import date, timedelta
from decimal import MAX_EMAX, MIN_EMIN, ROUND_HALF_UP, Context, Decimal, InvalidOperation
from typing import Any, Optional

from payslip_service.core.exceptions import PayslipValidationError

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

CENTS = Decimal("0.01")

# digits kept beyond the integer part of the result while dividing
GUARD_DIGITS = 10


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    return number


def lop_deduction(gross_pay: Any, working_days: Any, lop: Any) -> Decimal:
    """
    Loss-of-pay deduction: the daily rate times the days lost, to the cent.

    Returns 0 when an input is not a number or there are no working days.
    Advisory only; stored totals are never checked against it.
    """
    gross = _to_decimal(gross_pay)
    days = _to_decimal(working_days)
    lost = _to_decimal(lop)
    if gross is None or days is None or lost is None or days == 0:
        return Decimal("0")
    # wide enough that the quantize below never runs out of digits
    magnitude = gross.adjusted() + lost.adjusted() - days.adjusted() + 2
    ctx = Context(prec=max(28, magnitude + GUARD_DIGITS), Emax=MAX_EMAX, Emin=MIN_EMIN)
    amount = ctx.multiply(ctx.divide(gross, days), lost)
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP, context=ctx)


def _split_period(month_year: str) -> tuple[int, int]:
    year, month = month_year.split("-")
    return int(year), int(month)


def format_period_label(month_year: str) -> str:
    """'2024-01' -> 'January 2024'"""
    year, month = _split_period(month_year)
    return f"{MONTH_NAMES[month - 1]} {year:04d}"


def days_in_period(month_year: str) -> int:
    year, month = _split_period(month_year)
    if month == 12:
        following = date(year + 1, 1, 1)
    else:
        following = date(year, month + 1, 1)
    return (following - timedelta(days=1)).day


def period_key(year: Any, month: Any) -> str:
    """Build a 'YYYY-MM' key from separately supplied year and month."""
    year = str(year).strip()
    month = str(month).strip()
    if len(year) != 4 or not (year.isascii() and year.isdigit()):
        raise PayslipValidationError("Invalid year (e.g., 2024)", field="year")
    if not (month.isascii() and month.isdigit()) or not 1 <= int(month) <= 12:
        raise PayslipValidationError("Invalid month (1-12)", field="month")
    return f"{year}-{int(month):02d}"
