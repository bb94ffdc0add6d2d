"""
Payslip validation.

The ``valid_*`` predicates are pure and return ``False`` for anything they
do not accept, including values of the wrong type. ``validate_line_items``
and ``validate_payslip`` turn the first failing predicate into a
``PayslipValidationError`` with a message naming the offending field.
"""

from datetime import date, datetime
from typing import Any, Iterable, Optional

from payslip_service.core import rules
from payslip_service.core.exceptions import PayslipValidationError
from payslip_service.schemas.payslip import LineItem, PayslipCreate


def valid_employee_id(value: Any) -> bool:
    return rules.EMPLOYEE_ID.matches(value)


def valid_pan(value: Any) -> bool:
    return rules.PAN.matches(value)


def valid_alphabetic_name(value: Any) -> bool:
    return rules.ALPHABETIC_NAME.matches(value)


def valid_bank_account(value: Any) -> bool:
    return rules.BANK_ACCOUNT.matches(value)


def valid_period_key(value: Any) -> bool:
    return rules.PERIOD_KEY.matches(value)


def valid_day_count(value: Any) -> bool:
    return rules.DAY_COUNT.matches(value)


def valid_employee_type(value: Any) -> bool:
    return rules.EMPLOYEE_TYPE.matches(value)


def valid_amount(value: Any) -> bool:
    return rules.AMOUNT.matches(value)


def valid_joining_date(value: Any, today: Optional[date] = None) -> bool:
    if not isinstance(value, date) or isinstance(value, datetime):
        return False
    return rules.EARLIEST_JOINING_DATE <= value <= (today or date.today())


def validate_line_items(
    items: Optional[Iterable[LineItem]],
    kind: str,
    required: bool = False,
) -> list[dict]:
    """
    Validate an earnings or deductions collection.

    ``kind`` is the singular collection name ("earning" or "deduction") and
    appears in error messages. Returns the items as plain dicts with trimmed
    component names, ready to be stored as JSON.
    """
    items = list(items or [])
    if required and not items:
        raise PayslipValidationError(f"At least one {kind} is required", field=f"{kind}s")

    normalized = []
    for item in items:
        if not valid_alphabetic_name(item.component):
            raise PayslipValidationError(
                f"Invalid {kind} component name: {item.component}",
                field=f"{kind}s",
            )
        if not valid_amount(item.amount):
            raise PayslipValidationError(
                f"Invalid {kind} amount for {item.component}",
                field=f"{kind}s",
            )
        normalized.append({"component": item.component.strip(), "amount": item.amount})
    return normalized


_NAME_FIELDS = (
    ("employee_name", "Employee Name"),
    ("designation", "Designation"),
    ("location", "Location"),
    ("bank_name", "Bank Name"),
)

_MONEY_FIELDS = (
    ("gross_pay", "Gross Pay"),
    ("total_deductions", "Total Deductions"),
    ("net_pay", "Net Pay"),
)

# free-text fields and their column widths
_TEXT_LIMITS = (
    ("duration", "Duration", 100),
    ("provident_fund", "Provident Fund", 20),
    ("uan", "UAN", 20),
    ("esic", "ESIC", 20),
)

_OPTIONAL_TEXT = (
    "employee_name",
    "designation",
    "employee_type",
    "location",
    "bank_name",
    "account_no",
    "pan",
    "duration",
    "provident_fund",
    "uan",
    "esic",
)


def validate_payslip(payload: PayslipCreate, today: Optional[date] = None) -> PayslipCreate:
    """
    Check a whole submission and return a normalized copy.

    Blank optional text becomes ``None``, names and account numbers are
    trimmed, ``lop`` defaults to 0 and ``deductions`` to an empty list.
    Caller-supplied totals are accepted as given once they are non-negative.
    """
    data = payload.model_dump(exclude={"earnings", "deductions"})

    for key in _OPTIONAL_TEXT:
        if isinstance(data[key], str) and not data[key].strip():
            data[key] = None

    if not data["employee_id"] or not data["month_year"]:
        raise PayslipValidationError("Employee ID and Month/Year are required")

    if not valid_employee_id(data["employee_id"]):
        raise PayslipValidationError("Invalid Employee ID format (e.g., ATS0123)", field="employee_id")

    if not valid_period_key(data["month_year"]):
        raise PayslipValidationError("Invalid Month/Year format (e.g., 2024-01)", field="month_year")

    for key, label in _NAME_FIELDS:
        if data[key] is None:
            continue
        if not valid_alphabetic_name(data[key]):
            raise PayslipValidationError(f"Invalid {label} (min 5 letters, max 30)", field=key)
        data[key] = data[key].strip()

    if data["date_joining"] is not None and not valid_joining_date(data["date_joining"], today):
        raise PayslipValidationError(
            "Date of Joining must be between 1990-01-01 and today",
            field="date_joining",
        )

    if data["employee_type"] is not None and not valid_employee_type(data["employee_type"]):
        raise PayslipValidationError(
            "Employee Type must be one of " + ", ".join(rules.EMPLOYEE_TYPES),
            field="employee_type",
        )

    if data["pan"] is not None and not valid_pan(data["pan"]):
        raise PayslipValidationError("Invalid PAN format (e.g., ABCDE1234F)", field="pan")

    if data["account_no"] is not None:
        if not valid_bank_account(data["account_no"]):
            raise PayslipValidationError("Invalid Bank Account Number (9-16 digits)", field="account_no")
        data["account_no"] = data["account_no"].strip()

    if data["working_days"] is not None and not valid_day_count(data["working_days"]):
        raise PayslipValidationError("Working Days must be between 0 and 31", field="working_days")

    if data["lop"] is None:
        data["lop"] = 0
    elif not valid_day_count(data["lop"]):
        raise PayslipValidationError("LOP must be between 0 and 31", field="lop")

    data["earnings"] = validate_line_items(payload.earnings, "earning", required=True)
    data["deductions"] = validate_line_items(payload.deductions, "deduction")

    for key, label in _MONEY_FIELDS:
        if data[key] is None:
            raise PayslipValidationError(f"{label} is required", field=key)
        if not valid_amount(data[key]):
            raise PayslipValidationError(
                f"{label} must be a non-negative amount up to {rules.MAX_AMOUNT} with at most 2 decimals",
                field=key,
            )

    for key, label, limit in _TEXT_LIMITS:
        if data[key] is not None and len(data[key]) > limit:
            raise PayslipValidationError(f"{label} must be at most {limit} characters", field=key)

    return PayslipCreate(**data)
