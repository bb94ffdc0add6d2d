"""
Canonical field rules for payslip data.

The same table drives the application validators in
``payslip_service.services.validators`` and the CHECK constraints on the
``payslips`` table, so a rule is only ever written down once.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Optional, Sequence

from sqlalchemy import CheckConstraint, and_, column, func
from sqlalchemy.sql.elements import ColumnElement


@dataclass(frozen=True)
class PatternRule:
    pattern: str
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    min_letters: Optional[int] = None
    strip: bool = False
    _regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_regex", re.compile(self.pattern))

    def matches(self, value: Any) -> bool:
        if not isinstance(value, str):
            return False
        if self.strip:
            value = value.strip()
        if self.min_length is not None and len(value) < self.min_length:
            return False
        if self.max_length is not None and len(value) > self.max_length:
            return False
        if self.min_letters is not None:
            if sum(1 for c in value if c.isascii() and c.isalpha()) < self.min_letters:
                return False
        return self._regex.fullmatch(value) is not None

    def clause(self, col: ColumnElement) -> ColumnElement:
        parts = [col.regexp_match(self.pattern)]
        if self.min_length is not None:
            parts.append(func.length(col) >= self.min_length)
        if self.max_length is not None:
            parts.append(func.length(col) <= self.max_length)
        if self.min_letters is not None:
            parts.append(func.length(func.replace(col, " ", "")) >= self.min_letters)
        return and_(*parts)


@dataclass(frozen=True)
class RangeRule:
    low: Optional[Any] = None
    high: Optional[Any] = None
    integer: bool = False
    places: Optional[int] = None

    def matches(self, value: Any) -> bool:
        if isinstance(value, bool):
            return False
        if self.integer:
            if not isinstance(value, int):
                return False
        elif isinstance(value, Decimal):
            if not value.is_finite():
                return False
        elif isinstance(value, (int, float)):
            if not math.isfinite(value):
                return False
        else:
            return False
        if self.low is not None and value < self.low:
            return False
        if self.high is not None and value > self.high:
            return False
        if self.places is not None:
            exact = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
            if exact != exact.quantize(Decimal(1).scaleb(-self.places)):
                return False
        return True

    def clause(self, col: ColumnElement) -> ColumnElement:
        if self.low is not None and self.high is not None:
            return col.between(self.low, self.high)
        if self.low is not None:
            return col >= self.low
        return col <= self.high


@dataclass(frozen=True)
class ChoiceRule:
    choices: Sequence[str]

    def matches(self, value: Any) -> bool:
        return isinstance(value, str) and value in self.choices

    def clause(self, col: ColumnElement) -> ColumnElement:
        return col.in_(list(self.choices))


# Patterns end in \Z, not $: SQLite's REGEXP is Python's re.search, where $
# also matches before a trailing newline. PostgreSQL reads \Z the same way.
EMPLOYEE_ID = PatternRule(r"^ATS0(?!000)[0-9]{3}\Z")
PAN = PatternRule(r"^[A-Z]{5}[0-9]{4}[A-Z]\Z")
ALPHABETIC_NAME = PatternRule(
    r"^[A-Za-z]+( [A-Za-z]+)*\Z",
    min_length=5,
    max_length=30,
    min_letters=5,
    strip=True,
)
BANK_ACCOUNT = PatternRule(r"^[0-9]{9,16}\Z", strip=True)
PERIOD_KEY = PatternRule(r"^[0-9]{4}-(0[1-9]|1[0-2])\Z")

DAY_COUNT = RangeRule(0, 31, integer=True)

# fits the Numeric(10, 2) money columns
MAX_AMOUNT = Decimal("99999999.99")
AMOUNT = RangeRule(low=0, high=MAX_AMOUNT, places=2)

EMPLOYEE_TYPES = ("Permanent", "Contract", "Temporary")
EMPLOYEE_TYPE = ChoiceRule(EMPLOYEE_TYPES)

EARLIEST_JOINING_DATE = date(1990, 1, 1)

# column name -> rule, for every column that carries a CHECK constraint
COLUMN_RULES = {
    "employee_id": EMPLOYEE_ID,
    "employee_name": ALPHABETIC_NAME,
    "designation": ALPHABETIC_NAME,
    "month_year": PERIOD_KEY,
    "employee_type": EMPLOYEE_TYPE,
    "location": ALPHABETIC_NAME,
    "bank_name": ALPHABETIC_NAME,
    "account_no": BANK_ACCOUNT,
    "working_days": DAY_COUNT,
    "lop": DAY_COUNT,
    "pan": PAN,
    "gross_pay": AMOUNT,
    "total_deductions": AMOUNT,
    "net_pay": AMOUNT,
}


def check_constraints(table_name: str) -> list[CheckConstraint]:
    """Build the CHECK constraints for ``table_name`` from the rule table."""
    constraints = [
        CheckConstraint(rule.clause(column(name)), name=f"ck_{table_name}_{name}")
        for name, rule in COLUMN_RULES.items()
    ]

    joined = column("date_joining")
    constraints.append(
        CheckConstraint(
            joined >= EARLIEST_JOINING_DATE.isoformat(),
            name=f"ck_{table_name}_date_joining_min",
        )
    )
    # upper bound is only enforced by PostgreSQL
    constraints.append(
        CheckConstraint(
            joined <= func.current_date(),
            name=f"ck_{table_name}_date_joining_max",
        ).ddl_if(dialect="postgresql")
    )
    return constraints
