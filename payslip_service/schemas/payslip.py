"""
Pydantic schemas for the payslip API.

Submission fields are deliberately loose (mostly optional strings) so that
the rule-based validators, not Pydantic, decide what is acceptable and
produce the field-specific messages callers rely on.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LineItem(BaseModel):
    component: Optional[str] = None
    amount: Optional[float] = None


class PayslipCreate(CamelModel):
    """Request body for creating a payslip"""

    employee_id: Optional[str] = None
    employee_name: Optional[str] = None
    designation: Optional[str] = None
    date_joining: Optional[date] = None
    month_year: Optional[str] = None
    employee_type: Optional[str] = None
    location: Optional[str] = None
    bank_name: Optional[str] = None
    account_no: Optional[str] = None
    working_days: Optional[int] = None
    lop: Optional[int] = None
    pan: Optional[str] = None
    duration: Optional[str] = None
    earnings: Optional[List[LineItem]] = None
    deductions: Optional[List[LineItem]] = None
    gross_pay: Optional[Decimal] = None
    total_deductions: Optional[Decimal] = None
    net_pay: Optional[Decimal] = None
    provident_fund: Optional[str] = None
    uan: Optional[str] = None
    esic: Optional[str] = None


class PayslipCreated(BaseModel):
    id: int
    message: str = "Payslip created successfully"


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str


class PayslipRecord(BaseModel):
    """Stored payslip as persisted, keyed by column name"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: str
    employee_name: Optional[str] = None
    designation: Optional[str] = None
    date_joining: Optional[date] = None
    month_year: str
    employee_type: Optional[str] = None
    location: Optional[str] = None
    bank_name: Optional[str] = None
    account_no: Optional[str] = None
    working_days: Optional[int] = None
    lop: int = 0
    pan: Optional[str] = None
    duration: Optional[str] = None
    earnings: List[LineItem]
    deductions: List[LineItem]
    gross_pay: float
    total_deductions: float
    net_pay: float
    provident_fund: Optional[str] = None
    uan: Optional[str] = None
    esic: Optional[str] = None
    created_at: datetime


class PayslipDetail(CamelModel):
    """Payslip for one employee and period, with presentation fields"""

    id: int
    employee_id: str
    employee_name: Optional[str] = None
    designation: Optional[str] = None
    date_joining: Optional[date] = None
    month_year: str
    month_year_formatted: str
    employee_type: Optional[str] = None
    location: Optional[str] = None
    bank_name: Optional[str] = None
    account_no: Optional[str] = None
    working_days: Optional[int] = None
    days_in_month: int
    lop: int = 0
    lop_deduction: float
    pan: Optional[str] = None
    duration: Optional[str] = None
    earnings: List[LineItem]
    deductions: List[LineItem]
    gross_pay: float
    total_deductions: float
    net_pay: float
    provident_fund: Optional[str] = None
    uan: Optional[str] = None
    esic: Optional[str] = None


class PayslipSummary(CamelModel):
    id: int
    employee_id: str
    employee_name: Optional[str] = None
    month_year: str
    month_year_formatted: str
    net_pay: float
    created_at: datetime
