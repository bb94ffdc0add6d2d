from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import JSON, Date, DateTime, Index, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from payslip_service.core.rules import check_constraints
from payslip_service.db.base import Base

UNIQUE_PERIOD_CONSTRAINT = "uq_payslips_employee_month"

# largest id an INTEGER primary key can hold on PostgreSQL
MAX_PAYSLIP_ID = 2**31 - 1

LineItems = JSON().with_variant(JSONB(), "postgresql")


class Payslip(Base):
    __tablename__ = "payslips"
    __table_args__ = (
        UniqueConstraint("employee_id", "month_year", name=UNIQUE_PERIOD_CONSTRAINT),
        Index("idx_payslips_employee_id", "employee_id"),
        Index("idx_payslips_month_year", "month_year"),
        Index("idx_payslips_created_at", "created_at"),
        *check_constraints("payslips"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    employee_id: Mapped[str] = mapped_column(String(7), nullable=False)
    employee_name: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    designation: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    date_joining: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    month_year: Mapped[str] = mapped_column(String(7), nullable=False)
    employee_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    location: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    bank_name: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    account_no: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)

    working_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    lop: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pan: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    duration: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    earnings: Mapped[list[dict[str, Any]]] = mapped_column(LineItems, nullable=False)
    deductions: Mapped[list[dict[str, Any]]] = mapped_column(LineItems, nullable=False)

    gross_pay: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total_deductions: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    net_pay: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    provident_fund: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    uan: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    esic: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
