"""
Persistence for payslips.

Every operation opens its own session on the injected ``Database``. Creates
are optimistic: the duplicate pre-check is a courtesy, and the unique
constraint on (employee_id, month_year) settles concurrent submissions.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy import delete, desc, select
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError

from payslip_service.core.exceptions import (
    ConstraintViolationError,
    DuplicatePayslipError,
    PayslipNotFoundError,
    PayslipValidationError,
    StorageError,
    StorageUnavailableError,
)
from payslip_service.db.session import Database
from payslip_service.models.payslip import MAX_PAYSLIP_ID, UNIQUE_PERIOD_CONSTRAINT, Payslip
from payslip_service.schemas.payslip import (
    PayslipCreate,
    PayslipDetail,
    PayslipRecord,
    PayslipSummary,
)
from payslip_service.services.calculator import (
    days_in_period,
    format_period_label,
    lop_deduction,
)
from payslip_service.services.validators import valid_employee_id

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION_SQLSTATE = "23505"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    if getattr(orig, "sqlstate", None) == UNIQUE_VIOLATION_SQLSTATE:
        return True
    if getattr(orig, "pgcode", None) == UNIQUE_VIOLATION_SQLSTATE:
        return True
    message = str(orig)
    return UNIQUE_PERIOD_CONSTRAINT in message or "UNIQUE constraint failed" in message


def translate_storage_error(exc: SQLAlchemyError, operation: str) -> StorageError:
    """Map a non-integrity SQLAlchemy failure onto the storage error taxonomy."""
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        logger.error("Storage connection lost during %s: %s", operation, exc)
        return StorageUnavailableError(f"Storage unavailable during {operation}")
    logger.exception("Storage failure during %s", operation)
    return StorageError(f"Storage failure during {operation}")


class PayslipRepository:
    def __init__(self, database: Database, clock: Callable[[], datetime] = utcnow):
        self.database = database
        self.clock = clock

    async def _find_existing(self, session, employee_id: str, month_year: str) -> Optional[int]:
        res = await session.execute(
            select(Payslip.id).where(
                Payslip.employee_id == employee_id,
                Payslip.month_year == month_year,
            )
        )
        return res.scalar_one_or_none()

    async def create(self, payslip: PayslipCreate) -> int:
        """
        Store a validated payslip and return its id.

        Raises ``DuplicatePayslipError`` when the employee already has a
        payslip for the period, whether caught by the pre-check or by the
        unique constraint on insert.
        """
        try:
            async with self.database.session() as session:
                existing = await self._find_existing(session, payslip.employee_id, payslip.month_year)
                if existing is not None:
                    raise DuplicatePayslipError(payslip.employee_id, payslip.month_year)

                row = Payslip(
                    **payslip.model_dump(exclude={"earnings", "deductions"}),
                    earnings=[item.model_dump() for item in payslip.earnings or []],
                    deductions=[item.model_dump() for item in payslip.deductions or []],
                    created_at=self.clock(),
                )
                session.add(row)
                try:
                    await session.commit()
                except IntegrityError as exc:
                    await session.rollback()
                    if is_unique_violation(exc):
                        logger.info(
                            "Concurrent create lost for %s %s",
                            payslip.employee_id,
                            payslip.month_year,
                        )
                        raise DuplicatePayslipError(payslip.employee_id, payslip.month_year) from exc
                    logger.error("Payslip rejected by storage constraint: %s", exc.orig)
                    raise ConstraintViolationError("Payslip rejected by storage constraint") from exc

                logger.info("Created payslip %s for %s %s", row.id, row.employee_id, row.month_year)
                return row.id
        except SQLAlchemyError as exc:
            raise translate_storage_error(exc, "create") from exc

    async def get_by_identity(self, employee_id: str, month_year: str) -> PayslipDetail:
        if not valid_employee_id(employee_id):
            raise PayslipValidationError("Invalid Employee ID format (e.g., ATS0123)", field="employee_id")

        try:
            async with self.database.session() as session:
                res = await session.execute(
                    select(Payslip)
                    .where(Payslip.employee_id == employee_id, Payslip.month_year == month_year)
                    .limit(1)
                )
                row = res.scalars().first()
        except SQLAlchemyError as exc:
            raise translate_storage_error(exc, "get_by_identity") from exc

        if row is None:
            raise PayslipNotFoundError("No payslips found")

        record = PayslipRecord.model_validate(row)
        return PayslipDetail(
            **record.model_dump(exclude={"created_at"}),
            month_year_formatted=format_period_label(record.month_year),
            days_in_month=days_in_period(record.month_year),
            lop_deduction=float(lop_deduction(row.gross_pay, row.working_days, row.lop)),
        )

    async def get_by_id(self, payslip_id: int) -> PayslipRecord:
        if not 1 <= payslip_id <= MAX_PAYSLIP_ID:
            raise PayslipNotFoundError()

        try:
            async with self.database.session() as session:
                row = await session.get(Payslip, payslip_id)
        except SQLAlchemyError as exc:
            raise translate_storage_error(exc, "get_by_id") from exc

        if row is None:
            raise PayslipNotFoundError()
        return PayslipRecord.model_validate(row)

    async def list(self) -> list[PayslipSummary]:
        try:
            async with self.database.session() as session:
                res = await session.execute(
                    select(
                        Payslip.id,
                        Payslip.employee_id,
                        Payslip.employee_name,
                        Payslip.month_year,
                        Payslip.net_pay,
                        Payslip.created_at,
                    ).order_by(desc(Payslip.created_at), desc(Payslip.id))
                )
                rows = res.all()
        except SQLAlchemyError as exc:
            raise translate_storage_error(exc, "list") from exc

        return [
            PayslipSummary(
                id=r.id,
                employee_id=r.employee_id,
                employee_name=r.employee_name,
                month_year=r.month_year,
                month_year_formatted=format_period_label(r.month_year),
                net_pay=float(r.net_pay),
                created_at=r.created_at,
            )
            for r in rows
        ]

    async def delete_by_id(self, payslip_id: int) -> None:
        if not 1 <= payslip_id <= MAX_PAYSLIP_ID:
            raise PayslipNotFoundError()

        try:
            async with self.database.session() as session:
                res = await session.execute(delete(Payslip).where(Payslip.id == payslip_id))
                await session.commit()
        except SQLAlchemyError as exc:
            raise translate_storage_error(exc, "delete_by_id") from exc

        if res.rowcount == 0:
            raise PayslipNotFoundError()
        logger.info("Deleted payslip %s", payslip_id)
