# payslip_service/api/endpoints/payslips.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from payslip_service.core.exceptions import PayslipValidationError
from payslip_service.repositories.payslips import PayslipRepository
from payslip_service.schemas.payslip import (
    MessageResponse,
    PayslipCreate,
    PayslipCreated,
    PayslipDetail,
    PayslipRecord,
    PayslipSummary,
)
from payslip_service.services.calculator import period_key
from payslip_service.services.validators import valid_employee_id, validate_payslip

logger = logging.getLogger(__name__)

router = APIRouter()


def get_repository(request: Request) -> PayslipRepository:
    return request.app.state.repository


@router.post("", status_code=201, response_model=PayslipCreated)
async def create_payslip(
    payload: PayslipCreate,
    repo: PayslipRepository = Depends(get_repository),
):
    logger.info("Received payslip for %s %s", payload.employee_id, payload.month_year)
    payslip = validate_payslip(payload)
    payslip_id = await repo.create(payslip)
    return PayslipCreated(id=payslip_id)


@router.get("", response_model=PayslipDetail)
async def get_payslip(
    employee_id: Optional[str] = Query(None, alias="employeeId"),
    month: Optional[str] = Query(None),
    year: Optional[str] = Query(None),
    repo: PayslipRepository = Depends(get_repository),
):
    logger.info("Payslip lookup for %s %s/%s", employee_id, month, year)
    if not employee_id or not month or not year:
        raise PayslipValidationError("Employee ID, month, and year are required")

    if not valid_employee_id(employee_id):
        raise PayslipValidationError("Invalid Employee ID format (e.g., ATS0123)", field="employee_id")

    month_year = period_key(year, month)
    return await repo.get_by_identity(employee_id, month_year)


# declared before /{payslip_id} so "all" is never parsed as an id
@router.get("/all", response_model=list[PayslipSummary])
async def list_payslips(repo: PayslipRepository = Depends(get_repository)):
    return await repo.list()


@router.get("/{payslip_id}", response_model=PayslipRecord)
async def get_payslip_by_id(payslip_id: int, repo: PayslipRepository = Depends(get_repository)):
    return await repo.get_by_id(payslip_id)


@router.delete("/{payslip_id}", response_model=MessageResponse)
async def delete_payslip(payslip_id: int, repo: PayslipRepository = Depends(get_repository)):
    logger.info("Delete requested for payslip %s", payslip_id)
    await repo.delete_by_id(payslip_id)
    return MessageResponse(message="Payslip deleted successfully")
