from fastapi import APIRouter

from payslip_service.api.endpoints import health, payslips


router = APIRouter()
router.include_router(health.router, tags=["health"])
router.include_router(payslips.router, prefix="/api/payslips", tags=["payslips"])
