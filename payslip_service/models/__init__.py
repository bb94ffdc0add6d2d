from payslip_service.models.payslip import Payslip  # noqa: F401
