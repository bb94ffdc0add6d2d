"""
Typed failures raised by the payslip engine.

Handlers in ``payslip_service.main`` turn each of these into a JSON
``{"error": ...}`` response with the status code carried by the exception.
"""

from typing import Optional


class PayslipError(Exception):
    """Base exception for the payslip engine"""

    status_code: int = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class PayslipValidationError(PayslipError):
    """A submitted field failed validation"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, status_code=400)
        self.field = field


class DuplicatePayslipError(PayslipError):
    """A payslip already exists for the employee and period"""

    def __init__(self, employee_id: str, month_year: str):
        super().__init__(
            "Payslip already exists for this Employee ID and Month/Year",
            status_code=400,
        )
        self.employee_id = employee_id
        self.month_year = month_year


class PayslipNotFoundError(PayslipError):
    def __init__(self, message: str = "Payslip not found"):
        super().__init__(message, status_code=404)


class StorageError(PayslipError):
    """Failure at the persistence boundary; opaque to callers"""

    def __init__(self, message: str = "Storage failure"):
        super().__init__(message, status_code=500)


class ConstraintViolationError(StorageError):
    """Storage rejected data that passed application validation"""


class StorageUnavailableError(StorageError):
    """The database could not be reached"""
