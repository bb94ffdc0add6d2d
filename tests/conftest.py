"""
Pytest fixtures for payslip service tests.

Each test gets its own SQLite database file (via aiosqlite) so the
unique and CHECK constraints behave as they do in production.
"""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from payslip_service.db.session import Database
from payslip_service.main import create_app
from payslip_service.repositories.payslips import PayslipRepository
from payslip_service.schemas.payslip import PayslipCreate
from payslip_service.services.validators import validate_payslip


class FakeClock:
    """Returns strictly increasing timestamps, one minute apart."""

    def __init__(self, start: datetime = datetime(2024, 2, 1, 9, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(minutes=1)
        return self.current


@pytest_asyncio.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'payslips.db'}")
    db.connect()
    await db.create_all()
    try:
        yield db
    finally:
        await db.dispose()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repository(database, clock):
    return PayslipRepository(database, clock=clock)


@pytest_asyncio.fixture
async def client(database, repository):
    app = create_app(database=database, repository=repository)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def payload_factory():
    """Factory for JSON payloads as the HR screen submits them."""

    def create_payload(**overrides) -> dict:
        payload = {
            "employeeId": "ATS0123",
            "employeeName": "Priya Sharma",
            "designation": "Software Engineer",
            "dateJoining": "2020-06-15",
            "monthYear": "2024-01",
            "employeeType": "Permanent",
            "location": "Bangalore",
            "bankName": "State Bank",
            "accountNo": "123456789012",
            "workingDays": 31,
            "lop": 1,
            "pan": "ABCDE1234F",
            "duration": "01-01-2024 to 31-01-2024",
            "earnings": [
                {"component": "Basic Salary", "amount": 30000},
                {"component": "House Rent", "amount": 12000},
            ],
            "deductions": [{"component": "Professional Tax", "amount": 200}],
            "grossPay": 42000,
            "totalDeductions": 200,
            "netPay": 41800,
            "providentFund": "PF12345",
            "uan": "100200300400",
            "esic": "ESIC998877",
        }
        payload.update(overrides)
        return payload

    return create_payload


@pytest.fixture
def payslip_factory(payload_factory):
    """Factory for validated payslips ready for the repository."""

    def create_payslip(**overrides) -> PayslipCreate:
        return validate_payslip(PayslipCreate(**payload_factory(**overrides)))

    return create_payslip
