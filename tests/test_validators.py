from datetime import date
from decimal import Decimal

import pytest

from payslip_service.core.exceptions import PayslipValidationError
from payslip_service.schemas.payslip import LineItem, PayslipCreate
from payslip_service.services.validators import (
    valid_alphabetic_name,
    valid_amount,
    valid_bank_account,
    valid_day_count,
    valid_employee_id,
    valid_employee_type,
    valid_joining_date,
    valid_pan,
    valid_period_key,
    validate_line_items,
    validate_payslip,
)


class TestFieldValidators:
    def test_employee_id_accepts_every_number_but_zero(self):
        for n in range(1000):
            assert valid_employee_id(f"ATS0{n:03d}") is (n != 0)

    @pytest.mark.parametrize(
        "value",
        ["ATS0000", "ATS1123", "ats0123", "ATS012", "ATS01234", "XTS0123", "ATS0123\n", "", None, 123],
    )
    def test_employee_id_rejects(self, value):
        assert valid_employee_id(value) is False

    def test_pan_accepts_pan_shape(self):
        assert valid_pan("ABCDE1234F") is True
        assert valid_pan("ZZZZZ0000A") is True

    @pytest.mark.parametrize(
        "value",
        [
            "aBCDE1234F",  # lowercase letter in the prefix
            "ABCD91234F",  # digit where a letter belongs
            "ABCDE12X4F",  # letter where a digit belongs
            "ABCDE12345",  # digit in the check position
            "ABCDE1234f",  # lowercase check letter
            "ABCDE1234",
            "ABCDE1234FG",
            None,
        ],
    )
    def test_pan_rejects_any_broken_character_class(self, value):
        assert valid_pan(value) is False

    @pytest.mark.parametrize(
        "value",
        ["Priya Sharma", "  Priya Sharma  ", "Ab Cd E", "Bangalore", "A" * 30],
    )
    def test_alphabetic_name_accepts(self, value):
        assert valid_alphabetic_name(value) is True

    @pytest.mark.parametrize(
        "value",
        [
            "Abc",
            "A B C D",  # only four letters
            "Priya  Sharma",
            "John3 Smith",
            "Anne-Marie",
            "A" * 31,
            "",
            None,
        ],
    )
    def test_alphabetic_name_rejects(self, value):
        assert valid_alphabetic_name(value) is False

    @pytest.mark.parametrize("value", ["123456789", "1234567890123456", " 1234567890 "])
    def test_bank_account_accepts(self, value):
        assert valid_bank_account(value) is True

    @pytest.mark.parametrize("value", ["12345678", "12345678901234567", "12345abc9", "", None])
    def test_bank_account_rejects(self, value):
        assert valid_bank_account(value) is False

    def test_period_key(self):
        assert valid_period_key("2024-01") is True
        assert valid_period_key("1999-12") is True
        assert valid_period_key("2024-13") is False
        assert valid_period_key("2024-00") is False
        assert valid_period_key("2024-1") is False
        assert valid_period_key("January 2024") is False

    @pytest.mark.parametrize("value,expected", [(0, True), (31, True), (15, True), (-1, False), (32, False), (3.5, False), (True, False), ("5", False)])
    def test_day_count(self, value, expected):
        assert valid_day_count(value) is expected

    def test_employee_type(self):
        assert valid_employee_type("Contract") is True
        assert valid_employee_type("contract") is False
        assert valid_employee_type("Intern") is False

    def test_amount(self):
        assert valid_amount(0) is True
        assert valid_amount(1500.5) is True
        assert valid_amount(Decimal("10.00")) is True
        assert valid_amount(-0.01) is False
        assert valid_amount(float("nan")) is False
        assert valid_amount(float("inf")) is False
        assert valid_amount(Decimal("NaN")) is False
        assert valid_amount(None) is False

    def test_amount_fits_money_columns(self):
        assert valid_amount(Decimal("99999999.99")) is True
        assert valid_amount(99999999) is True
        assert valid_amount(Decimal("12.50")) is True
        assert valid_amount(12.5) is True
        assert valid_amount(Decimal("100000000")) is False
        assert valid_amount(10**12) is False
        assert valid_amount(Decimal("0.005")) is False
        assert valid_amount(0.125) is False

    def test_joining_date_bounds(self):
        today = date(2024, 6, 30)
        assert valid_joining_date(date(1990, 1, 1), today) is True
        assert valid_joining_date(today, today) is True
        assert valid_joining_date(date(1989, 12, 31), today) is False
        assert valid_joining_date(date(2024, 7, 1), today) is False
        assert valid_joining_date("2020-01-01", today) is False


class TestLineItems:
    def test_earnings_must_not_be_empty(self):
        with pytest.raises(PayslipValidationError, match="At least one earning is required"):
            validate_line_items([], "earning", required=True)
        with pytest.raises(PayslipValidationError):
            validate_line_items(None, "earning", required=True)

    def test_deductions_may_be_empty(self):
        assert validate_line_items([], "deduction") == []
        assert validate_line_items(None, "deduction") == []

    def test_invalid_component_name_is_reported_with_collection(self):
        items = [LineItem(component="Basic Salary", amount=100), LineItem(component="PF", amount=10)]
        with pytest.raises(PayslipValidationError) as exc_info:
            validate_line_items(items, "deduction")
        assert exc_info.value.message == "Invalid deduction component name: PF"
        assert exc_info.value.field == "deductions"

    @pytest.mark.parametrize("amount", [-1, float("nan"), float("inf"), None])
    def test_invalid_amount(self, amount):
        with pytest.raises(PayslipValidationError, match="Invalid earning amount for Basic Salary"):
            validate_line_items([LineItem(component="Basic Salary", amount=amount)], "earning")

    def test_component_names_are_trimmed(self):
        items = validate_line_items([LineItem(component=" Basic Salary ", amount=0)], "earning", required=True)
        assert items == [{"component": "Basic Salary", "amount": 0}]


class TestValidatePayslip:
    def test_valid_payload_is_normalized(self, payload_factory):
        payload = PayslipCreate(
            **payload_factory(employeeName="  Priya Sharma ", accountNo=" 123456789 ", lop=None, deductions=None, uan="")
        )
        result = validate_payslip(payload)

        assert result.employee_name == "Priya Sharma"
        assert result.account_no == "123456789"
        assert result.lop == 0
        assert result.deductions == []
        assert result.uan is None
        assert result.gross_pay == Decimal("42000")
        assert [item.component for item in result.earnings] == ["Basic Salary", "House Rent"]

    def test_caller_totals_are_not_rederived(self, payload_factory):
        payload = PayslipCreate(**payload_factory(grossPay=1, totalDeductions=2, netPay=3))
        result = validate_payslip(payload)
        assert (result.gross_pay, result.total_deductions, result.net_pay) == (1, 2, 3)

    @pytest.mark.parametrize("missing", ["employeeId", "monthYear"])
    def test_identity_is_required(self, payload_factory, missing):
        payload = PayslipCreate(**payload_factory(**{missing: None}))
        with pytest.raises(PayslipValidationError, match="Employee ID and Month/Year are required"):
            validate_payslip(payload)

    @pytest.mark.parametrize(
        "overrides,message",
        [
            ({"employeeId": "ATS0000"}, "Invalid Employee ID format (e.g., ATS0123)"),
            ({"monthYear": "2024-13"}, "Invalid Month/Year format (e.g., 2024-01)"),
            ({"employeeName": "Raj"}, "Invalid Employee Name (min 5 letters, max 30)"),
            ({"designation": "Dev 2"}, "Invalid Designation (min 5 letters, max 30)"),
            ({"location": "New  Delhi"}, "Invalid Location (min 5 letters, max 30)"),
            ({"bankName": "HDFC"}, "Invalid Bank Name (min 5 letters, max 30)"),
            ({"dateJoining": "1985-03-01"}, "Date of Joining must be between 1990-01-01 and today"),
            ({"employeeType": "Intern"}, "Employee Type must be one of Permanent, Contract, Temporary"),
            ({"pan": "ABCDE1234"}, "Invalid PAN format (e.g., ABCDE1234F)"),
            ({"accountNo": "1234"}, "Invalid Bank Account Number (9-16 digits)"),
            ({"workingDays": 32}, "Working Days must be between 0 and 31"),
            ({"lop": -1}, "LOP must be between 0 and 31"),
            ({"earnings": [{"component": "Bonus 1", "amount": 5}]}, "Invalid earning component name: Bonus 1"),
            ({"deductions": [{"component": "Income Tax", "amount": -5}]}, "Invalid deduction amount for Income Tax"),
            ({"grossPay": None}, "Gross Pay is required"),
            ({"netPay": -1}, "Net Pay must be a non-negative amount up to 99999999.99 with at most 2 decimals"),
            ({"grossPay": 10**12}, "Gross Pay must be a non-negative amount up to 99999999.99 with at most 2 decimals"),
            ({"netPay": "0.005"}, "Net Pay must be a non-negative amount up to 99999999.99 with at most 2 decimals"),
            ({"duration": "x" * 101}, "Duration must be at most 100 characters"),
            ({"uan": "1" * 21}, "UAN must be at most 20 characters"),
        ],
    )
    def test_field_specific_messages(self, payload_factory, overrides, message):
        payload = PayslipCreate(**payload_factory(**overrides))
        with pytest.raises(PayslipValidationError) as exc_info:
            validate_payslip(payload)
        assert exc_info.value.message == message
        assert exc_info.value.status_code == 400

    def test_empty_earnings_fail_even_when_everything_else_is_valid(self, payload_factory):
        payload = PayslipCreate(**payload_factory(earnings=[]))
        with pytest.raises(PayslipValidationError, match="At least one earning is required"):
            validate_payslip(payload)

    def test_future_joining_date_is_rejected(self, payload_factory):
        payload = PayslipCreate(**payload_factory(dateJoining="2024-07-01"))
        with pytest.raises(PayslipValidationError):
            validate_payslip(payload, today=date(2024, 6, 30))
