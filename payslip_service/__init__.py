"""Payslip validation, computation and persistence service."""
__version__ = "0.1.0"
