"""
Validators Package

Field and cross-field validation shared by the API and CSV import.
"""
from src.buyerleads.validators.record_validator import (
    RecordValidator,
    ValidationIssue,
    ValidationResult,
)

__all__ = ["RecordValidator", "ValidationIssue", "ValidationResult"]
