"""
Schemas Package

JSON schema definitions and validation utilities.
"""

from .validator import (
    validate_package,
    ValidationError,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    "validate_package",
    "ValidationError",
    "ValidationIssue",
    "ValidationResult",
]
