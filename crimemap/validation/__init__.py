"""
Crime Map - Validation

Components:
    - SchemaEnforcer: Raw header validation before normalization
"""

from crimemap.validation.schema_enforcer import (
    SchemaEnforcer,
    ValidationError,
    ValidationIssue,
    ValidationLevel,
    ValidationResult,
)

__all__ = [
    "SchemaEnforcer",
    "ValidationError",
    "ValidationIssue",
    "ValidationLevel",
    "ValidationResult",
]
