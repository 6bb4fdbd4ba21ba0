"""
Shared Validators Module.

Common validation utilities used by models, serializers and services.
"""
from decimal import Decimal, InvalidOperation
from typing import List, Any
from uuid import UUID

from django.core.exceptions import ValidationError
from django.template.defaultfilters import filesizeformat
from django.utils.deconstruct import deconstructible


# =============================================================================
# UUID VALIDATORS
# =============================================================================

def validate_uuid(value: Any, field_name: str = "value") -> UUID:
    """Validate and convert a value to UUID."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (ValueError, TypeError):
        raise ValidationError(f"Invalid UUID format for {field_name}")


def validate_uuid_list(values: List, field_name: str = "values") -> List[UUID]:
    """Validate and convert a list of values to UUIDs."""
    if not isinstance(values, (list, tuple)):
        raise ValidationError(f"{field_name} must be a list")
    return [validate_uuid(v, field_name) for v in values]


# =============================================================================
# NUMERIC VALIDATORS
# =============================================================================

def validate_percentage(value: Any, field_name: str = "percentage") -> Decimal:
    """Validate a percentage value (0-100)."""
    try:
        value = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number")

    if value < 0 or value > 100:
        raise ValidationError(f"{field_name} must be between 0 and 100")

    return value


# =============================================================================
# LIST VALIDATORS
# =============================================================================

def validate_unique_list(value: List, field_name: str = "list") -> List:
    """Validate that a list has unique values."""
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"{field_name} must be a list")

    if len(value) != len(set(value)):
        raise ValidationError(f"{field_name} must contain unique values")

    return list(value)


# =============================================================================
# FILE VALIDATORS
# =============================================================================

@deconstructible
class MaxFileSizeValidator:
    """Reject uploads larger than ``max_bytes``."""

    message = 'File too large. Size should not exceed %(limit)s.'

    def __init__(self, max_bytes: int):
        self.max_bytes = max_bytes

    def __call__(self, value) -> None:
        if value.size > self.max_bytes:
            raise ValidationError(
                self.message,
                code='file_too_large',
                params={'limit': filesizeformat(self.max_bytes)},
            )

    def __eq__(self, other) -> bool:
        return isinstance(other, MaxFileSizeValidator) and self.max_bytes == other.max_bytes
