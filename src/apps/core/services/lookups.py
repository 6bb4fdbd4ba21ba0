# src/apps/core/services/lookups.py
"""
Ownership-scoped lookups shared by the services.
"""

from django.core.exceptions import ObjectDoesNotExist, ValidationError as DjangoValidationError

from shared.common.exceptions import NotFoundException


def get_or_not_found(queryset, label: str, *args, **filters):
    """
    Fetch a single row or raise NotFoundException.

    Malformed ids are reported as not found so that a bad path segment and a
    row owned by someone else look the same to the caller.
    """
    try:
        return queryset.get(*args, **filters)
    except (ObjectDoesNotExist, DjangoValidationError, ValueError):
        raise NotFoundException(f"{label} not found")
