# src/shared/common/mixins.py
"""
Abstract model mixins shared by every table of the service
"""

import uuid
from django.db import models


class UUIDPrimaryKeyMixin(models.Model):
    """UUID primary key; ids travel as strings in JSON payloads."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class Meta:
        abstract = True


class TimestampMixin(models.Model):
    """Creation and last-modification times."""

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
