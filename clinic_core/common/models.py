# clinic_core/common/models.py
from __future__ import annotations

from django.db import models


class TimeStampedModel(models.Model):
    """
    Standard timestamps for all entities.
    """
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class TenantScopedModel(TimeStampedModel):
    """
    Enforces multi-tenant scope at the data layer.
    (Scope resolution enforces request scope; this enforces persistence scope.)

    Rows keep the default integer auto id: pricing tie-breaks rely on
    "highest id = most recently created".
    """
    tenant_id = models.UUIDField(db_index=True)

    class Meta:
        abstract = True
