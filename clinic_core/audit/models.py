# clinic_core/audit/models.py
from django.db import models

from clinic_core.common.models import TenantScopedModel


class AuditEvent(TenantScopedModel):
    """
    Immutable audit record.
    Pricing changes and budget creation land here.
    """
    event_code = models.CharField(max_length=128, db_index=True)  # e.g. "budget.created"
    entity_type = models.CharField(max_length=128, db_index=True)  # e.g. "PatientBudget"
    entity_id = models.CharField(max_length=64, db_index=True)

    actor_user_id = models.BigIntegerField(null=True, blank=True)

    occurred_at = models.DateTimeField(auto_now_add=True, db_index=True)
    metadata = models.JSONField(default=dict)

    class Meta:
        db_table = "audit_audit_event"
        indexes = [
            models.Index(fields=["tenant_id", "occurred_at"]),
            models.Index(fields=["entity_type", "entity_id"]),
            models.Index(fields=["tenant_id", "event_code"]),
        ]
