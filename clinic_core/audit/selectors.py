# clinic_core/audit/selectors.py
from __future__ import annotations

from datetime import date
from uuid import UUID

from django.db.models import QuerySet

from clinic_core.audit.models import AuditEvent


def list_audit_events(
    *,
    tenant_id: UUID,
    entity_type: str | None = None,
    entity_id: str | None = None,
    event_code: str | None = None,
    actor_user_id: int | None = None,
    since: date | None = None,
    until: date | None = None,
) -> QuerySet[AuditEvent]:
    """
    Newest first. since/until are inclusive calendar days.
    """
    qs = AuditEvent.objects.filter(tenant_id=tenant_id)

    if entity_type:
        qs = qs.filter(entity_type=entity_type)
    if entity_id:
        qs = qs.filter(entity_id=str(entity_id))
    if event_code and event_code.endswith("."):
        # "campaign." matches every campaign event
        qs = qs.filter(event_code__startswith=event_code)
    elif event_code:
        qs = qs.filter(event_code=event_code)
    if actor_user_id is not None:
        qs = qs.filter(actor_user_id=actor_user_id)
    if since:
        qs = qs.filter(occurred_at__date__gte=since)
    if until:
        qs = qs.filter(occurred_at__date__lte=until)

    return qs.order_by("-occurred_at", "-id")
