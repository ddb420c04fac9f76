# clinic_core/audit/services.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from django.core.serializers.json import DjangoJSONEncoder
from django.db import transaction

from clinic_core.audit.codes import EVENT_CODES
from clinic_core.audit.models import AuditEvent

logger = logging.getLogger(__name__)

_encoder = DjangoJSONEncoder()


def _jsonable(metadata: Dict[str, Any]) -> Dict[str, Any]:
    # dates, Decimals and UUIDs become strings; JSONField would reject them otherwise
    return {
        k: v if isinstance(v, (str, int, float, bool, list, dict, type(None))) else _encoder.default(v)
        for k, v in metadata.items()
    }


class AuditService:
    """
    Append-only writer for pricing and budget events. Called from inside the
    service transaction, so an event exists only if the change committed.
    """

    @staticmethod
    @transaction.atomic
    def log(
        *,
        event_code: str,
        entity_type: str,
        entity_id,
        tenant_id: UUID,
        actor_user_id: int | None = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AuditEvent:
        if event_code not in EVENT_CODES:
            raise ValueError(f"Unknown audit event code: {event_code}")

        event = AuditEvent.objects.create(
            tenant_id=tenant_id,
            event_code=event_code,
            entity_type=entity_type,
            entity_id=str(entity_id),
            actor_user_id=actor_user_id,
            metadata=_jsonable(metadata or {}),
        )
        logger.debug("audit %s %s:%s tenant=%s", event_code, entity_type, event.entity_id, tenant_id)
        return event
