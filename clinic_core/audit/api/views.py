# clinic_core/audit/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import viewsets

from clinic_core.audit.api.serializers import AuditEventSerializer
from clinic_core.audit.models import AuditEvent
from clinic_core.audit.selectors import list_audit_events
from clinic_core.common.api.pagination import paginate
from clinic_core.common.api.params import date_or_none, int_or_none
from clinic_core.common.permissions import AuditPermission
from clinic_core.common.scope import require_scope


class AuditEventViewSet(viewsets.GenericViewSet):
    """
    List audit events for the current tenant (ADMIN only).
    """
    permission_classes = [AuditPermission]

    serializer_class = AuditEventSerializer
    queryset = AuditEvent.objects.none()

    @extend_schema(
        tags=["Audit"],
        responses={200: AuditEventSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="entity_type", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="entity_id", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(
                name="event_code",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Exact code (budget.created) or a prefix ending in a dot (campaign.).",
            ),
            OpenApiParameter(name="actor", type=OpenApiTypes.INT, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="since", type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="until", type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        scope = require_scope(request)

        qs = list_audit_events(
            tenant_id=scope.tenant_id,
            entity_type=request.query_params.get("entity_type") or None,
            entity_id=request.query_params.get("entity_id") or None,
            event_code=request.query_params.get("event_code") or None,
            actor_user_id=int_or_none(request.query_params.get("actor"), "actor"),
            since=date_or_none(request.query_params.get("since"), "since"),
            until=date_or_none(request.query_params.get("until"), "until"),
        )
        return paginate(request, qs, AuditEventSerializer)
