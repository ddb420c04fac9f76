# clinic_core/catalog/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.response import Response

from clinic_core.catalog.api.serializers import VaccineSerializer
from clinic_core.catalog.models import Vaccine
from clinic_core.catalog.selectors import get_vaccine, vaccines_for_tenant
from clinic_core.common.api.pagination import paginate
from clinic_core.common.api.params import bool_or_none, require_int
from clinic_core.common.permissions import CatalogPermission
from clinic_core.common.scope import require_scope


class VaccineViewSet(viewsets.GenericViewSet):
    """
    Tenant vaccine catalog (read-only).
    """
    permission_classes = [CatalogPermission]

    serializer_class = VaccineSerializer
    queryset = Vaccine.objects.none()

    @extend_schema(
        tags=["Catalog"],
        responses={200: VaccineSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="is_active", type=OpenApiTypes.BOOL, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="search", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        scope = require_scope(request)
        qs = vaccines_for_tenant(
            tenant_id=scope.tenant_id,
            is_active=bool_or_none(request.query_params.get("is_active")),
            search=request.query_params.get("search"),
        )
        return paginate(request, qs, VaccineSerializer)

    @extend_schema(tags=["Catalog"], responses={200: VaccineSerializer})
    def retrieve(self, request, pk=None):
        scope = require_scope(request)
        vaccine = get_vaccine(tenant_id=scope.tenant_id, vaccine_id=require_int(pk, "id"))
        return Response(VaccineSerializer(vaccine).data, status=status.HTTP_200_OK)
