# clinic_core/tenants/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response

from clinic_core.common.api.pagination import paginate
from clinic_core.tenants.api.serializers import (
    TenantCreateSerializer,
    TenantProfileUpdateSerializer,
    TenantSerializer,
    TenantStatusUpdateSerializer,
)
from clinic_core.tenants.models import Tenant, TenantStatus
from clinic_core.tenants.selectors import get_tenant, list_tenants
from clinic_core.tenants.services import TenantService


def _tenant_pk(pk) -> UUID:
    try:
        return UUID(str(pk))
    except ValueError:
        raise NotFound("Clinic not found.")


@extend_schema_view(
    list=extend_schema(
        tags=["Clinics"],
        responses={200: TenantSerializer(many=True)},
        parameters=[
            OpenApiParameter(
                name="status",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                enum=list(TenantStatus.values),
            ),
            OpenApiParameter(name="search", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
        ],
    ),
    retrieve=extend_schema(tags=["Clinics"], responses={200: TenantSerializer}),
    create=extend_schema(tags=["Clinics"], request=TenantCreateSerializer, responses={201: TenantSerializer}),
    partial_update=extend_schema(
        tags=["Clinics"], request=TenantProfileUpdateSerializer, responses={200: TenantSerializer}
    ),
    set_status=extend_schema(tags=["Clinics"], request=TenantStatusUpdateSerializer, responses={200: TenantSerializer}),
)
class TenantViewSet(viewsets.ViewSet):
    """
    Platform staff (is_staff) onboard clinics here. No X-Tenant-Id needed.
    """

    permission_classes = [IsAdminUser]

    serializer_class = TenantSerializer
    queryset = Tenant.objects.none()

    def list(self, request):
        qs = list_tenants(
            status=request.query_params.get("status") or None,
            search=request.query_params.get("search") or None,
        )
        return paginate(request, qs, TenantSerializer)

    def retrieve(self, request, pk=None):
        tenant = get_tenant(tenant_id=_tenant_pk(pk))
        return Response(TenantSerializer(tenant).data, status=status.HTTP_200_OK)

    def create(self, request):
        ser = TenantCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        tenant = TenantService.create(**ser.validated_data)
        return Response(TenantSerializer(tenant).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        ser = TenantProfileUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)

        tenant = TenantService.update_profile(tenant_id=_tenant_pk(pk), changes=dict(ser.validated_data))
        return Response(TenantSerializer(tenant).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="set-status")
    def set_status(self, request, pk=None):
        ser = TenantStatusUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        tenant = TenantService.set_status(tenant_id=_tenant_pk(pk), status=ser.validated_data["status"])
        return Response(TenantSerializer(tenant).data, status=status.HTTP_200_OK)
