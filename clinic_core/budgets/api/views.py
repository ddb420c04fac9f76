# clinic_core/budgets/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from clinic_core.budgets.api.serializers import (
    BudgetCreateSerializer,
    BudgetStatsSerializer,
    PatientBudgetSerializer,
)
from clinic_core.budgets.models import BudgetStatus, PatientBudget
from clinic_core.budgets.selectors import budget_stats, get_budget, get_budget_by_number, list_budgets
from clinic_core.budgets.services import BudgetService, PatientSnapshot
from clinic_core.common.api.pagination import paginate
from clinic_core.common.api.params import date_or_none, int_or_none, require_int
from clinic_core.common.permissions import BudgetPermission
from clinic_core.common.scope import require_scope


class BudgetViewSet(viewsets.GenericViewSet):
    """
    Patient budgets (quotations):
    - list/retrieve
    - create (re-quotes the selection, then snapshots it)
    - by-number/<n>
    - stats
    No update/delete: budgets are immutable once created.
    """
    permission_classes = [BudgetPermission]

    serializer_class = PatientBudgetSerializer
    queryset = PatientBudget.objects.none()

    @extend_schema(
        tags=["Budgets"],
        responses={200: PatientBudgetSerializer(many=True)},
        parameters=[
            OpenApiParameter(
                name="status",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                enum=list(BudgetStatus.values),
            ),
            OpenApiParameter(name="patient", type=OpenApiTypes.INT, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(
                name="search",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Matches patient name or tax id.",
            ),
        ],
    )
    def list(self, request):
        scope = require_scope(request)

        qs = list_budgets(
            tenant_id=scope.tenant_id,
            status=request.query_params.get("status") or None,
            patient_id=int_or_none(request.query_params.get("patient"), "patient"),
            search=request.query_params.get("search") or None,
        )
        return paginate(request, qs, PatientBudgetSerializer)

    @extend_schema(tags=["Budgets"], responses={200: PatientBudgetSerializer})
    def retrieve(self, request, pk=None):
        scope = require_scope(request)
        budget = get_budget(tenant_id=scope.tenant_id, budget_id=require_int(pk, "id"))
        return Response(PatientBudgetSerializer(budget).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Budgets"], request=BudgetCreateSerializer, responses={201: PatientBudgetSerializer})
    def create(self, request):
        scope = require_scope(request)

        ser = BudgetCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        patient_data = data.get("patient")
        patient = PatientSnapshot(**patient_data) if patient_data else None

        budget = BudgetService.create_from_selection(
            tenant_id=scope.tenant_id,
            vaccine_ids=data["vaccines"],
            status=data["status"],
            patient=patient,
            patient_id=data.get("patient_id"),
            price_table_id=data.get("price_table"),
            notes=data.get("notes", ""),
            as_of=data.get("as_of"),
            actor_user_id=getattr(request.user, "id", None),
        )
        budget = get_budget(tenant_id=scope.tenant_id, budget_id=budget.id)
        return Response(PatientBudgetSerializer(budget).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Budgets"], responses={200: PatientBudgetSerializer})
    @action(detail=False, methods=["get"], url_path=r"by-number/(?P<number>\d+)")
    def by_number(self, request, number=None):
        scope = require_scope(request)
        budget = get_budget_by_number(tenant_id=scope.tenant_id, sequential_number=require_int(number, "number"))
        return Response(PatientBudgetSerializer(budget).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Budgets"],
        responses={200: BudgetStatsSerializer},
        parameters=[
            OpenApiParameter(
                name="as_of",
                type=OpenApiTypes.DATE,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Reference date for the expired count (defaults to today).",
            ),
        ],
    )
    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request):
        scope = require_scope(request)
        result = budget_stats(
            tenant_id=scope.tenant_id,
            as_of=date_or_none(request.query_params.get("as_of"), "as_of"),
        )
        return Response(BudgetStatsSerializer(result).data, status=status.HTTP_200_OK)
