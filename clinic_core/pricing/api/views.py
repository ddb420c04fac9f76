# clinic_core/pricing/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from clinic_core.common.api.pagination import paginate
from clinic_core.common.api.params import date_or_none, require_int
from clinic_core.common.permissions import PricingPermission
from clinic_core.common.scope import require_scope
from clinic_core.pricing.api.filters import (
    PriceCampaignFilter,
    PriceTableFilter,
    VaccinePriceFilter,
    apply_filterset,
)
from clinic_core.pricing.api.serializers import (
    CampaignToggleSerializer,
    PriceCampaignCreateSerializer,
    PriceCampaignSerializer,
    PriceCampaignUpdateSerializer,
    PriceResolutionSerializer,
    PriceTableCreateSerializer,
    PriceTableSerializer,
    PriceTableUpdateSerializer,
    QuoteRequestSerializer,
    QuoteSerializer,
    VaccinePriceCreateSerializer,
    VaccinePriceSerializer,
    VaccinePriceUpdateSerializer,
)
from clinic_core.pricing.engine import QuoteEngine
from clinic_core.pricing.models import PriceCampaign, PriceTable, VaccinePrice
from clinic_core.pricing.selectors import (
    campaigns_for_tenant,
    get_campaign,
    get_default_price_table,
    get_price_table,
    get_vaccine_price,
    price_tables_for_tenant,
    resolve_price,
    vaccine_prices_for_tenant,
)
from clinic_core.pricing.services import PriceCampaignService, PriceTableService, VaccinePriceService


def _actor_id(request) -> int | None:
    return getattr(request.user, "id", None)


class PriceTableViewSet(viewsets.GenericViewSet):
    """
    Price table registry:
    - list/retrieve/create/partial_update/destroy
    - default (GET current default)
    - set-default (atomic toggle)
    """
    permission_classes = [PricingPermission]

    serializer_class = PriceTableSerializer
    queryset = PriceTable.objects.none()

    @extend_schema(
        tags=["Pricing"],
        responses={200: PriceTableSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="is_active", type=OpenApiTypes.BOOL, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="is_default", type=OpenApiTypes.BOOL, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        scope = require_scope(request)
        qs = apply_filterset(PriceTableFilter, request, price_tables_for_tenant(tenant_id=scope.tenant_id))
        return paginate(request, qs, PriceTableSerializer)

    @extend_schema(tags=["Pricing"], responses={200: PriceTableSerializer})
    def retrieve(self, request, pk=None):
        scope = require_scope(request)
        table = get_price_table(tenant_id=scope.tenant_id, price_table_id=require_int(pk, "id"))
        return Response(PriceTableSerializer(table).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Pricing"], request=PriceTableCreateSerializer, responses={201: PriceTableSerializer})
    def create(self, request):
        scope = require_scope(request)

        ser = PriceTableCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        table = PriceTableService.create(
            tenant_id=scope.tenant_id,
            actor_user_id=_actor_id(request),
            **ser.validated_data,
        )
        return Response(PriceTableSerializer(table).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Pricing"], request=PriceTableUpdateSerializer, responses={200: PriceTableSerializer})
    def partial_update(self, request, pk=None):
        scope = require_scope(request)

        ser = PriceTableUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        table = PriceTableService.update(
            tenant_id=scope.tenant_id,
            price_table_id=require_int(pk, "id"),
            changes=ser.validated_data,
            actor_user_id=_actor_id(request),
        )
        return Response(PriceTableSerializer(table).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Pricing"], responses={204: None})
    def destroy(self, request, pk=None):
        scope = require_scope(request)
        PriceTableService.delete(
            tenant_id=scope.tenant_id,
            price_table_id=require_int(pk, "id"),
            actor_user_id=_actor_id(request),
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(tags=["Pricing"], responses={200: PriceTableSerializer})
    @action(detail=False, methods=["get"], url_path="default")
    def default(self, request):
        """
        Current default table; 200 with null when the tenant has none.
        """
        scope = require_scope(request)
        table = get_default_price_table(tenant_id=scope.tenant_id)
        data = PriceTableSerializer(table).data if table else None
        return Response(data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Pricing"], request=None, responses={200: PriceTableSerializer})
    @action(detail=True, methods=["post"], url_path="set-default")
    def set_default(self, request, pk=None):
        scope = require_scope(request)
        table = PriceTableService.set_default(
            tenant_id=scope.tenant_id,
            price_table_id=require_int(pk, "id"),
            actor_user_id=_actor_id(request),
        )
        return Response(PriceTableSerializer(table).data, status=status.HTTP_200_OK)


class VaccinePriceViewSet(viewsets.GenericViewSet):
    """
    Vaccine prices per table with validity windows, plus the price resolver.
    """
    permission_classes = [PricingPermission]

    serializer_class = VaccinePriceSerializer
    queryset = VaccinePrice.objects.none()

    @extend_schema(
        tags=["Pricing"],
        responses={200: VaccinePriceSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="price_table", type=OpenApiTypes.INT, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="vaccine", type=OpenApiTypes.INT, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="is_active", type=OpenApiTypes.BOOL, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(
                name="effective_on",
                type=OpenApiTypes.DATE,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Only rows whose window covers this date.",
            ),
        ],
    )
    def list(self, request):
        scope = require_scope(request)
        qs = apply_filterset(VaccinePriceFilter, request, vaccine_prices_for_tenant(tenant_id=scope.tenant_id))
        return paginate(request, qs, VaccinePriceSerializer)

    @extend_schema(tags=["Pricing"], responses={200: VaccinePriceSerializer})
    def retrieve(self, request, pk=None):
        scope = require_scope(request)
        row = get_vaccine_price(tenant_id=scope.tenant_id, vaccine_price_id=require_int(pk, "id"))
        return Response(VaccinePriceSerializer(row).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Pricing"], request=VaccinePriceCreateSerializer, responses={201: VaccinePriceSerializer})
    def create(self, request):
        scope = require_scope(request)

        ser = VaccinePriceCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        row = VaccinePriceService.create(
            tenant_id=scope.tenant_id,
            price_table_id=data["price_table"],
            vaccine_id=data["vaccine"],
            price=data["price"],
            start_date=data["start_date"],
            end_date=data.get("end_date"),
            is_active=data.get("is_active", True),
            actor_user_id=_actor_id(request),
        )
        return Response(VaccinePriceSerializer(row).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Pricing"], request=VaccinePriceUpdateSerializer, responses={200: VaccinePriceSerializer})
    def partial_update(self, request, pk=None):
        scope = require_scope(request)

        ser = VaccinePriceUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        row = VaccinePriceService.update(
            tenant_id=scope.tenant_id,
            vaccine_price_id=require_int(pk, "id"),
            changes=ser.validated_data,
            actor_user_id=_actor_id(request),
        )
        return Response(VaccinePriceSerializer(row).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Pricing"], responses={204: None})
    def destroy(self, request, pk=None):
        scope = require_scope(request)
        VaccinePriceService.delete(
            tenant_id=scope.tenant_id,
            vaccine_price_id=require_int(pk, "id"),
            actor_user_id=_actor_id(request),
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=["Pricing"],
        responses={200: PriceResolutionSerializer},
        parameters=[
            OpenApiParameter(name="price_table", type=OpenApiTypes.INT, location=OpenApiParameter.QUERY, required=True),
            OpenApiParameter(name="vaccine", type=OpenApiTypes.INT, location=OpenApiParameter.QUERY, required=True),
            OpenApiParameter(
                name="as_of",
                type=OpenApiTypes.DATE,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Defaults to today.",
            ),
        ],
    )
    @action(detail=False, methods=["get"], url_path="resolve")
    def resolve(self, request):
        scope = require_scope(request)

        resolution = resolve_price(
            tenant_id=scope.tenant_id,
            price_table_id=require_int(request.query_params.get("price_table"), "price_table"),
            vaccine_id=require_int(request.query_params.get("vaccine"), "vaccine"),
            as_of=date_or_none(request.query_params.get("as_of"), "as_of"),
        )
        return Response(PriceResolutionSerializer(resolution).data, status=status.HTTP_200_OK)


class PriceCampaignViewSet(viewsets.GenericViewSet):
    """
    Discount campaigns (PERCENT / FIXED_AMOUNT) with date windows.
    """
    permission_classes = [PricingPermission]

    serializer_class = PriceCampaignSerializer
    queryset = PriceCampaign.objects.none()

    @extend_schema(
        tags=["Pricing"],
        responses={200: PriceCampaignSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="is_active", type=OpenApiTypes.BOOL, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="discount_kind", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        scope = require_scope(request)
        qs = apply_filterset(PriceCampaignFilter, request, campaigns_for_tenant(tenant_id=scope.tenant_id))
        return paginate(request, qs, PriceCampaignSerializer)

    @extend_schema(tags=["Pricing"], responses={200: PriceCampaignSerializer})
    def retrieve(self, request, pk=None):
        scope = require_scope(request)
        campaign = get_campaign(tenant_id=scope.tenant_id, campaign_id=require_int(pk, "id"))
        return Response(PriceCampaignSerializer(campaign).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Pricing"], request=PriceCampaignCreateSerializer, responses={201: PriceCampaignSerializer})
    def create(self, request):
        scope = require_scope(request)

        ser = PriceCampaignCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        campaign = PriceCampaignService.create(
            tenant_id=scope.tenant_id,
            actor_user_id=_actor_id(request),
            **ser.validated_data,
        )
        return Response(PriceCampaignSerializer(campaign).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Pricing"], request=PriceCampaignUpdateSerializer, responses={200: PriceCampaignSerializer})
    def partial_update(self, request, pk=None):
        scope = require_scope(request)

        ser = PriceCampaignUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        campaign = PriceCampaignService.update(
            tenant_id=scope.tenant_id,
            campaign_id=require_int(pk, "id"),
            changes=ser.validated_data,
            actor_user_id=_actor_id(request),
        )
        return Response(PriceCampaignSerializer(campaign).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Pricing"], responses={204: None})
    def destroy(self, request, pk=None):
        scope = require_scope(request)
        PriceCampaignService.delete(
            tenant_id=scope.tenant_id,
            campaign_id=require_int(pk, "id"),
            actor_user_id=_actor_id(request),
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(tags=["Pricing"], request=CampaignToggleSerializer, responses={200: PriceCampaignSerializer})
    @action(detail=True, methods=["post"], url_path="toggle-active")
    def toggle_active(self, request, pk=None):
        scope = require_scope(request)

        ser = CampaignToggleSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        campaign = PriceCampaignService.set_active(
            tenant_id=scope.tenant_id,
            campaign_id=require_int(pk, "id"),
            is_active=ser.validated_data.get("is_active"),
            actor_user_id=_actor_id(request),
        )
        return Response(PriceCampaignSerializer(campaign).data, status=status.HTTP_200_OK)


class QuoteView(APIView):
    """
    POST /pricing/quote/
    Read-only price simulation for a vaccine selection. Nothing is persisted.
    """
    permission_classes = [PricingPermission]
    action = "quote"

    @extend_schema(tags=["Pricing"], request=QuoteRequestSerializer, responses={200: QuoteSerializer})
    def post(self, request):
        scope = require_scope(request)

        ser = QuoteRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        quote = QuoteEngine.quote(
            tenant_id=scope.tenant_id,
            price_table_id=ser.validated_data.get("price_table"),
            vaccine_ids=ser.validated_data["vaccines"],
            as_of=ser.validated_data.get("as_of"),
        )
        return Response(QuoteSerializer(quote).data, status=status.HTTP_200_OK)
