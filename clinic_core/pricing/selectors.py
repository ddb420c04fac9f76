# clinic_core/pricing/selectors.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional
from uuid import UUID

from django.db.models import Q, QuerySet
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from clinic_core.common.api.exceptions import TenantIsolationError
from clinic_core.pricing.models import PriceCampaign, PriceTable, VaccinePrice

NO_DEFAULT_TABLE_MSG = "No price table selected and the tenant has no default price table."


@dataclass(frozen=True)
class PriceResolution:
    found: bool
    price: int = 0
    price_id: Optional[int] = None


# ---------------------------------------------------------------------------
# Price tables
# ---------------------------------------------------------------------------

def price_tables_for_tenant(*, tenant_id: UUID, is_active: bool | None = None) -> QuerySet[PriceTable]:
    qs = PriceTable.objects.filter(tenant_id=tenant_id)
    if is_active is not None:
        qs = qs.filter(is_active=is_active)
    return qs.order_by("-is_default", "name", "id")


def get_price_table(*, tenant_id: UUID, price_table_id: int) -> PriceTable:
    table = PriceTable.objects.filter(tenant_id=tenant_id, id=price_table_id).first()
    if table is None:
        raise TenantIsolationError({"price_table": f"Price table {price_table_id} not found for this tenant."})
    return table


def get_default_price_table(*, tenant_id: UUID) -> PriceTable | None:
    return PriceTable.objects.filter(tenant_id=tenant_id, is_default=True, is_active=True).first()


def resolve_price_table(*, tenant_id: UUID, price_table_id: int | None = None) -> PriceTable:
    """
    Explicit id -> that table (must be the tenant's, active or not).
    No id -> the tenant's active default. No default -> 400, never a silent fallback.
    """
    if price_table_id is not None:
        return get_price_table(tenant_id=tenant_id, price_table_id=price_table_id)

    table = get_default_price_table(tenant_id=tenant_id)
    if table is None:
        raise ValidationError({"price_table": NO_DEFAULT_TABLE_MSG})
    return table


# ---------------------------------------------------------------------------
# Vaccine prices
# ---------------------------------------------------------------------------

def vaccine_prices_for_tenant(
    *,
    tenant_id: UUID,
    price_table_id: int | None = None,
    vaccine_id: int | None = None,
    is_active: bool | None = None,
) -> QuerySet[VaccinePrice]:
    qs = VaccinePrice.objects.filter(tenant_id=tenant_id)
    if price_table_id is not None:
        qs = qs.filter(price_table_id=price_table_id)
    if vaccine_id is not None:
        qs = qs.filter(vaccine_id=vaccine_id)
    if is_active is not None:
        qs = qs.filter(is_active=is_active)
    return qs.order_by("price_table_id", "vaccine_id", "-start_date", "-id")


def get_vaccine_price(*, tenant_id: UUID, vaccine_price_id: int) -> VaccinePrice:
    row = VaccinePrice.objects.filter(tenant_id=tenant_id, id=vaccine_price_id).first()
    if row is None:
        raise TenantIsolationError({"vaccine_price": f"Vaccine price {vaccine_price_id} not found for this tenant."})
    return row


def _effective_on(as_of: date) -> Q:
    return Q(start_date__lte=as_of) & (Q(end_date__isnull=True) | Q(end_date__gte=as_of))


def resolve_price_in_table(*, price_table: PriceTable, vaccine_id: int, as_of: date) -> PriceResolution:
    """
    Effective price of a vaccine in an already-resolved table.
    Several matching windows: latest start_date wins, then highest id.
    """
    row = (
        VaccinePrice.objects.filter(
            tenant_id=price_table.tenant_id,
            price_table_id=price_table.id,
            vaccine_id=vaccine_id,
            is_active=True,
        )
        .filter(_effective_on(as_of))
        .order_by("-start_date", "-id")
        .first()
    )
    if row is None:
        return PriceResolution(found=False)
    return PriceResolution(found=True, price=row.price, price_id=row.id)


def resolve_price(
    *,
    tenant_id: UUID,
    price_table_id: int,
    vaccine_id: int,
    as_of: date | None = None,
) -> PriceResolution:
    """
    Pure read. "No price" is a normal outcome (found=False), not an error.
    Raises TenantIsolationError only when the table is not the tenant's.
    """
    as_of = as_of or timezone.localdate()
    table = get_price_table(tenant_id=tenant_id, price_table_id=price_table_id)
    return resolve_price_in_table(price_table=table, vaccine_id=vaccine_id, as_of=as_of)


# ---------------------------------------------------------------------------
# Campaigns
# ---------------------------------------------------------------------------

def campaigns_for_tenant(*, tenant_id: UUID, is_active: bool | None = None) -> QuerySet[PriceCampaign]:
    qs = PriceCampaign.objects.filter(tenant_id=tenant_id)
    if is_active is not None:
        qs = qs.filter(is_active=is_active)
    return qs.order_by("-start_date", "-id")


def get_campaign(*, tenant_id: UUID, campaign_id: int) -> PriceCampaign:
    campaign = PriceCampaign.objects.filter(tenant_id=tenant_id, id=campaign_id).first()
    if campaign is None:
        raise TenantIsolationError({"campaign": f"Campaign {campaign_id} not found for this tenant."})
    return campaign


def active_campaigns(*, tenant_id: UUID, as_of: date) -> List[PriceCampaign]:
    """
    Campaigns that are switched on and whose window covers as_of.
    Vaccine applicability is checked by the caller (vaccine_ids is a JSON list).
    """
    return list(
        PriceCampaign.objects.filter(tenant_id=tenant_id, is_active=True)
        .filter(_effective_on(as_of))
        .order_by("-id")
    )
