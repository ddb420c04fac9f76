# clinic_core/pricing/engine.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, Iterable, List, Optional, Sequence
from uuid import UUID

from django.utils import timezone
from rest_framework.exceptions import ValidationError

from clinic_core.catalog.selectors import vaccines_by_ids
from clinic_core.pricing.models import DiscountKind, PriceCampaign
from clinic_core.pricing.selectors import active_campaigns, resolve_price_in_table, resolve_price_table


def _percent_discount(list_price: int, value: int) -> int:
    amount = Decimal(list_price) * Decimal(value) / Decimal(100)
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _fixed_discount(list_price: int, value: int) -> int:
    return min(int(value), list_price)


DISCOUNT_FUNCTIONS: Dict[str, Callable[[int, int], int]] = {
    DiscountKind.PERCENT: _percent_discount,
    DiscountKind.FIXED_AMOUNT: _fixed_discount,
}


def compute_discount(*, kind: str, value: int, list_price: int) -> int:
    """
    Discount in minor units, always clamped to [0, list_price].
    Raises ValueError for a kind without a discount function.
    """
    fn = DISCOUNT_FUNCTIONS.get(kind)
    if fn is None:
        raise ValueError(f"Unknown discount kind: {kind}")
    if list_price <= 0:
        return 0
    return max(0, min(fn(list_price, int(value)), list_price))


@dataclass(frozen=True)
class DiscountSelection:
    campaign_id: int
    campaign_name: str
    discount: int


def pick_best_discount(
    campaigns: Iterable[PriceCampaign],
    *,
    vaccine_id: int,
    list_price: int,
) -> DiscountSelection | None:
    """
    Largest discount wins; equal discounts go to the highest campaign id.
    """
    best: DiscountSelection | None = None
    for campaign in campaigns:
        if not campaign.applies_to(vaccine_id):
            continue
        amount = compute_discount(
            kind=campaign.discount_kind,
            value=campaign.discount_value,
            list_price=list_price,
        )
        candidate = DiscountSelection(campaign_id=campaign.id, campaign_name=campaign.name, discount=amount)
        if best is None or (candidate.discount, candidate.campaign_id) > (best.discount, best.campaign_id):
            best = candidate
    return best


def best_discount(*, tenant_id: UUID, vaccine_id: int, as_of: date, list_price: int) -> DiscountSelection | None:
    """
    Best applicable campaign for a vaccine on a date. None means no discount.
    """
    return pick_best_discount(
        active_campaigns(tenant_id=tenant_id, as_of=as_of),
        vaccine_id=vaccine_id,
        list_price=list_price,
    )


@dataclass(frozen=True)
class QuoteLine:
    vaccine_id: int
    vaccine_name: str
    list_price: int
    discount: int
    final_price: int
    missing_price: bool
    price_id: Optional[int] = None
    campaign_id: Optional[int] = None
    campaign_name: str = ""


@dataclass(frozen=True)
class Quote:
    price_table_id: int
    price_table_name: str
    as_of: date
    lines: List[QuoteLine] = field(default_factory=list)
    total_list: int = 0
    total_discount: int = 0
    total_final: int = 0
    any_missing_price: bool = False


class QuoteEngine:
    """
    Pure read: resolve the table, price every selected vaccine, apply the best
    campaign and sum. Never writes.
    """

    @staticmethod
    def quote(
        *,
        tenant_id: UUID,
        vaccine_ids: Sequence[int],
        price_table_id: int | None = None,
        as_of: date | None = None,
    ) -> Quote:
        if not vaccine_ids:
            raise ValidationError({"vaccines": "Select at least one vaccine."})

        as_of = as_of or timezone.localdate()
        table = resolve_price_table(tenant_id=tenant_id, price_table_id=price_table_id)
        vaccines = vaccines_by_ids(tenant_id=tenant_id, vaccine_ids=vaccine_ids)
        campaigns = active_campaigns(tenant_id=tenant_id, as_of=as_of)

        lines: List[QuoteLine] = []
        for raw_id in vaccine_ids:
            vaccine = vaccines[int(raw_id)]
            resolution = resolve_price_in_table(price_table=table, vaccine_id=vaccine.id, as_of=as_of)

            if not resolution.found:
                lines.append(
                    QuoteLine(
                        vaccine_id=vaccine.id,
                        vaccine_name=vaccine.name,
                        list_price=0,
                        discount=0,
                        final_price=0,
                        missing_price=True,
                    )
                )
                continue

            selection = pick_best_discount(campaigns, vaccine_id=vaccine.id, list_price=resolution.price)
            discount = selection.discount if selection else 0
            lines.append(
                QuoteLine(
                    vaccine_id=vaccine.id,
                    vaccine_name=vaccine.name,
                    list_price=resolution.price,
                    discount=discount,
                    final_price=resolution.price - discount,
                    missing_price=False,
                    price_id=resolution.price_id,
                    campaign_id=selection.campaign_id if selection else None,
                    campaign_name=selection.campaign_name if selection else "",
                )
            )

        return Quote(
            price_table_id=table.id,
            price_table_name=table.name,
            as_of=as_of,
            lines=lines,
            total_list=sum(l.list_price for l in lines),
            total_discount=sum(l.discount for l in lines),
            total_final=sum(l.final_price for l in lines),
            any_missing_price=any(l.missing_price for l in lines),
        )
