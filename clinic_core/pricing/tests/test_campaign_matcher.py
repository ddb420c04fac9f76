import datetime

import pytest

from clinic_core.catalog.models import Vaccine
from clinic_core.pricing.engine import DISCOUNT_FUNCTIONS, best_discount, compute_discount
from clinic_core.pricing.models import DiscountKind, PriceCampaign

D = datetime.date
JUNE_15 = D(2024, 6, 15)


def _campaign(tenant, *, kind, value, vaccine_ids=(), start=D(2024, 6, 1), end=D(2024, 6, 30), is_active=True, name="C"):
    return PriceCampaign.objects.create(
        tenant_id=tenant.id,
        name=name,
        discount_kind=kind,
        discount_value=value,
        vaccine_ids=list(vaccine_ids),
        start_date=start,
        end_date=end,
        is_active=is_active,
    )


@pytest.mark.parametrize(
    "kind,value,list_price,expected",
    [
        (DiscountKind.PERCENT, 10, 10000, 1000),
        (DiscountKind.PERCENT, 10, 1005, 101),  # 100.5 rounds half up
        (DiscountKind.PERCENT, 33, 1001, 330),  # 330.33 rounds down
        (DiscountKind.PERCENT, 100, 4200, 4200),
        (DiscountKind.PERCENT, 0, 4200, 0),
        (DiscountKind.FIXED_AMOUNT, 1500, 10000, 1500),
        (DiscountKind.FIXED_AMOUNT, 15000, 10000, 10000),
        (DiscountKind.FIXED_AMOUNT, 500, 0, 0),
    ],
)
def test_compute_discount_is_clamped_to_list_price(kind, value, list_price, expected):
    amount = compute_discount(kind=kind, value=value, list_price=list_price)

    assert amount == expected
    assert 0 <= amount <= list_price


def test_unknown_kind_is_rejected():
    with pytest.raises(ValueError):
        compute_discount(kind="BOGO", value=50, list_price=1000)


def test_every_discount_kind_has_a_function():
    assert set(DISCOUNT_FUNCTIONS) == set(DiscountKind.values)


@pytest.mark.django_db
def test_no_campaign_returns_none(tenant, vaccine):
    assert best_discount(tenant_id=tenant.id, vaccine_id=vaccine.id, as_of=JUNE_15, list_price=10000) is None


@pytest.mark.django_db
def test_largest_discount_wins(tenant, vaccine):
    _campaign(tenant, kind=DiscountKind.PERCENT, value=10, name="10%")
    fixed = _campaign(tenant, kind=DiscountKind.FIXED_AMOUNT, value=1500, name="R$15")

    sel = best_discount(tenant_id=tenant.id, vaccine_id=vaccine.id, as_of=JUNE_15, list_price=10000)

    assert sel.campaign_id == fixed.id
    assert sel.campaign_name == "R$15"
    assert sel.discount == 1500


@pytest.mark.django_db
def test_equal_discounts_go_to_highest_campaign_id(tenant, vaccine):
    _campaign(tenant, kind=DiscountKind.PERCENT, value=10)
    later = _campaign(tenant, kind=DiscountKind.FIXED_AMOUNT, value=1000)

    sel = best_discount(tenant_id=tenant.id, vaccine_id=vaccine.id, as_of=JUNE_15, list_price=10000)
    assert sel.campaign_id == later.id
    assert sel.discount == 1000


@pytest.mark.django_db
def test_vaccine_specific_campaign_only_applies_to_listed_vaccines(tenant, vaccine):
    other = Vaccine.objects.create(tenant_id=tenant.id, name="HPV")
    _campaign(tenant, kind=DiscountKind.PERCENT, value=20, vaccine_ids=[other.id])

    assert best_discount(tenant_id=tenant.id, vaccine_id=vaccine.id, as_of=JUNE_15, list_price=10000) is None

    sel = best_discount(tenant_id=tenant.id, vaccine_id=other.id, as_of=JUNE_15, list_price=10000)
    assert sel.discount == 2000


@pytest.mark.django_db
def test_empty_vaccine_list_applies_to_all(tenant, vaccine):
    _campaign(tenant, kind=DiscountKind.PERCENT, value=5)

    sel = best_discount(tenant_id=tenant.id, vaccine_id=vaccine.id, as_of=JUNE_15, list_price=10000)
    assert sel.discount == 500


@pytest.mark.django_db
def test_inactive_and_out_of_window_campaigns_are_skipped(tenant, vaccine):
    _campaign(tenant, kind=DiscountKind.PERCENT, value=50, is_active=False)
    _campaign(tenant, kind=DiscountKind.PERCENT, value=40, start=D(2024, 7, 1), end=D(2024, 7, 31))
    _campaign(tenant, kind=DiscountKind.PERCENT, value=30, start=D(2024, 5, 1), end=D(2024, 5, 31))

    assert best_discount(tenant_id=tenant.id, vaccine_id=vaccine.id, as_of=JUNE_15, list_price=10000) is None


@pytest.mark.django_db
def test_open_ended_campaign_applies(tenant, vaccine):
    _campaign(tenant, kind=DiscountKind.FIXED_AMOUNT, value=700, start=D(2024, 1, 1), end=None)

    sel = best_discount(tenant_id=tenant.id, vaccine_id=vaccine.id, as_of=D(2026, 1, 1), list_price=10000)
    assert sel.discount == 700


@pytest.mark.django_db
def test_other_tenant_campaigns_are_invisible(tenant, other_tenant, vaccine):
    _campaign(other_tenant, kind=DiscountKind.PERCENT, value=90)

    assert best_discount(tenant_id=tenant.id, vaccine_id=vaccine.id, as_of=JUNE_15, list_price=10000) is None
