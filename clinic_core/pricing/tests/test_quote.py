import datetime

import pytest
from rest_framework.exceptions import ValidationError

from clinic_core.catalog.models import Vaccine
from clinic_core.common.api.exceptions import TenantIsolationError
from clinic_core.pricing.engine import QuoteEngine
from clinic_core.pricing.models import DiscountKind
from clinic_core.pricing.services import PriceCampaignService, PriceTableService, VaccinePriceService

pytestmark = pytest.mark.django_db

D = datetime.date
JUNE_15 = D(2024, 6, 15)


@pytest.fixture
def table(tenant):
    return PriceTableService.create(tenant_id=tenant.id, name="Standard", is_default=True)


@pytest.fixture
def hpv(tenant):
    return Vaccine.objects.create(tenant_id=tenant.id, name="HPV")


def _price(tenant, table, vaccine, amount, start=D(2024, 1, 1), end=None):
    return VaccinePriceService.create(
        tenant_id=tenant.id,
        price_table_id=table.id,
        vaccine_id=vaccine.id,
        price=amount,
        start_date=start,
        end_date=end,
    )


def test_quote_sums_lines_and_applies_best_campaign(tenant, table, vaccine, hpv):
    _price(tenant, table, vaccine, 10000)
    _price(tenant, table, hpv, 50000)
    PriceCampaignService.create(
        tenant_id=tenant.id,
        name="HPV week",
        discount_kind=DiscountKind.FIXED_AMOUNT,
        discount_value=5000,
        vaccine_ids=[hpv.id],
        start_date=D(2024, 6, 10),
        end_date=D(2024, 6, 20),
    )

    q = QuoteEngine.quote(tenant_id=tenant.id, vaccine_ids=[vaccine.id, hpv.id], as_of=JUNE_15)

    assert q.price_table_id == table.id
    assert [(l.vaccine_name, l.list_price, l.discount, l.final_price) for l in q.lines] == [
        ("Influenza", 10000, 0, 10000),
        ("HPV", 50000, 5000, 45000),
    ]
    assert q.lines[1].campaign_name == "HPV week"
    assert (q.total_list, q.total_discount, q.total_final) == (60000, 5000, 55000)
    assert q.any_missing_price is False


def test_order_is_preserved_and_duplicates_priced_independently(tenant, table, vaccine, hpv):
    _price(tenant, table, vaccine, 10000)
    _price(tenant, table, hpv, 50000)

    q = QuoteEngine.quote(tenant_id=tenant.id, vaccine_ids=[hpv.id, vaccine.id, hpv.id], as_of=JUNE_15)

    assert [l.vaccine_id for l in q.lines] == [hpv.id, vaccine.id, hpv.id]
    assert q.total_list == 110000


def test_missing_price_is_a_zero_line_not_an_error(tenant, table, vaccine, hpv):
    _price(tenant, table, vaccine, 10000)
    PriceCampaignService.create(
        tenant_id=tenant.id,
        name="All 10%",
        discount_kind=DiscountKind.PERCENT,
        discount_value=10,
        start_date=D(2024, 6, 1),
        end_date=D(2024, 6, 30),
    )

    q = QuoteEngine.quote(tenant_id=tenant.id, vaccine_ids=[vaccine.id, hpv.id], as_of=JUNE_15)

    missing = q.lines[1]
    assert missing.missing_price is True
    assert (missing.list_price, missing.discount, missing.final_price) == (0, 0, 0)
    assert missing.campaign_id is None
    assert q.any_missing_price is True
    assert q.total_final == 9000


def test_explicit_table_overrides_default(tenant, table, vaccine):
    corporate = PriceTableService.create(tenant_id=tenant.id, name="Corporate")
    _price(tenant, table, vaccine, 10000)
    _price(tenant, corporate, vaccine, 8000)

    q = QuoteEngine.quote(tenant_id=tenant.id, vaccine_ids=[vaccine.id], price_table_id=corporate.id, as_of=JUNE_15)

    assert q.price_table_name == "Corporate"
    assert q.total_final == 8000


def test_empty_selection_is_rejected(tenant, table):
    with pytest.raises(ValidationError):
        QuoteEngine.quote(tenant_id=tenant.id, vaccine_ids=[], as_of=JUNE_15)


def test_foreign_vaccine_is_isolation_error(tenant, table, vaccine, other_vaccine):
    _price(tenant, table, vaccine, 10000)

    with pytest.raises(TenantIsolationError):
        QuoteEngine.quote(tenant_id=tenant.id, vaccine_ids=[vaccine.id, other_vaccine.id], as_of=JUNE_15)


def test_no_default_table_is_validation_error(tenant, vaccine):
    PriceTableService.create(tenant_id=tenant.id, name="Not default")

    with pytest.raises(ValidationError):
        QuoteEngine.quote(tenant_id=tenant.id, vaccine_ids=[vaccine.id], as_of=JUNE_15)
