import datetime

import pytest

from clinic_core.catalog.models import Vaccine
from clinic_core.common.api.exceptions import TenantIsolationError
from clinic_core.pricing.models import PriceTable, VaccinePrice
from clinic_core.pricing.selectors import resolve_price

pytestmark = pytest.mark.django_db

D = datetime.date


@pytest.fixture
def table(tenant):
    return PriceTable.objects.create(tenant_id=tenant.id, name="Standard", is_default=True)


def _price(tenant, table, vaccine, price, start, end=None, is_active=True):
    return VaccinePrice.objects.create(
        tenant_id=tenant.id,
        price_table=table,
        vaccine_id=vaccine.id,
        price=price,
        start_date=start,
        end_date=end,
        is_active=is_active,
    )


def test_no_row_is_not_found_not_an_error(tenant, table, vaccine):
    res = resolve_price(tenant_id=tenant.id, price_table_id=table.id, vaccine_id=vaccine.id, as_of=D(2024, 6, 15))

    assert res.found is False
    assert res.price == 0
    assert res.price_id is None


def test_window_bounds_are_inclusive(tenant, table, vaccine):
    row = _price(tenant, table, vaccine, 10000, D(2024, 6, 1), D(2024, 6, 30))

    for day in (D(2024, 6, 1), D(2024, 6, 30)):
        res = resolve_price(tenant_id=tenant.id, price_table_id=table.id, vaccine_id=vaccine.id, as_of=day)
        assert (res.found, res.price, res.price_id) == (True, 10000, row.id)

    for day in (D(2024, 5, 31), D(2024, 7, 1)):
        res = resolve_price(tenant_id=tenant.id, price_table_id=table.id, vaccine_id=vaccine.id, as_of=day)
        assert res.found is False


def test_open_ended_row_applies_from_start(tenant, table, vaccine):
    _price(tenant, table, vaccine, 8000, D(2024, 1, 1))

    res = resolve_price(tenant_id=tenant.id, price_table_id=table.id, vaccine_id=vaccine.id, as_of=D(2030, 1, 1))
    assert res.found is True
    assert res.price == 8000


def test_overlap_picks_latest_start(tenant, table, vaccine):
    _price(tenant, table, vaccine, 8000, D(2024, 1, 1))
    newer = _price(tenant, table, vaccine, 9500, D(2024, 6, 1), D(2024, 12, 31))

    res = resolve_price(tenant_id=tenant.id, price_table_id=table.id, vaccine_id=vaccine.id, as_of=D(2024, 6, 15))
    assert res.price_id == newer.id
    assert res.price == 9500


def test_overlap_same_start_picks_highest_id_and_is_idempotent(tenant, table, vaccine):
    _price(tenant, table, vaccine, 7000, D(2024, 6, 1))
    latest = _price(tenant, table, vaccine, 7200, D(2024, 6, 1))

    first = resolve_price(tenant_id=tenant.id, price_table_id=table.id, vaccine_id=vaccine.id, as_of=D(2024, 6, 15))
    second = resolve_price(tenant_id=tenant.id, price_table_id=table.id, vaccine_id=vaccine.id, as_of=D(2024, 6, 15))

    assert first == second
    assert first.price_id == latest.id


def test_inactive_rows_are_ignored(tenant, table, vaccine):
    active = _price(tenant, table, vaccine, 7000, D(2024, 1, 1))
    _price(tenant, table, vaccine, 5000, D(2024, 6, 1), is_active=False)

    res = resolve_price(tenant_id=tenant.id, price_table_id=table.id, vaccine_id=vaccine.id, as_of=D(2024, 6, 15))
    assert res.price_id == active.id


def test_rows_of_other_tables_and_vaccines_do_not_leak(tenant, table, vaccine):
    other_table = PriceTable.objects.create(tenant_id=tenant.id, name="Corporate")
    other_vaccine = Vaccine.objects.create(tenant_id=tenant.id, name="Hepatitis B")
    _price(tenant, other_table, vaccine, 6000, D(2024, 1, 1))
    _price(tenant, table, other_vaccine, 4000, D(2024, 1, 1))

    res = resolve_price(tenant_id=tenant.id, price_table_id=table.id, vaccine_id=vaccine.id, as_of=D(2024, 6, 15))
    assert res.found is False


def test_foreign_table_raises_tenant_isolation(tenant, other_tenant, vaccine):
    foreign = PriceTable.objects.create(tenant_id=other_tenant.id, name="Theirs")

    with pytest.raises(TenantIsolationError):
        resolve_price(tenant_id=tenant.id, price_table_id=foreign.id, vaccine_id=vaccine.id, as_of=D(2024, 6, 15))
