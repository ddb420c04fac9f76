import pytest
from rest_framework.test import APIClient

from clinic_core.catalog.models import Vaccine
from clinic_core.catalog.selectors import vaccines_by_ids
from clinic_core.common.api.exceptions import TenantIsolationError
from clinic_core.conftest import make_user, scope_headers

pytestmark = pytest.mark.django_db

URL = "/api/v1/catalog/vaccines/"


def test_vaccines_by_ids_maps_ids(tenant, vaccine):
    hpv = Vaccine.objects.create(tenant_id=tenant.id, name="HPV")

    found = vaccines_by_ids(tenant_id=tenant.id, vaccine_ids=[hpv.id, vaccine.id, hpv.id])

    assert set(found) == {hpv.id, vaccine.id}
    assert found[hpv.id].name == "HPV"
    assert vaccines_by_ids(tenant_id=tenant.id, vaccine_ids=[]) == {}


def test_vaccines_by_ids_rejects_foreign_ids(tenant, vaccine, other_vaccine):
    with pytest.raises(TenantIsolationError):
        vaccines_by_ids(tenant_id=tenant.id, vaccine_ids=[vaccine.id, other_vaccine.id])


def test_list_is_tenant_scoped_and_filterable(api_client, tenant, vaccine, other_vaccine):
    Vaccine.objects.create(tenant_id=tenant.id, name="Old BCG", is_active=False)
    headers = scope_headers(tenant)

    resp = api_client.get(URL, **headers)
    assert resp.status_code == 200
    assert [v["name"] for v in resp.data["results"]] == ["Influenza", "Old BCG"]

    resp = api_client.get(URL, {"is_active": "true"}, **headers)
    assert [v["name"] for v in resp.data["results"]] == ["Influenza"]

    resp = api_client.get(URL, {"search": "bcg"}, **headers)
    assert [v["name"] for v in resp.data["results"]] == ["Old BCG"]


def test_retrieve_foreign_vaccine_is_404(api_client, tenant, other_vaccine):
    resp = api_client.get(f"{URL}{other_vaccine.id}/", **scope_headers(tenant))

    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "tenant_isolation_violation"


def test_catalog_is_read_only(tenant):
    c = APIClient()
    c.force_authenticate(user=make_user(username="mgr", tenant=tenant, groups=["MANAGER"]))

    resp = c.post(URL, {"name": "New"}, format="json", **scope_headers(tenant))

    assert resp.status_code == 403
