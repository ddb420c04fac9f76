import pytest
from rest_framework.test import APIClient

from clinic_core.conftest import make_user, scope_headers
from clinic_core.pricing.models import PriceTable

pytestmark = pytest.mark.django_db


@pytest.fixture
def reception_client(tenant):
    c = APIClient()
    c.force_authenticate(user=make_user(username="reception", tenant=tenant, groups=["RECEPTION"]))
    return c


def _create_table(api_client, tenant, **payload):
    body = {"name": "Standard", **payload}
    resp = api_client.post("/api/v1/pricing/tables/", body, format="json", **scope_headers(tenant))
    assert resp.status_code == 201, resp.data
    return resp.data


def test_table_lifecycle(api_client, tenant):
    headers = scope_headers(tenant)
    a = _create_table(api_client, tenant, name="A", is_default=True)
    b = _create_table(api_client, tenant, name="B")

    resp = api_client.get("/api/v1/pricing/tables/default/", **headers)
    assert resp.status_code == 200
    assert resp.data["id"] == a["id"]

    resp = api_client.post(f"/api/v1/pricing/tables/{b['id']}/set-default/", {}, format="json", **headers)
    assert resp.status_code == 200
    assert resp.data["is_default"] is True

    resp = api_client.get("/api/v1/pricing/tables/", {"is_default": "true"}, **headers)
    assert resp.status_code == 200
    assert [t["id"] for t in resp.data["results"]] == [b["id"]]

    resp = api_client.patch(f"/api/v1/pricing/tables/{a['id']}/", {"description": "legacy"}, format="json", **headers)
    assert resp.status_code == 200
    assert resp.data["description"] == "legacy"

    resp = api_client.delete(f"/api/v1/pricing/tables/{a['id']}/", **headers)
    assert resp.status_code == 204
    assert not PriceTable.objects.filter(id=a["id"]).exists()


def test_default_endpoint_returns_null_without_default(api_client, tenant):
    resp = api_client.get("/api/v1/pricing/tables/default/", **scope_headers(tenant))

    assert resp.status_code == 200
    assert resp.data is None


def test_foreign_table_is_404_with_isolation_code(api_client, tenant, other_tenant):
    theirs = PriceTable.objects.create(tenant_id=other_tenant.id, name="Theirs")

    resp = api_client.get(f"/api/v1/pricing/tables/{theirs.id}/", **scope_headers(tenant))

    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "tenant_isolation_violation"


def test_price_create_list_and_resolve(api_client, tenant, vaccine):
    headers = scope_headers(tenant)
    table = _create_table(api_client, tenant, is_default=True)

    resp = api_client.post(
        "/api/v1/pricing/prices/",
        {"price_table": table["id"], "vaccine": vaccine.id, "price": 12000, "start_date": "2024-01-01"},
        format="json",
        **headers,
    )
    assert resp.status_code == 201, resp.data
    price_id = resp.data["id"]

    resp = api_client.get("/api/v1/pricing/prices/", {"vaccine": vaccine.id}, **headers)
    assert resp.status_code == 200
    assert [p["id"] for p in resp.data["results"]] == [price_id]

    resp = api_client.get(
        "/api/v1/pricing/prices/resolve/",
        {"price_table": table["id"], "vaccine": vaccine.id, "as_of": "2024-06-15"},
        **headers,
    )
    assert resp.status_code == 200
    assert resp.data == {"found": True, "price": 12000, "price_id": price_id}

    resp = api_client.get(
        "/api/v1/pricing/prices/resolve/",
        {"price_table": table["id"], "vaccine": vaccine.id, "as_of": "2023-06-15"},
        **headers,
    )
    assert resp.status_code == 200
    assert resp.data["found"] is False


def test_price_window_must_be_ordered(api_client, tenant, vaccine):
    table = _create_table(api_client, tenant)

    resp = api_client.post(
        "/api/v1/pricing/prices/",
        {
            "price_table": table["id"],
            "vaccine": vaccine.id,
            "price": 12000,
            "start_date": "2024-06-30",
            "end_date": "2024-06-01",
        },
        format="json",
        **scope_headers(tenant),
    )
    assert resp.status_code == 400
    assert "end_date" in resp.json()["error"]["details"]


def test_price_for_foreign_vaccine_is_rejected(api_client, tenant, other_vaccine):
    table = _create_table(api_client, tenant)

    resp = api_client.post(
        "/api/v1/pricing/prices/",
        {"price_table": table["id"], "vaccine": other_vaccine.id, "price": 100, "start_date": "2024-01-01"},
        format="json",
        **scope_headers(tenant),
    )
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "tenant_isolation_violation"


def test_campaign_create_and_toggle(api_client, tenant, vaccine):
    headers = scope_headers(tenant)

    resp = api_client.post(
        "/api/v1/pricing/campaigns/",
        {
            "name": "June",
            "discount_kind": "PERCENT",
            "discount_value": 10,
            "vaccine_ids": [vaccine.id],
            "start_date": "2024-06-01",
            "end_date": "2024-06-30",
        },
        format="json",
        **headers,
    )
    assert resp.status_code == 201, resp.data
    cid = resp.data["id"]
    assert resp.data["is_active"] is True

    resp = api_client.post(f"/api/v1/pricing/campaigns/{cid}/toggle-active/", {}, format="json", **headers)
    assert resp.status_code == 200
    assert resp.data["is_active"] is False

    resp = api_client.get("/api/v1/pricing/campaigns/", {"is_active": "false"}, **headers)
    assert [c["id"] for c in resp.data["results"]] == [cid]


def test_percent_campaign_over_100_is_rejected(api_client, tenant):
    resp = api_client.post(
        "/api/v1/pricing/campaigns/",
        {"name": "Bad", "discount_kind": "PERCENT", "discount_value": 150, "start_date": "2024-06-01"},
        format="json",
        **scope_headers(tenant),
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "validation_error"


def test_quote_endpoint(api_client, tenant, vaccine):
    headers = scope_headers(tenant)
    table = _create_table(api_client, tenant, is_default=True)
    api_client.post(
        "/api/v1/pricing/prices/",
        {"price_table": table["id"], "vaccine": vaccine.id, "price": 10000, "start_date": "2024-01-01"},
        format="json",
        **headers,
    )

    resp = api_client.post(
        "/api/v1/pricing/quote/",
        {"vaccines": [vaccine.id, vaccine.id], "as_of": "2024-06-15"},
        format="json",
        **headers,
    )

    assert resp.status_code == 200, resp.data
    assert resp.data["price_table_id"] == table["id"]
    assert len(resp.data["lines"]) == 2
    assert resp.data["total_final"] == 20000
    assert resp.data["any_missing_price"] is False


def test_quote_requires_vaccines(api_client, tenant):
    resp = api_client.post("/api/v1/pricing/quote/", {"vaccines": []}, format="json", **scope_headers(tenant))
    assert resp.status_code == 400


def test_reception_can_quote_but_not_edit_prices(reception_client, tenant, vaccine):
    headers = scope_headers(tenant)
    PriceTable.objects.create(tenant_id=tenant.id, name="Standard", is_default=True)

    resp = reception_client.post("/api/v1/pricing/tables/", {"name": "Mine"}, format="json", **headers)
    assert resp.status_code == 403

    resp = reception_client.get("/api/v1/pricing/tables/", **headers)
    assert resp.status_code == 200

    resp = reception_client.post("/api/v1/pricing/quote/", {"vaccines": [vaccine.id]}, format="json", **headers)
    assert resp.status_code == 200
    assert resp.data["any_missing_price"] is True
