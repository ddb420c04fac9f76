# clinic_core/conftest.py
import datetime

import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from rest_framework.test import APIClient

from clinic_core.catalog.models import Vaccine
from clinic_core.iam.services.membership import grant_membership
from clinic_core.patients.models import Patient
from clinic_core.tenants.models import Tenant


def scope_headers(tenant):
    """
    Standard scope header used by the scope resolver.
    DRF test client requires HTTP_ prefix.
    """
    return {"HTTP_X_TENANT_ID": str(tenant.id)}


def make_user(*, username, tenant=None, groups=()):
    User = get_user_model()
    user = User.objects.create_user(username=username, password="testpass", is_active=True)
    for name in groups:
        group, _ = Group.objects.get_or_create(name=name)
        user.groups.add(group)
    if tenant is not None:
        grant_membership(user_id=user.id, tenant_id=tenant.id)
    return user


@pytest.fixture
def tenant(db):
    return Tenant.objects.create(code="test-tenant", name="Test Tenant")


@pytest.fixture
def other_tenant(db):
    return Tenant.objects.create(code="other-tenant", name="Other Tenant")


@pytest.fixture
def user(db, tenant):
    """
    ADMIN group + active membership in `tenant`.
    """
    return make_user(username="testuser", tenant=tenant, groups=["ADMIN"])


@pytest.fixture
def api_client(user):
    c = APIClient()
    c.force_authenticate(user=user)
    return c


@pytest.fixture
def today():
    return datetime.date(2024, 6, 15)


@pytest.fixture
def vaccine(db, tenant):
    return Vaccine.objects.create(tenant_id=tenant.id, name="Influenza", manufacturer="Butantan")


@pytest.fixture
def other_vaccine(db, other_tenant):
    return Vaccine.objects.create(tenant_id=other_tenant.id, name="Influenza (other clinic)")


@pytest.fixture
def patient(db, tenant):
    return Patient.objects.create(
        tenant_id=tenant.id,
        full_name="Maria Silva",
        tax_id="123.456.789-00",
        birth_date=datetime.date(1990, 3, 2),
        email="maria@example.com",
        phone="+55 11 99999-0000",
    )
