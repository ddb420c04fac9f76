import pytest

from clinic_core.iam.models import TenantMembership
from clinic_core.iam.services.membership import grant_membership, is_user_member_of_tenant, revoke_membership
from clinic_core.tenants.models import TenantStatus

pytestmark = pytest.mark.django_db


def test_grant_and_revoke(tenant, other_tenant):
    grant_membership(user_id=7, tenant_id=tenant.id)

    assert is_user_member_of_tenant(user_id=7, tenant_id=tenant.id) is True
    assert is_user_member_of_tenant(user_id=7, tenant_id=other_tenant.id) is False

    revoke_membership(user_id=7, tenant_id=tenant.id)
    assert is_user_member_of_tenant(user_id=7, tenant_id=tenant.id) is False


def test_grant_reactivates_existing_membership(tenant):
    grant_membership(user_id=7, tenant_id=tenant.id)
    revoke_membership(user_id=7, tenant_id=tenant.id)

    grant_membership(user_id=7, tenant_id=tenant.id)

    assert TenantMembership.objects.filter(user_id=7).count() == 1
    assert is_user_member_of_tenant(user_id=7, tenant_id=tenant.id) is True


def test_suspended_tenant_grants_no_access(tenant):
    grant_membership(user_id=7, tenant_id=tenant.id)
    tenant.status = TenantStatus.SUSPENDED
    tenant.save(update_fields=["status"])

    assert is_user_member_of_tenant(user_id=7, tenant_id=tenant.id) is False
