# clinic_core/iam/services/membership.py
from __future__ import annotations

from uuid import UUID

from django.db import transaction

from clinic_core.iam.models import TenantMembership
from clinic_core.tenants.models import TenantStatus


def is_user_member_of_tenant(*, user_id: int, tenant_id: UUID) -> bool:
    """
    Validate user -> tenant membership.
    Single source of truth used by scope enforcement. Suspended/inactive tenants
    grant no access.
    """
    return TenantMembership.objects.filter(
        is_active=True,
        tenant_id=tenant_id,
        tenant__status=TenantStatus.ACTIVE,
        user_id=user_id,
    ).exists()


@transaction.atomic
def grant_membership(*, user_id: int, tenant_id: UUID) -> TenantMembership:
    membership, _ = TenantMembership.objects.update_or_create(
        tenant_id=tenant_id,
        user_id=user_id,
        defaults={"is_active": True},
    )
    return membership


@transaction.atomic
def revoke_membership(*, user_id: int, tenant_id: UUID) -> None:
    TenantMembership.objects.filter(tenant_id=tenant_id, user_id=user_id).update(is_active=False)
