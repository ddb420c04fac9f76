# clinic_core/iam/models.py
from django.db import models

from clinic_core.common.models import TimeStampedModel
from clinic_core.tenants.models import Tenant


class TenantMembership(TimeStampedModel):
    """
    Grants a Django user access to one tenant.
    This is the enforcement point used by scope resolution.

    user_id is a plain column (not a FK) so the iam tables do not depend on
    the auth app's migration state.
    """
    tenant = models.ForeignKey(Tenant, on_delete=models.PROTECT, related_name="memberships")
    user_id = models.BigIntegerField(db_index=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "iam_tenant_membership"
        constraints = [
            models.UniqueConstraint(fields=["tenant", "user_id"], name="uq_membership_tenant_user"),
        ]
        indexes = [
            models.Index(fields=["user_id", "is_active"]),
        ]

    def __str__(self) -> str:
        return f"user={self.user_id} tenant={self.tenant_id}"
