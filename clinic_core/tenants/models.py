# clinic_core/tenants/models.py
import uuid

from django.db import models
from django.db.models import Q


class TenantStatus(models.TextChoices):
    ACTIVE = "ACTIVE", "Active"
    INACTIVE = "INACTIVE", "Inactive"
    SUSPENDED = "SUSPENDED", "Suspended"


class TenantPlan(models.TextChoices):
    BASIC = "BASIC", "Basic"
    INTERMEDIATE = "INTERMEDIATE", "Intermediate"
    FULL = "FULL", "Full"


class Tenant(models.Model):
    """
    A vaccination clinic (legal entity). Every price table, campaign, vaccine and
    budget hangs off one of these; it is not itself tenant scoped.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)
    code = models.SlugField(max_length=64, unique=True)

    legal_name = models.CharField(max_length=255, blank=True)
    # company registration number (CNPJ), unique when present
    tax_id = models.CharField(max_length=18, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=32, blank=True)

    plan = models.CharField(max_length=16, choices=TenantPlan.choices, default=TenantPlan.BASIC)
    status = models.CharField(
        max_length=16,
        choices=TenantStatus.choices,
        default=TenantStatus.ACTIVE,
        db_index=True,
    )

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "tenants_clinic"
        constraints = [
            models.UniqueConstraint(
                fields=["tax_id"],
                condition=~Q(tax_id=""),
                name="uq_tenant_tax_id_when_set",
            ),
        ]

    def __str__(self) -> str:
        return self.name if not self.legal_name else f"{self.name} / {self.legal_name}"