# clinic_core/catalog/models.py
from django.db import models

from clinic_core.common.models import TenantScopedModel


class Vaccine(TenantScopedModel):
    """
    Vaccine catalog entry.
    Pricing only needs identity + display name; the rest is descriptive.
    """
    name = models.CharField(max_length=255)
    manufacturer = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "catalog_vaccine"
        indexes = [
            models.Index(fields=["tenant_id", "is_active"]),
            models.Index(fields=["tenant_id", "name"]),
        ]

    def __str__(self) -> str:
        return self.name
