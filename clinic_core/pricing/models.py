# clinic_core/pricing/models.py
from __future__ import annotations

from datetime import date

from django.db import models
from django.db.models import Q

from clinic_core.common.models import TenantScopedModel


class DiscountKind(models.TextChoices):
    PERCENT = "PERCENT", "Percent"
    FIXED_AMOUNT = "FIXED_AMOUNT", "Fixed amount"


class PriceTable(TenantScopedModel):
    """
    Named, versionable price list. A tenant has at most one default table.
    """
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    is_default = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "pricing_price_table"
        constraints = [
            models.UniqueConstraint(
                fields=["tenant_id"],
                condition=Q(is_default=True),
                name="uq_price_table_one_default_per_tenant",
            ),
        ]
        indexes = [
            models.Index(fields=["tenant_id", "is_active"]),
        ]

    def __str__(self) -> str:
        return self.name


class VaccinePrice(TenantScopedModel):
    """
    Price of one vaccine inside one table for a validity window.
    Money is stored in minor units (cents). end_date NULL means open-ended.
    Overlapping windows are allowed; the resolver picks deterministically.
    """
    price_table = models.ForeignKey(PriceTable, on_delete=models.CASCADE, related_name="prices")
    vaccine_id = models.BigIntegerField(db_index=True)

    price = models.PositiveIntegerField()

    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)

    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "pricing_vaccine_price"
        constraints = [
            models.CheckConstraint(
                condition=Q(end_date__isnull=True) | Q(end_date__gte=models.F("start_date")),
                name="ck_vaccine_price_window_order",
            ),
        ]
        indexes = [
            models.Index(fields=["tenant_id", "price_table", "vaccine_id", "is_active"]),
            models.Index(fields=["tenant_id", "vaccine_id", "start_date"]),
        ]

    def covers(self, as_of: date) -> bool:
        return self.start_date <= as_of and (self.end_date is None or self.end_date >= as_of)


class PriceCampaign(TenantScopedModel):
    """
    Time-boxed discount. Empty vaccine_ids means the campaign applies to every vaccine.
    PERCENT values are 0..100; FIXED_AMOUNT values are minor units.
    """
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    discount_kind = models.CharField(max_length=16, choices=DiscountKind.choices)
    discount_value = models.PositiveIntegerField()

    vaccine_ids = models.JSONField(default=list, blank=True)

    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)

    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "pricing_price_campaign"
        constraints = [
            models.CheckConstraint(
                condition=Q(end_date__isnull=True) | Q(end_date__gte=models.F("start_date")),
                name="ck_price_campaign_window_order",
            ),
        ]
        indexes = [
            models.Index(fields=["tenant_id", "is_active", "start_date"]),
        ]

    def __str__(self) -> str:
        return self.name

    def covers(self, as_of: date) -> bool:
        return self.start_date <= as_of and (self.end_date is None or self.end_date >= as_of)

    def applies_to(self, vaccine_id: int) -> bool:
        ids = self.vaccine_ids or []
        return not ids or int(vaccine_id) in {int(v) for v in ids}
