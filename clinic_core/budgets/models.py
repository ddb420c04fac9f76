# clinic_core/budgets/models.py
from __future__ import annotations

from datetime import date

from django.db import models
from django.db.models import Q

from clinic_core.budgets.constants import BUDGET_NUMBER_PREFIX
from clinic_core.common.models import TenantScopedModel


class BudgetStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    ACCEPTED = "ACCEPTED", "Accepted"
    REJECTED = "REJECTED", "Rejected"


def format_budget_number(sequential_number: int) -> str:
    return f"{BUDGET_NUMBER_PREFIX}-{sequential_number:06d}"


class BudgetSequence(models.Model):
    """
    Per-tenant counter row. Locked with select_for_update while a number is allocated.
    """
    tenant_id = models.UUIDField(unique=True)
    last_number = models.PositiveIntegerField(default=0)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "budgets_budget_sequence"

    def __str__(self) -> str:
        return f"{self.tenant_id}: {self.last_number}"


class PatientBudget(TenantScopedModel):
    """
    Immutable quotation snapshot.

    Patient identity, vaccine names, prices and discounts are copied by value at
    creation time. patient_id / price_table_id are references only (no FK), so later
    edits or deletes of live rows never reach an existing budget.
    """
    sequential_number = models.PositiveIntegerField()

    patient_id = models.BigIntegerField(null=True, blank=True, db_index=True)
    patient_name = models.CharField(max_length=255)
    patient_tax_id = models.CharField(max_length=32, blank=True)
    patient_birth_date = models.DateField(null=True, blank=True)
    patient_email = models.EmailField(blank=True)
    patient_phone = models.CharField(max_length=32, blank=True)

    price_table_id = models.BigIntegerField(null=True, blank=True)
    price_table_name = models.CharField(max_length=255, blank=True)

    # minor units
    total_list = models.PositiveIntegerField(default=0)
    total_discount = models.PositiveIntegerField(default=0)
    total_final = models.PositiveIntegerField(default=0)
    any_missing_price = models.BooleanField(default=False)

    valid_until = models.DateField()
    status = models.CharField(max_length=16, choices=BudgetStatus.choices, default=BudgetStatus.PENDING, db_index=True)
    notes = models.TextField(blank=True)

    created_by_user_id = models.BigIntegerField(null=True, blank=True)

    class Meta:
        db_table = "budgets_patient_budget"
        constraints = [
            models.UniqueConstraint(
                fields=["tenant_id", "sequential_number"],
                name="uq_budget_tenant_sequential_number",
            ),
            models.CheckConstraint(
                condition=~Q(status=BudgetStatus.ACCEPTED) | Q(any_missing_price=False),
                name="ck_budget_accepted_has_all_prices",
            ),
        ]
        indexes = [
            models.Index(fields=["tenant_id", "status"]),
            models.Index(fields=["tenant_id", "created_at"]),
        ]

    def __str__(self) -> str:
        return self.number

    @property
    def number(self) -> str:
        return format_budget_number(self.sequential_number)

    def is_expired(self, as_of: date) -> bool:
        return self.valid_until < as_of


class BudgetLine(TenantScopedModel):
    """
    One priced vaccine inside a budget. A copy, never a reference to live pricing rows.
    """
    budget = models.ForeignKey(PatientBudget, on_delete=models.CASCADE, related_name="lines")
    position = models.PositiveIntegerField()

    vaccine_id = models.BigIntegerField()
    vaccine_name = models.CharField(max_length=255)

    list_price = models.PositiveIntegerField(default=0)
    discount = models.PositiveIntegerField(default=0)
    final_price = models.PositiveIntegerField(default=0)
    missing_price = models.BooleanField(default=False)

    campaign_id = models.BigIntegerField(null=True, blank=True)
    campaign_name = models.CharField(max_length=255, blank=True)

    class Meta:
        db_table = "budgets_budget_line"
        ordering = ["position"]
        constraints = [
            models.UniqueConstraint(fields=["budget", "position"], name="uq_budget_line_position"),
        ]
