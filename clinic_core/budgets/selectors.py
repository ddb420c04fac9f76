# clinic_core/budgets/selectors.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from django.db.models import Count, Q, QuerySet
from django.utils import timezone

from clinic_core.budgets.models import BudgetStatus, PatientBudget
from clinic_core.common.api.exceptions import TenantIsolationError


@dataclass(frozen=True)
class BudgetStats:
    total: int
    pending: int
    accepted: int
    rejected: int
    expired: int
    acceptance_rate: float


def list_budgets(
    *,
    tenant_id: UUID,
    status: str | None = None,
    patient_id: int | None = None,
    search: str | None = None,
) -> QuerySet[PatientBudget]:
    qs = PatientBudget.objects.filter(tenant_id=tenant_id)

    if status:
        qs = qs.filter(status=status)
    if patient_id is not None:
        qs = qs.filter(patient_id=patient_id)
    if search:
        term = search.strip()
        qs = qs.filter(Q(patient_name__icontains=term) | Q(patient_tax_id__icontains=term))

    return qs.prefetch_related("lines").order_by("-sequential_number")


def get_budget(*, tenant_id: UUID, budget_id: int) -> PatientBudget:
    budget = PatientBudget.objects.filter(tenant_id=tenant_id, id=budget_id).prefetch_related("lines").first()
    if budget is None:
        raise TenantIsolationError({"budget": f"Budget {budget_id} not found for this tenant."})
    return budget


def get_budget_by_number(*, tenant_id: UUID, sequential_number: int) -> PatientBudget:
    budget = (
        PatientBudget.objects.filter(tenant_id=tenant_id, sequential_number=sequential_number)
        .prefetch_related("lines")
        .first()
    )
    if budget is None:
        raise TenantIsolationError({"budget": f"Budget number {sequential_number} not found for this tenant."})
    return budget


def budget_stats(*, tenant_id: UUID, as_of: date | None = None) -> BudgetStats:
    """
    Counts per status plus PENDING budgets already past valid_until.
    acceptance_rate is a percentage with one decimal.
    """
    as_of = as_of or timezone.localdate()

    agg = PatientBudget.objects.filter(tenant_id=tenant_id).aggregate(
        total=Count("id"),
        pending=Count("id", filter=Q(status=BudgetStatus.PENDING)),
        accepted=Count("id", filter=Q(status=BudgetStatus.ACCEPTED)),
        rejected=Count("id", filter=Q(status=BudgetStatus.REJECTED)),
        expired=Count("id", filter=Q(status=BudgetStatus.PENDING, valid_until__lt=as_of)),
    )

    total = agg["total"] or 0
    accepted = agg["accepted"] or 0

    rate = Decimal("0.0")
    if total:
        rate = (Decimal(accepted) * Decimal(100) / Decimal(total)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)

    return BudgetStats(
        total=total,
        pending=agg["pending"] or 0,
        accepted=accepted,
        rejected=agg["rejected"] or 0,
        expired=agg["expired"] or 0,
        acceptance_rate=float(rate),
    )
