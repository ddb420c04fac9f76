# clinic_core/budgets/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, List, Mapping, Optional, Sequence
from uuid import UUID

from django.db import IntegrityError, transaction
from django.db.models import Max
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from clinic_core.audit import codes
from clinic_core.audit.services import AuditService
from clinic_core.budgets.constants import BUDGET_VALIDITY_DAYS, MAX_NUMBER_ALLOCATION_ATTEMPTS
from clinic_core.budgets.models import BudgetLine, BudgetSequence, BudgetStatus, PatientBudget
from clinic_core.catalog.selectors import vaccines_by_ids
from clinic_core.common.api.exceptions import ConflictError
from clinic_core.patients.models import Patient
from clinic_core.patients.selectors import get_patient
from clinic_core.pricing.engine import QuoteEngine
from clinic_core.pricing.selectors import get_price_table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatientSnapshot:
    full_name: str
    tax_id: str = ""
    birth_date: Optional[date] = None
    email: str = ""
    phone: str = ""

    @classmethod
    def from_patient(cls, patient: Patient) -> "PatientSnapshot":
        return cls(
            full_name=patient.full_name,
            tax_id=patient.tax_id or "",
            birth_date=patient.birth_date,
            email=patient.email or "",
            phone=patient.phone or "",
        )


@dataclass(frozen=True)
class BudgetLineInput:
    vaccine_id: int
    vaccine_name: str
    list_price: int
    discount: int
    final_price: int
    missing_price: bool = False
    campaign_id: Optional[int] = None
    campaign_name: str = ""


_LINE_FIELDS = (
    "vaccine_id",
    "vaccine_name",
    "list_price",
    "discount",
    "final_price",
    "missing_price",
    "campaign_id",
    "campaign_name",
)


def _coerce_line(item: Any) -> BudgetLineInput:
    """
    Accepts BudgetLineInput, a quote line, or a mapping with the same keys.
    """
    if isinstance(item, BudgetLineInput):
        return item
    if isinstance(item, Mapping):
        values = {k: item[k] for k in _LINE_FIELDS if k in item}
    else:
        values = {k: getattr(item, k) for k in _LINE_FIELDS if hasattr(item, k)}
    try:
        return BudgetLineInput(**values)
    except TypeError:
        raise ValidationError({"line_items": "Each line needs vaccine_id, vaccine_name, list_price, discount, final_price."})


class BudgetService:
    """
    Creates immutable budget snapshots. There is no update path.
    """

    @staticmethod
    def _validate_lines(line_items: Sequence[Any]) -> List[BudgetLineInput]:
        if not line_items:
            raise ValidationError({"line_items": "A budget needs at least one line."})

        lines = [_coerce_line(item) for item in line_items]
        errors = {}
        for idx, line in enumerate(lines):
            try:
                list_price = int(line.list_price)
                discount = int(line.discount)
                final_price = int(line.final_price)
            except (TypeError, ValueError):
                errors[str(idx)] = "Prices must be integers (minor units)."
                continue

            if not (line.vaccine_name or "").strip():
                errors[str(idx)] = "vaccine_name is required."
            elif list_price < 0:
                errors[str(idx)] = "list_price must be >= 0."
            elif discount < 0 or discount > list_price:
                errors[str(idx)] = "discount must be between 0 and list_price."
            elif final_price != list_price - discount:
                errors[str(idx)] = "final_price must equal list_price - discount."
            elif line.missing_price and list_price != 0:
                errors[str(idx)] = "A line without price must carry zero amounts."

        if errors:
            raise ValidationError({"line_items": errors})
        return lines

    @staticmethod
    def _allocate_number_locked(*, tenant_id: UUID) -> int:
        """
        Next per-tenant number. Must run inside a transaction: the counter row stays
        locked until commit so concurrent creators serialize per tenant.
        """
        seq = BudgetSequence.objects.select_for_update().filter(tenant_id=tenant_id).first()
        if seq is None:
            # first budget for this tenant (or counter missing): seed from existing rows
            current = PatientBudget.objects.filter(tenant_id=tenant_id).aggregate(m=Max("sequential_number"))["m"] or 0
            try:
                with transaction.atomic():
                    BudgetSequence.objects.create(tenant_id=tenant_id, last_number=current)
            except IntegrityError:
                logger.info("Budget sequence for tenant=%s created concurrently", tenant_id)
            seq = BudgetSequence.objects.select_for_update().get(tenant_id=tenant_id)

        seq.last_number += 1
        seq.save(update_fields=["last_number", "updated_at"])
        return seq.last_number

    @staticmethod
    def _number_taken(*, tenant_id: UUID, number: int) -> bool:
        # only a clash on uq_budget_tenant_sequential_number is worth a retry
        return PatientBudget.objects.filter(tenant_id=tenant_id, sequential_number=number).exists()

    @staticmethod
    @transaction.atomic
    def create(
        *,
        tenant_id: UUID,
        patient: PatientSnapshot,
        line_items: Sequence[Any],
        status: str = BudgetStatus.PENDING,
        price_table_id: int | None = None,
        patient_id: int | None = None,
        notes: str = "",
        actor_user_id: int | None = None,
    ) -> PatientBudget:
        # ---- validation (nothing persisted on failure) ----
        if status not in BudgetStatus.values:
            raise ValidationError({"status": f"Invalid status. Allowed: {list(BudgetStatus.values)}"})

        full_name = (patient.full_name or "").strip() if patient else ""
        if not full_name:
            raise ValidationError({"patient_name": "Patient name is required."})

        lines = BudgetService._validate_lines(line_items)

        any_missing = any(l.missing_price for l in lines)
        if status == BudgetStatus.ACCEPTED and any_missing:
            raise ValidationError({"status": "Cannot accept a budget with vaccines that have no price."})

        vaccines_by_ids(tenant_id=tenant_id, vaccine_ids=[l.vaccine_id for l in lines])

        price_table_name = ""
        if price_table_id is not None:
            price_table_name = get_price_table(tenant_id=tenant_id, price_table_id=price_table_id).name
        if patient_id is not None:
            get_patient(tenant_id=tenant_id, patient_id=patient_id)

        total_list = sum(int(l.list_price) for l in lines)
        total_discount = sum(int(l.discount) for l in lines)
        total_final = sum(int(l.final_price) for l in lines)
        valid_until = timezone.localdate() + timedelta(days=BUDGET_VALIDITY_DAYS)

        # ---- number allocation + persist (bounded retry) ----
        budget = None
        for attempt in range(1, MAX_NUMBER_ALLOCATION_ATTEMPTS + 1):
            # the counter advance survives a failed insert, so each retry gets a fresh number
            number = BudgetService._allocate_number_locked(tenant_id=tenant_id)
            try:
                with transaction.atomic():
                    budget = PatientBudget.objects.create(
                        tenant_id=tenant_id,
                        sequential_number=number,
                        patient_id=patient_id,
                        patient_name=full_name,
                        patient_tax_id=patient.tax_id or "",
                        patient_birth_date=patient.birth_date,
                        patient_email=patient.email or "",
                        patient_phone=patient.phone or "",
                        price_table_id=price_table_id,
                        price_table_name=price_table_name,
                        total_list=total_list,
                        total_discount=total_discount,
                        total_final=total_final,
                        any_missing_price=any_missing,
                        valid_until=valid_until,
                        status=status,
                        notes=notes or "",
                        created_by_user_id=actor_user_id,
                    )
                    BudgetLine.objects.bulk_create(
                        [
                            BudgetLine(
                                tenant_id=tenant_id,
                                budget=budget,
                                position=idx,
                                vaccine_id=l.vaccine_id,
                                vaccine_name=l.vaccine_name,
                                list_price=int(l.list_price),
                                discount=int(l.discount),
                                final_price=int(l.final_price),
                                missing_price=bool(l.missing_price),
                                campaign_id=l.campaign_id,
                                campaign_name=l.campaign_name or "",
                            )
                            for idx, l in enumerate(lines, start=1)
                        ]
                    )
                break
            except IntegrityError:
                budget = None
                if not BudgetService._number_taken(tenant_id=tenant_id, number=number):
                    raise
                logger.warning(
                    "Budget number collision tenant=%s number=%s attempt=%s/%s, retrying",
                    tenant_id,
                    number,
                    attempt,
                    MAX_NUMBER_ALLOCATION_ATTEMPTS,
                )

        if budget is None:
            logger.error("Budget number allocation exhausted tenant=%s", tenant_id)
            raise ConflictError("Could not allocate a budget number. Please retry.")

        logger.info(
            "Budget created tenant=%s number=%s status=%s total_final=%s",
            tenant_id,
            budget.number,
            budget.status,
            budget.total_final,
        )
        AuditService.log(
            event_code=codes.BUDGET_CREATED,
            entity_type="PatientBudget",
            entity_id=budget.id,
            tenant_id=tenant_id,
            actor_user_id=actor_user_id,
            metadata={
                "sequential_number": budget.sequential_number,
                "status": budget.status,
                "total_final": budget.total_final,
                "any_missing_price": budget.any_missing_price,
            },
        )
        return budget

    @staticmethod
    def create_from_selection(
        *,
        tenant_id: UUID,
        vaccine_ids: Sequence[int],
        status: str = BudgetStatus.PENDING,
        patient: PatientSnapshot | None = None,
        patient_id: int | None = None,
        price_table_id: int | None = None,
        notes: str = "",
        as_of: date | None = None,
        actor_user_id: int | None = None,
    ) -> PatientBudget:
        """
        Re-runs the quote for the submitted selection and snapshots it.
        Inline patient fields win; otherwise they are copied from the tenant Patient.
        """
        if patient is None:
            if patient_id is None:
                raise ValidationError({"patient": "Provide patient fields or a patient id."})
            patient = PatientSnapshot.from_patient(get_patient(tenant_id=tenant_id, patient_id=patient_id))

        quote = QuoteEngine.quote(
            tenant_id=tenant_id,
            price_table_id=price_table_id,
            vaccine_ids=vaccine_ids,
            as_of=as_of,
        )

        return BudgetService.create(
            tenant_id=tenant_id,
            patient=patient,
            line_items=quote.lines,
            status=status,
            price_table_id=quote.price_table_id,
            patient_id=patient_id,
            notes=notes,
            actor_user_id=actor_user_id,
        )
