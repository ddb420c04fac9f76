# clinic_core/tenants/services.py
from __future__ import annotations

import logging
from typing import Any, Dict
from uuid import UUID

from django.db import transaction
from rest_framework.exceptions import NotFound, ValidationError

from clinic_core.tenants.models import Tenant, TenantPlan, TenantStatus

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("name", "legal_name", "tax_id", "email", "phone", "plan")


def _check_choice(value: str, choices, field_name: str) -> None:
    if value not in choices.values:
        raise ValidationError({field_name: f"Invalid {field_name}. Allowed: {list(choices.values)}"})


def _check_tax_id_free(tax_id: str, *, exclude_id: UUID | None = None) -> None:
    if not tax_id:
        return
    qs = Tenant.objects.filter(tax_id=tax_id)
    if exclude_id is not None:
        qs = qs.exclude(id=exclude_id)
    if qs.exists():
        raise ValidationError({"tax_id": "Another clinic is already registered with this tax id."})


class TenantService:
    """
    Clinic onboarding and lifecycle. Only platform staff reach these through the API.
    """

    @staticmethod
    @transaction.atomic
    def create(
        *,
        name: str,
        code: str,
        legal_name: str = "",
        tax_id: str = "",
        email: str = "",
        phone: str = "",
        plan: str = TenantPlan.BASIC,
        status: str = TenantStatus.ACTIVE,
    ) -> Tenant:
        name = (name or "").strip()
        code = (code or "").strip()
        tax_id = (tax_id or "").strip()

        if not name:
            raise ValidationError({"name": "This field is required."})
        if not code:
            raise ValidationError({"code": "This field is required."})
        _check_choice(status, TenantStatus, "status")
        _check_choice(plan, TenantPlan, "plan")
        if Tenant.objects.filter(code=code).exists():
            raise ValidationError({"code": "A clinic with this code already exists."})
        _check_tax_id_free(tax_id)

        tenant = Tenant.objects.create(
            name=name,
            code=code,
            legal_name=(legal_name or "").strip(),
            tax_id=tax_id,
            email=email or "",
            phone=phone or "",
            plan=plan,
            status=status,
        )
        logger.info("Clinic onboarded id=%s code=%s plan=%s", tenant.id, tenant.code, tenant.plan)
        return tenant

    @staticmethod
    @transaction.atomic
    def update_profile(*, tenant_id: UUID, changes: Dict[str, Any]) -> Tenant:
        tenant = Tenant.objects.select_for_update().filter(id=tenant_id).first()
        if tenant is None:
            raise NotFound("Clinic not found.")

        values = {k: v for k, v in changes.items() if k in PROFILE_FIELDS}
        if "name" in values and not (values["name"] or "").strip():
            raise ValidationError({"name": "This field may not be blank."})
        if "plan" in values:
            _check_choice(values["plan"], TenantPlan, "plan")
        if "tax_id" in values:
            values["tax_id"] = (values["tax_id"] or "").strip()
            _check_tax_id_free(values["tax_id"], exclude_id=tenant.id)

        changed = [k for k, v in values.items() if getattr(tenant, k) != v]
        for k in changed:
            setattr(tenant, k, values[k])
        if changed:
            tenant.save(update_fields=changed + ["updated_at"])
        return tenant

    @staticmethod
    @transaction.atomic
    def set_status(*, tenant_id: UUID, status: str) -> Tenant:
        _check_choice(status, TenantStatus, "status")

        tenant = Tenant.objects.select_for_update().filter(id=tenant_id).first()
        if tenant is None:
            raise NotFound("Clinic not found.")

        if tenant.status == status:
            return tenant

        previous = tenant.status
        tenant.status = status
        tenant.save(update_fields=["status", "updated_at"])
        # suspended/inactive clinics lose API access through the membership check
        logger.info("Clinic status changed id=%s %s -> %s", tenant.id, previous, status)
        return tenant
