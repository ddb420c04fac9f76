# clinic_core/catalog/selectors.py
from __future__ import annotations

from typing import Dict, Iterable
from uuid import UUID

from django.db.models import QuerySet

from clinic_core.catalog.models import Vaccine
from clinic_core.common.api.exceptions import TenantIsolationError


def vaccines_for_tenant(*, tenant_id: UUID, is_active: bool | None = None, search: str | None = None) -> QuerySet[Vaccine]:
    qs = Vaccine.objects.filter(tenant_id=tenant_id)
    if is_active is not None:
        qs = qs.filter(is_active=is_active)
    if search:
        qs = qs.filter(name__icontains=search.strip())
    return qs.order_by("name", "id")


def get_vaccine(*, tenant_id: UUID, vaccine_id: int) -> Vaccine:
    vaccine = Vaccine.objects.filter(tenant_id=tenant_id, id=vaccine_id).first()
    if vaccine is None:
        raise TenantIsolationError({"vaccine": f"Vaccine {vaccine_id} not found for this tenant."})
    return vaccine


def vaccines_by_ids(*, tenant_id: UUID, vaccine_ids: Iterable[int]) -> Dict[int, Vaccine]:
    """
    Fetch every referenced vaccine for the tenant in one query.
    Any id that is unknown (or belongs to another tenant) fails the whole lookup.
    """
    wanted = {int(v) for v in vaccine_ids}
    if not wanted:
        return {}

    found = {v.id: v for v in Vaccine.objects.filter(tenant_id=tenant_id, id__in=wanted)}
    missing = sorted(wanted - set(found))
    if missing:
        raise TenantIsolationError({"vaccines": f"Vaccines not found for this tenant: {missing}"})
    return found
