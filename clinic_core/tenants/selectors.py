# clinic_core/tenants/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import Q, QuerySet
from rest_framework.exceptions import NotFound

from clinic_core.tenants.models import Tenant


def list_tenants(*, status: str | None = None, search: str | None = None) -> QuerySet[Tenant]:
    qs = Tenant.objects.all()
    if status:
        qs = qs.filter(status=status)
    if search:
        term = search.strip()
        qs = qs.filter(Q(name__icontains=term) | Q(legal_name__icontains=term) | Q(tax_id__icontains=term))
    return qs.order_by("name", "code")


def get_tenant(*, tenant_id: UUID) -> Tenant:
    tenant = Tenant.objects.filter(id=tenant_id).first()
    if tenant is None:
        raise NotFound("Clinic not found.")
    return tenant
