# clinic_core/common/scope.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from rest_framework.exceptions import PermissionDenied, ValidationError

HDR_TENANT = "X-Tenant-Id"

MISSING_SCOPE_MSG = "Missing scope header. Provide X-Tenant-Id."
INVALID_SCOPE_MSG = "Invalid scope header. Provide a valid UUID for X-Tenant-Id."
NO_ACCESS_MSG = "You do not have access to the selected tenant."


@dataclass(frozen=True)
class Scope:
    tenant_id: UUID


def _parse_uuid(value: str) -> Optional[UUID]:
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


def _get_header(request, name: str) -> Optional[str]:
    """
    request.headers is case-insensitive; fallback to META for pytest/client.
    """
    headers = getattr(request, "headers", None)
    if headers is not None:
        v = headers.get(name)
        if v:
            return v

    meta_key = "HTTP_" + name.upper().replace("-", "_")
    return request.META.get(meta_key)


def resolve_scope(request) -> Optional[Scope]:
    """
    Reads the tenant header.
    - No header: returns None.
    - Header present but not a UUID: raises 400 ValidationError.
    """
    tenant_raw = _get_header(request, HDR_TENANT)
    if not tenant_raw:
        return None

    tenant_id = _parse_uuid(tenant_raw)
    if tenant_id is None:
        raise ValidationError(INVALID_SCOPE_MSG)
    return Scope(tenant_id=tenant_id)


def require_scope(request) -> Scope:
    """
    Resolves the request scope and verifies the user is an active member of the tenant.

    - missing header -> 400 (MISSING_SCOPE_MSG)
    - invalid header -> 400 (INVALID_SCOPE_MSG)
    - not a member   -> 403
    On success attaches request.scope / request.tenant_id and returns Scope.
    """
    cached = getattr(request, "scope", None)
    if isinstance(cached, Scope):
        return cached

    scope = resolve_scope(request)
    if scope is None:
        raise ValidationError(MISSING_SCOPE_MSG)

    user = getattr(request, "user", None)
    if not user or not getattr(user, "is_authenticated", False):
        raise PermissionDenied("Authentication required to set scope.")

    from clinic_core.iam.services.membership import is_user_member_of_tenant

    if not is_user_member_of_tenant(user_id=user.id, tenant_id=scope.tenant_id):
        raise PermissionDenied(NO_ACCESS_MSG)

    request.scope = scope
    request.tenant_id = scope.tenant_id
    return scope
