# clinic_core/common/permissions.py
from __future__ import annotations

from typing import Set

from rest_framework.permissions import SAFE_METHODS, BasePermission

# Group/role names (Django auth Group names)
ROLE_ADMIN = "ADMIN"
ROLE_MANAGER = "MANAGER"
ROLE_RECEPTION = "RECEPTION"
ROLE_NURSE = "NURSE"
ROLE_READONLY = "READONLY"

ALL_STAFF = {ROLE_ADMIN, ROLE_MANAGER, ROLE_RECEPTION, ROLE_NURSE, ROLE_READONLY}
FRONT_DESK = {ROLE_ADMIN, ROLE_MANAGER, ROLE_RECEPTION, ROLE_NURSE}
PRICING_EDITORS = {ROLE_ADMIN, ROLE_MANAGER}


def _user_roles(user) -> Set[str]:
    """
    Resolve roles from Django groups.

    - Superuser is treated as ADMIN.
    - Authenticated users without groups are READONLY.
    """
    roles: Set[str] = set()

    if not user or not getattr(user, "is_authenticated", False):
        return roles

    if getattr(user, "is_superuser", False):
        roles.add(ROLE_ADMIN)
        return roles

    if hasattr(user, "groups"):
        roles.update(user.groups.values_list("name", flat=True))

    if not roles:
        roles.add(ROLE_READONLY)

    return roles


class BaseRolePermission(BasePermission):
    """
    Base permission class for role-based access control.

    - ADMIN bypass.
    - Uses allowed_roles_per_action for strict RBAC.
    - If action is unknown and request is SAFE, fall back to list/retrieve.
    - Unknown unsafe action => deny.

    Tenant scope is resolved by the views (common.scope.require_scope), not here.
    """
    message = "You do not have permission to perform this action."

    allowed_roles_per_action = {
        "list": ALL_STAFF,
        "retrieve": ALL_STAFF,
        "create": {ROLE_ADMIN},
        "update": {ROLE_ADMIN},
        "partial_update": {ROLE_ADMIN},
        "destroy": {ROLE_ADMIN},
    }

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not getattr(user, "is_authenticated", False):
            return False

        roles = _user_roles(user)
        if ROLE_ADMIN in roles:
            return True

        action = getattr(view, "action", None)
        allowed = self.allowed_roles_per_action.get(action)

        if allowed is None and request.method in SAFE_METHODS:
            kwargs = getattr(view, "kwargs", {}) or {}
            read_action = "retrieve" if "pk" in kwargs else "list"
            allowed = self.allowed_roles_per_action.get(read_action)

        if allowed is not None:
            return bool(roles & allowed)

        return False


class CatalogPermission(BaseRolePermission):
    """Vaccine catalog is read-only through the API"""
    allowed_roles_per_action = {
        "list": ALL_STAFF,
        "retrieve": ALL_STAFF,
    }


class PricingPermission(BaseRolePermission):
    """Price tables, vaccine prices, campaigns and quoting"""
    allowed_roles_per_action = {
        "list": ALL_STAFF,
        "retrieve": ALL_STAFF,
        "create": PRICING_EDITORS,
        "update": PRICING_EDITORS,
        "partial_update": PRICING_EDITORS,
        "destroy": PRICING_EDITORS,
        "default": ALL_STAFF,
        "set_default": PRICING_EDITORS,
        "resolve": ALL_STAFF,
        "toggle_active": PRICING_EDITORS,
        # quoting is a read even though it is POSTed
        "quote": ALL_STAFF,
    }


class BudgetPermission(BaseRolePermission):
    """Patient budgets (quotations)"""
    allowed_roles_per_action = {
        "list": ALL_STAFF,
        "retrieve": ALL_STAFF,
        "by_number": ALL_STAFF,
        "stats": ALL_STAFF,
        "create": FRONT_DESK,
    }


class AuditPermission(BaseRolePermission):
    """Audit log access"""
    allowed_roles_per_action = {
        "list": {ROLE_ADMIN},
    }
