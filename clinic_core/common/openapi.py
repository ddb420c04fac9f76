# clinic_core/common/openapi.py
from __future__ import annotations

from drf_spectacular.openapi import AutoSchema
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter


class ClinicAutoSchema(AutoSchema):
    """
    Global OpenAPI improvements:

    - Adds the scope header (X-Tenant-Id) to scoped endpoints
    - Skips it for auth endpoints, admin-only tenant management and schema/docs
    """

    SCOPE_HEADER = OpenApiParameter(
        name="X-Tenant-Id",
        type=OpenApiTypes.UUID,
        location=OpenApiParameter.HEADER,
        required=True,
        description="Tenant scope UUID (required for scoped endpoints).",
    )

    UNSCOPED_MODULE_PREFIXES = (
        "rest_framework_simplejwt.",
        "drf_spectacular.",
        "clinic_core.tenants.api.",
    )

    def _is_unscoped_endpoint(self) -> bool:
        view = getattr(self, "view", None)
        if view is None:
            return False

        module = view.__class__.__module__ or ""
        return module.startswith(self.UNSCOPED_MODULE_PREFIXES)

    def get_override_parameters(self):
        params = list(super().get_override_parameters() or [])

        if not self._is_unscoped_endpoint():
            existing = {p.name.lower() for p in params}
            if self.SCOPE_HEADER.name.lower() not in existing:
                params.append(self.SCOPE_HEADER)

        return params
