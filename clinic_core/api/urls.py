# clinic_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from clinic_core.audit.api.views import AuditEventViewSet
from clinic_core.budgets.api.views import BudgetViewSet
from clinic_core.catalog.api.views import VaccineViewSet
from clinic_core.pricing.api.views import (
    PriceCampaignViewSet,
    PriceTableViewSet,
    QuoteView,
    VaccinePriceViewSet,
)
from clinic_core.tenants.api.views import TenantViewSet

router = DefaultRouter()

router.register(r"tenants", TenantViewSet, basename="tenants")
router.register(r"catalog/vaccines", VaccineViewSet, basename="catalog-vaccines")
router.register(r"pricing/tables", PriceTableViewSet, basename="pricing-tables")
router.register(r"pricing/prices", VaccinePriceViewSet, basename="pricing-prices")
router.register(r"pricing/campaigns", PriceCampaignViewSet, basename="pricing-campaigns")
router.register(r"budgets", BudgetViewSet, basename="budgets")
router.register(r"audit/events", AuditEventViewSet, basename="audit-events")

urlpatterns = [
    # Auth (bearer JWT)
    path("auth/token/", TokenObtainPairView.as_view(), name="token-obtain"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),

    # Non-ViewSet endpoint
    path("pricing/quote/", QuoteView.as_view(), name="pricing-quote"),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
