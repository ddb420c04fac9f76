# clinic_core/pricing/api/filters.py
from __future__ import annotations

import django_filters
from rest_framework.exceptions import ValidationError

from clinic_core.pricing.models import PriceCampaign, PriceTable, VaccinePrice


class PriceTableFilter(django_filters.FilterSet):
    is_active = django_filters.BooleanFilter()
    is_default = django_filters.BooleanFilter()

    class Meta:
        model = PriceTable
        fields = ["is_active", "is_default"]


class VaccinePriceFilter(django_filters.FilterSet):
    price_table = django_filters.NumberFilter(field_name="price_table_id")
    vaccine = django_filters.NumberFilter(field_name="vaccine_id")
    is_active = django_filters.BooleanFilter()
    effective_on = django_filters.DateFilter(method="filter_effective_on")

    class Meta:
        model = VaccinePrice
        fields = ["price_table", "vaccine", "is_active", "effective_on"]

    def filter_effective_on(self, queryset, name, value):
        return queryset.filter(start_date__lte=value).exclude(end_date__lt=value)


class PriceCampaignFilter(django_filters.FilterSet):
    is_active = django_filters.BooleanFilter()
    discount_kind = django_filters.CharFilter()

    class Meta:
        model = PriceCampaign
        fields = ["is_active", "discount_kind"]


def apply_filterset(filterset_class, request, queryset):
    """
    Runs a FilterSet against an already tenant-scoped queryset.
    Invalid filter values become a 400 in the standard envelope.
    """
    fs = filterset_class(request.query_params, queryset=queryset, request=request)
    if not fs.is_valid():
        errors = fs.errors.get_json_data()
        raise ValidationError({field: [e["message"] for e in errs] for field, errs in errors.items()})
    return fs.qs
