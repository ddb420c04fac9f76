from django.contrib import admin

from clinic_core.pricing.models import PriceCampaign, PriceTable, VaccinePrice


class VaccinePriceInline(admin.TabularInline):
    model = VaccinePrice
    extra = 0
    fields = ("vaccine_id", "price", "start_date", "end_date", "is_active")


@admin.register(PriceTable)
class PriceTableAdmin(admin.ModelAdmin):
    list_display = ("name", "tenant_id", "is_default", "is_active", "updated_at")
    list_filter = ("is_default", "is_active", "tenant_id")
    search_fields = ("name",)
    ordering = ("tenant_id", "name")
    inlines = [VaccinePriceInline]


@admin.register(VaccinePrice)
class VaccinePriceAdmin(admin.ModelAdmin):
    list_display = ("price_table", "vaccine_id", "price", "start_date", "end_date", "is_active")
    list_filter = ("is_active", "price_table")
    ordering = ("price_table", "vaccine_id", "-start_date")


@admin.register(PriceCampaign)
class PriceCampaignAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "tenant_id",
        "discount_kind",
        "discount_value",
        "start_date",
        "end_date",
        "is_active",
    )
    list_filter = ("discount_kind", "is_active", "tenant_id")
    search_fields = ("name",)
    ordering = ("-start_date",)
