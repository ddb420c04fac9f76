from django.contrib import admin

from clinic_core.catalog.models import Vaccine


@admin.register(Vaccine)
class VaccineAdmin(admin.ModelAdmin):
    list_display = ("name", "manufacturer", "tenant_id", "is_active", "updated_at")
    list_filter = ("is_active", "tenant_id")
    search_fields = ("name", "manufacturer")
    ordering = ("name",)
