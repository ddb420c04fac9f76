from django.contrib import admin

from clinic_core.tenants.models import Tenant


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "tax_id", "plan", "status", "created_at")
    list_filter = ("status", "plan")
    search_fields = ("name", "legal_name", "code", "tax_id")
    ordering = ("name",)
    readonly_fields = ("id", "created_at", "updated_at")
    fieldsets = (
        (None, {"fields": ("id", "code", "name", "status", "plan")}),
        ("Registration", {"fields": ("legal_name", "tax_id", "email", "phone")}),
        ("Timestamps", {"fields": ("created_at", "updated_at")}),
    )
