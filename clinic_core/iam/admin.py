from django.contrib import admin

from clinic_core.iam.models import TenantMembership


@admin.register(TenantMembership)
class TenantMembershipAdmin(admin.ModelAdmin):
    list_display = ("user_id", "tenant", "is_active", "created_at")
    list_filter = ("is_active", "tenant")
    search_fields = ("user_id", "tenant__code")
    ordering = ("-created_at",)
