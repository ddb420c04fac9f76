from django.contrib import admin

from clinic_core.audit.models import AuditEvent


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    """Audit trail is append-only; the admin can browse but never edit."""

    list_display = ("occurred_at", "event_code", "entity_type", "entity_id", "actor_user_id", "tenant_id")
    list_filter = ("event_code", "entity_type")
    search_fields = ("entity_id", "tenant_id")
    date_hierarchy = "occurred_at"
    ordering = ("-occurred_at", "-id")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
