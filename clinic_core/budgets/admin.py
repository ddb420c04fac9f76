from django.contrib import admin

from clinic_core.budgets.models import BudgetLine, BudgetSequence, PatientBudget


class ReadOnlyAdminMixin:
    """Budgets are snapshots: viewable, never editable."""

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class BudgetLineInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = BudgetLine
    extra = 0
    fields = (
        "position",
        "vaccine_name",
        "list_price",
        "discount",
        "final_price",
        "missing_price",
        "campaign_name",
    )
    readonly_fields = fields


@admin.register(PatientBudget)
class PatientBudgetAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = (
        "sequential_number",
        "patient_name",
        "tenant_id",
        "status",
        "total_final",
        "valid_until",
        "created_at",
    )
    list_filter = ("status", "tenant_id")
    search_fields = ("patient_name", "patient_tax_id")
    ordering = ("-created_at",)
    inlines = [BudgetLineInline]


@admin.register(BudgetSequence)
class BudgetSequenceAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("tenant_id", "last_number", "updated_at")
