from django.contrib import admin

from clinic_core.patients.models import Patient


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ("full_name", "tax_id", "tenant_id", "birth_date", "created_at")
    list_filter = ("tenant_id",)
    search_fields = ("full_name", "tax_id", "email")
    ordering = ("full_name",)
