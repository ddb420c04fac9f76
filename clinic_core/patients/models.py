# clinic_core/patients/models.py
from django.db import models

from clinic_core.common.models import TenantScopedModel


class Patient(TenantScopedModel):
    """
    Minimal patient record. Patient CRUD lives elsewhere; budgets only copy these
    identity fields into their snapshot.
    """
    full_name = models.CharField(max_length=255)
    tax_id = models.CharField(max_length=32, blank=True)  # CPF / national id
    birth_date = models.DateField(null=True, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=32, blank=True)

    class Meta:
        db_table = "patients_patient"
        indexes = [
            models.Index(fields=["tenant_id", "full_name"]),
            models.Index(fields=["tenant_id", "tax_id"]),
        ]

    def __str__(self) -> str:
        return self.full_name
