# clinic_core/patients/selectors.py
from __future__ import annotations

from uuid import UUID

from clinic_core.common.api.exceptions import TenantIsolationError
from clinic_core.patients.models import Patient


def get_patient(*, tenant_id: UUID, patient_id: int) -> Patient:
    patient = Patient.objects.filter(tenant_id=tenant_id, id=patient_id).first()
    if patient is None:
        raise TenantIsolationError({"patient": f"Patient {patient_id} not found for this tenant."})
    return patient
