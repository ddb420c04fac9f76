from rest_framework import serializers

from clinic_core.catalog.models import Vaccine


class VaccineSerializer(serializers.ModelSerializer):
    class Meta:
        model = Vaccine
        fields = ["id", "tenant_id", "name", "manufacturer", "is_active", "created_at", "updated_at"]
        read_only_fields = fields
