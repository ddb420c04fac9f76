# clinic_core/budgets/api/serializers.py
from __future__ import annotations

from django.utils import timezone
from rest_framework import serializers

from clinic_core.budgets.models import BudgetLine, BudgetStatus, PatientBudget


class BudgetLineSerializer(serializers.ModelSerializer):
    class Meta:
        model = BudgetLine
        fields = [
            "position",
            "vaccine_id",
            "vaccine_name",
            "list_price",
            "discount",
            "final_price",
            "missing_price",
            "campaign_id",
            "campaign_name",
        ]
        read_only_fields = fields


class PatientBudgetSerializer(serializers.ModelSerializer):
    number = serializers.CharField(read_only=True)
    is_expired = serializers.SerializerMethodField()
    lines = BudgetLineSerializer(many=True, read_only=True)

    class Meta:
        model = PatientBudget
        fields = [
            "id",
            "tenant_id",
            "sequential_number",
            "number",
            "patient_id",
            "patient_name",
            "patient_tax_id",
            "patient_birth_date",
            "patient_email",
            "patient_phone",
            "price_table_id",
            "price_table_name",
            "total_list",
            "total_discount",
            "total_final",
            "any_missing_price",
            "valid_until",
            "is_expired",
            "status",
            "notes",
            "created_by_user_id",
            "created_at",
            "lines",
        ]
        read_only_fields = fields

    def get_is_expired(self, obj: PatientBudget) -> bool:
        return obj.is_expired(timezone.localdate())


class PatientSnapshotSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=255)
    tax_id = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    birth_date = serializers.DateField(required=False, allow_null=True, default=None)
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")


class BudgetCreateSerializer(serializers.Serializer):
    """
    The selection is re-quoted server side; clients never send prices.
    Either inline patient fields or a patient id is required.
    """
    patient = PatientSnapshotSerializer(required=False)
    patient_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    price_table = serializers.IntegerField(required=False, allow_null=True, default=None)
    vaccines = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
    status = serializers.ChoiceField(choices=BudgetStatus.choices, required=False, default=BudgetStatus.PENDING)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    as_of = serializers.DateField(required=False, allow_null=True, default=None)

    def validate(self, attrs):
        if not attrs.get("patient") and attrs.get("patient_id") is None:
            raise serializers.ValidationError({"patient": "Provide patient fields or patient_id."})
        return attrs


class BudgetStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    pending = serializers.IntegerField()
    accepted = serializers.IntegerField()
    rejected = serializers.IntegerField()
    expired = serializers.IntegerField()
    acceptance_rate = serializers.FloatField()
