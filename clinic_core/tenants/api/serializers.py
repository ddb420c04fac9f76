from __future__ import annotations

from rest_framework import serializers

from clinic_core.tenants.models import Tenant, TenantPlan, TenantStatus


class TenantSerializer(serializers.ModelSerializer):
    class Meta:
        model = Tenant
        fields = [
            "id",
            "code",
            "name",
            "legal_name",
            "tax_id",
            "email",
            "phone",
            "plan",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class TenantCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    code = serializers.SlugField(max_length=64)
    legal_name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    tax_id = serializers.CharField(max_length=18, required=False, allow_blank=True, default="")
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    plan = serializers.ChoiceField(choices=TenantPlan.choices, required=False, default=TenantPlan.BASIC)
    status = serializers.ChoiceField(choices=TenantStatus.choices, required=False, default=TenantStatus.ACTIVE)


class TenantProfileUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    legal_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    tax_id = serializers.CharField(max_length=18, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    plan = serializers.ChoiceField(choices=TenantPlan.choices, required=False)


class TenantStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=TenantStatus.choices)
