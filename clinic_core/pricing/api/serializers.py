# clinic_core/pricing/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from clinic_core.pricing.models import DiscountKind, PriceCampaign, PriceTable, VaccinePrice


class PriceTableSerializer(serializers.ModelSerializer):
    class Meta:
        model = PriceTable
        fields = [
            "id",
            "tenant_id",
            "name",
            "description",
            "is_default",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PriceTableCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    is_default = serializers.BooleanField(required=False, default=False)
    is_active = serializers.BooleanField(required=False, default=True)


class PriceTableUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    is_default = serializers.BooleanField(required=False)
    is_active = serializers.BooleanField(required=False)


class VaccinePriceSerializer(serializers.ModelSerializer):
    price_table = serializers.IntegerField(source="price_table_id", read_only=True)
    vaccine = serializers.IntegerField(source="vaccine_id", read_only=True)

    class Meta:
        model = VaccinePrice
        fields = [
            "id",
            "tenant_id",
            "price_table",
            "vaccine",
            "price",
            "start_date",
            "end_date",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class VaccinePriceCreateSerializer(serializers.Serializer):
    """
    price is in minor currency units (cents).
    """
    price_table = serializers.IntegerField()
    vaccine = serializers.IntegerField()
    price = serializers.IntegerField(min_value=0)
    start_date = serializers.DateField()
    end_date = serializers.DateField(required=False, allow_null=True, default=None)
    is_active = serializers.BooleanField(required=False, default=True)

    def validate(self, attrs):
        end = attrs.get("end_date")
        if end is not None and end < attrs["start_date"]:
            raise serializers.ValidationError({"end_date": "end_date must be on or after start_date."})
        return attrs


class VaccinePriceUpdateSerializer(serializers.Serializer):
    price = serializers.IntegerField(min_value=0, required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False)


class PriceResolutionSerializer(serializers.Serializer):
    found = serializers.BooleanField()
    price = serializers.IntegerField()
    price_id = serializers.IntegerField(allow_null=True)


class PriceCampaignSerializer(serializers.ModelSerializer):
    class Meta:
        model = PriceCampaign
        fields = [
            "id",
            "tenant_id",
            "name",
            "description",
            "discount_kind",
            "discount_value",
            "vaccine_ids",
            "start_date",
            "end_date",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PriceCampaignCreateSerializer(serializers.Serializer):
    """
    discount_value: percent (0..100) for PERCENT, minor units for FIXED_AMOUNT.
    Empty vaccine_ids means every vaccine.
    """
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    discount_kind = serializers.ChoiceField(choices=DiscountKind.choices)
    discount_value = serializers.IntegerField(min_value=0)
    vaccine_ids = serializers.ListField(child=serializers.IntegerField(), required=False, default=list)
    start_date = serializers.DateField()
    end_date = serializers.DateField(required=False, allow_null=True, default=None)
    is_active = serializers.BooleanField(required=False, default=True)


class PriceCampaignUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    discount_kind = serializers.ChoiceField(choices=DiscountKind.choices, required=False)
    discount_value = serializers.IntegerField(min_value=0, required=False)
    vaccine_ids = serializers.ListField(child=serializers.IntegerField(), required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False)


class CampaignToggleSerializer(serializers.Serializer):
    # omitted -> flip the current flag
    is_active = serializers.BooleanField(required=False, allow_null=True, default=None)


class QuoteRequestSerializer(serializers.Serializer):
    price_table = serializers.IntegerField(required=False, allow_null=True, default=None)
    vaccines = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
    as_of = serializers.DateField(required=False, allow_null=True, default=None)


class QuoteLineSerializer(serializers.Serializer):
    vaccine_id = serializers.IntegerField()
    vaccine_name = serializers.CharField()
    list_price = serializers.IntegerField()
    discount = serializers.IntegerField()
    final_price = serializers.IntegerField()
    missing_price = serializers.BooleanField()
    price_id = serializers.IntegerField(allow_null=True)
    campaign_id = serializers.IntegerField(allow_null=True)
    campaign_name = serializers.CharField(allow_blank=True)


class QuoteSerializer(serializers.Serializer):
    price_table_id = serializers.IntegerField()
    price_table_name = serializers.CharField()
    as_of = serializers.DateField()
    lines = QuoteLineSerializer(many=True)
    total_list = serializers.IntegerField()
    total_discount = serializers.IntegerField()
    total_final = serializers.IntegerField()
    any_missing_price = serializers.BooleanField()
