import bleach
from rest_framework import serializers

from residentes.models import ShiftPurchaseRequest


def _clean_notes(v):
    return bleach.clean((v or '').strip(), tags=set(), strip=True) or None


class ShiftCreateSerializer(serializers.Serializer):
    year = serializers.IntegerField(min_value=2000, max_value=2100)
    month = serializers.IntegerField(min_value=1, max_value=12)
    day = serializers.IntegerField(min_value=1, max_value=31)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    price_eur = serializers.DecimalField(max_digits=8, decimal_places=2, required=False, allow_null=True,
                                         min_value=0)

    def validate_notes(self, v):
        return _clean_notes(v)


class ShiftUpdateSerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    price_eur = serializers.DecimalField(max_digits=8, decimal_places=2, required=False, allow_null=True,
                                         min_value=0)

    def validate_notes(self, v):
        return _clean_notes(v)


class TeamShiftsQuerySerializer(serializers.Serializer):
    hospitalId = serializers.CharField(required=False, allow_blank=True)
    specialtyId = serializers.CharField(required=False, allow_blank=True)
    month = serializers.IntegerField(min_value=1, max_value=12)
    year = serializers.IntegerField(min_value=2000, max_value=2100)
    specialties = serializers.CharField(required=False, allow_blank=True)

    def validate_specialties(self, v):
        return [s.strip() for s in (v or '').split(',') if s.strip()]


class SwapRequestCreateSerializer(serializers.Serializer):
    requesterShiftId = serializers.IntegerField()
    targetShiftId = serializers.IntegerField()


class SwapResponseSerializer(serializers.Serializer):
    accept = serializers.BooleanField()


class PurchaseRequestCreateSerializer(serializers.Serializer):
    shiftId = serializers.IntegerField()
    offeredPriceEur = serializers.DecimalField(max_digits=8, decimal_places=2, required=False, allow_null=True,
                                               min_value=0)


class PurchaseResponseSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[ShiftPurchaseRequest.STATUS_ACCEPTED,
                                              ShiftPurchaseRequest.STATUS_REJECTED])
