import bleach
from rest_framework import serializers

from residentes.models import User


class ProfileUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, max_length=150)
    surname = serializers.CharField(required=False, allow_blank=True, max_length=150)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    work_email = serializers.EmailField(required=False, allow_blank=True)
    city = serializers.CharField(required=False, allow_blank=True, max_length=120)
    user_type = serializers.ChoiceField(choices=[c[0] for c in User.USER_TYPE_CHOICES], required=False)
    hospital_id = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=64)
    speciality_id = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=64)
    resident_year = serializers.IntegerField(required=False, allow_null=True, min_value=1, max_value=5)

    def validate_name(self, v):
        return bleach.clean((v or '').strip(), tags=set(), strip=True)

    def validate_surname(self, v):
        return bleach.clean((v or '').strip(), tags=set(), strip=True)

    def to_service_kwargs(self) -> dict:
        names = {
            'name': 'first_name',
            'surname': 'last_name',
            'speciality_id': 'specialty_id',
            'resident_year': 'residency_year',
        }
        return {names.get(k, k): v for k, v in self.validated_data.items()}


class RotationSerializer(serializers.Serializer):
    latitude = serializers.FloatField(min_value=-90, max_value=90)
    longitude = serializers.FloatField(min_value=-180, max_value=180)
    start_date = serializers.DateField()
    end_date = serializers.DateField(required=False, allow_null=True)
    city = serializers.CharField(required=False, allow_blank=True, max_length=120)
    country = serializers.CharField(required=False, allow_blank=True, max_length=120)


class RotationQuerySerializer(serializers.Serializer):
    specialtyId = serializers.CharField(required=False, allow_blank=True)
    monthYear = serializers.RegexField(r'^\d{4}-\d{2}$', required=False, allow_blank=True)


class PhoneAndRotationSerializer(serializers.Serializer):
    phone = serializers.CharField(max_length=32)
    rotation = RotationSerializer()
