from rest_framework import serializers


class CommunityQuerySerializer(serializers.Serializer):
    city = serializers.CharField(required=False, allow_blank=True, max_length=120)
    specialtyId = serializers.CharField(required=False, allow_blank=True, max_length=64)
