from rest_framework import serializers

class MirSimulatorSerializer(serializers.Serializer):
    userRank = serializers.IntegerField(min_value=1)
    specialtyId = serializers.CharField(max_length=64)
    region = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=120)
