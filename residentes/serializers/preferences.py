from rest_framework import serializers

class PreferenceCreateSerializer(serializers.Serializer):
    hospitalId = serializers.CharField(max_length=64)
    specialtyId = serializers.CharField(max_length=64)


class PreferenceReorderSerializer(serializers.Serializer):
    orderedIds = serializers.ListField(child=serializers.IntegerField(), allow_empty=True)
