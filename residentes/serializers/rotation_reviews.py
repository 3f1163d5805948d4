from rest_framework import serializers

from .reviews import ReviewAnswerSerializer


class RotationReviewWriteSerializer(serializers.Serializer):
    rotationId = serializers.IntegerField(required=False)
    externalHospitalName = serializers.CharField(max_length=255, required=False, allow_blank=True)
    city = serializers.CharField(max_length=120, required=False, allow_blank=True, allow_null=True)
    country = serializers.CharField(max_length=120, required=False, allow_blank=True, allow_null=True)
    answers = ReviewAnswerSerializer(many=True)
    freeComment = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=5000)
    isAnonymous = serializers.BooleanField(required=False, default=False)


class RotationReviewQuerySerializer(serializers.Serializer):
    country = serializers.CharField(required=False, allow_blank=True, max_length=120)
    city = serializers.CharField(required=False, allow_blank=True, max_length=120)
