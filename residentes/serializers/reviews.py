from rest_framework import serializers


class ReviewAnswerSerializer(serializers.Serializer):
    question_id = serializers.IntegerField()
    rating_value = serializers.IntegerField(required=False, allow_null=True, min_value=1, max_value=5)
    text_value = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=5000)


class ReviewWriteSerializer(serializers.Serializer):
    hospitalId = serializers.CharField(max_length=64, required=False)
    specialtyId = serializers.CharField(max_length=64, required=False)
    answers = ReviewAnswerSerializer(many=True)
    freeComment = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=5000)
    isAnonymous = serializers.BooleanField(required=False, default=False)


class ReviewQuerySerializer(serializers.Serializer):
    hospitalId = serializers.CharField(required=False, allow_blank=True)
    specialtyId = serializers.CharField(required=False, allow_blank=True)
    search = serializers.CharField(required=False, allow_blank=True, max_length=120)
