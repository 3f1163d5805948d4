from rest_framework import serializers


class StudentQuestionQuerySerializer(serializers.Serializer):
    hospitalId = serializers.CharField(max_length=64)
    specialtyId = serializers.CharField(max_length=64)


class StudentQuestionCreateSerializer(serializers.Serializer):
    hospitalId = serializers.CharField(max_length=64)
    specialtyId = serializers.CharField(max_length=64)
    questionText = serializers.CharField(max_length=2000)


class StudentQuestionEditSerializer(serializers.Serializer):
    questionText = serializers.CharField(max_length=2000)


class StudentAnswerSerializer(serializers.Serializer):
    answerText = serializers.CharField(max_length=5000)
