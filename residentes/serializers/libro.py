import bleach
from rest_framework import serializers

from residentes.services.ordering import DOWN, UP


def _clean(v):
    return bleach.clean((v or '').strip(), tags=set(), strip=True)


class SectionQuerySerializer(serializers.Serializer):
    section = serializers.CharField(max_length=64)


class NodeCreateSerializer(serializers.Serializer):
    section = serializers.CharField(max_length=64)
    name = serializers.CharField(max_length=255)
    parentId = serializers.IntegerField(required=False, allow_null=True)
    goal = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)

    def validate_name(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('El nombre no puede estar vacío')
        return v


class NodeUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    # omitted keeps the goal, null clears it
    goal = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)

    def validate_name(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('El nombre no puede estar vacío')
        return v


class EntryCreateSerializer(serializers.Serializer):
    nodeId = serializers.IntegerField()
    section = serializers.CharField(max_length=64)
    count = serializers.IntegerField(required=False, default=1)
    residencyYear = serializers.IntegerField(required=False, allow_null=True, min_value=1, max_value=5)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_notes(self, v):
        return _clean(v) or None


class EventCreateSerializer(serializers.Serializer):
    nodeId = serializers.IntegerField()
    section = serializers.CharField(max_length=64)
    eventDate = serializers.DateField()
    title = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    location = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    residencyYear = serializers.IntegerField(required=False, allow_null=True, min_value=1, max_value=5)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):
        for key in ('title', 'description', 'location', 'notes'):
            if key in attrs:
                attrs[key] = _clean(attrs[key]) or None
        return attrs


class EventUpdateSerializer(serializers.Serializer):
    eventDate = serializers.DateField()
    title = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    location = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)

    def validate(self, attrs):
        for key in ('title', 'description', 'location'):
            if key in attrs:
                attrs[key] = _clean(attrs[key]) or None
        return attrs


class ReorderSerializer(serializers.Serializer):
    section = serializers.CharField(max_length=64)
    parentId = serializers.IntegerField(required=False, allow_null=True)
    orderedIds = serializers.ListField(child=serializers.IntegerField(), allow_empty=True)


class MoveSerializer(serializers.Serializer):
    direction = serializers.ChoiceField(choices=[UP, DOWN])
