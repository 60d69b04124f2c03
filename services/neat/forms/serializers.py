"""Serializers for the form queue."""
from __future__ import annotations

from typing import Any, Dict

from rest_framework import serializers

from .models import Form
from .schema import FormSchema, SchemaDefinitionError


class ReferenceSerializer(serializers.Serializer):
    TYPE_CHOICES = ["doc", "link", "video", "file"]

    label = serializers.CharField(max_length=255)
    url = serializers.CharField(max_length=2048)
    type = serializers.ChoiceField(choices=TYPE_CHOICES, required=False)


class FormSerializer(serializers.ModelSerializer):
    references = ReferenceSerializer(many=True, required=False)

    class Meta:
        model = Form
        fields = [
            "id",
            "external_card_id",
            "external_card_number",
            "external_board_id",
            "title",
            "summary",
            "references",
            "schema",
            "ui_schema",
            "on_submit_action",
            "target_column",
            "status",
            "response",
            "priority",
            "is_test",
            "context",
            "created_at",
            "updated_at",
            "completed_at",
        ]
        read_only_fields = ["status", "response", "completed_at"]

    def validate_schema(self, value: Any) -> Dict[str, Any]:
        try:
            FormSchema.from_dict(value)
        except SchemaDefinitionError as exc:
            raise serializers.ValidationError(str(exc))
        return value

    def create(self, validated_data):  # type: ignore[override]
        references = validated_data.pop("references", [])
        return Form.objects.create(
            references=[dict(reference) for reference in references],
            **validated_data,
        )

    def update(self, instance, validated_data):  # type: ignore[override]
        references = validated_data.pop("references", None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if references is not None:
            instance.references = [dict(reference) for reference in references]
        instance.save()
        return instance


class SubmitResponseSerializer(serializers.Serializer):
    response = serializers.JSONField(required=False, allow_null=True)


class QuickCommentSerializer(serializers.Serializer):
    comment = serializers.JSONField(required=False, allow_null=True)
