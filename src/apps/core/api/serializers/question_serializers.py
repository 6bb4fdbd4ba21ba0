# src/apps/core/api/serializers/question_serializers.py
"""
Question Serializers

Serializers for exam questions and answer options.
"""

from decimal import Decimal

from rest_framework import serializers

from ...models import Question, Option, QuestionType


class OptionSerializer(serializers.ModelSerializer):

    class Meta:
        model = Option
        fields = ['id', 'text', 'is_correct', 'sort_order']


class OptionWriteSerializer(serializers.Serializer):
    """Option as submitted by the editor; ``id`` marks an existing option."""

    id = serializers.UUIDField(required=False, allow_null=True)
    text = serializers.CharField(allow_blank=True, default='')
    is_correct = serializers.BooleanField(default=False)
    sort_order = serializers.IntegerField(required=False, allow_null=True)


class QuestionSerializer(serializers.ModelSerializer):
    """Serializer for question read views."""

    options = OptionSerializer(many=True, read_only=True)
    points = serializers.DecimalField(max_digits=6, decimal_places=2, coerce_to_string=False, read_only=True)

    class Meta:
        model = Question
        fields = [
            'id',
            'exam',
            'text',
            'question_type',
            'points',
            'sort_order',
            'options',
            'created_at',
            'updated_at',
        ]


class QuestionWriteSerializer(serializers.Serializer):
    """
    Question definition.

    Only the shape is checked here; authoring rules (option counts, a
    correct option) are enforced by the service so that every entry point
    shares them.
    """

    id = serializers.UUIDField(required=False, allow_null=True)
    text = serializers.CharField(allow_blank=True, trim_whitespace=False)
    question_type = serializers.ChoiceField(
        choices=QuestionType.choices,
        default=QuestionType.MULTIPLE_CHOICE
    )
    points = serializers.DecimalField(
        max_digits=6, decimal_places=2, coerce_to_string=False,
        required=False, default=Decimal('1')
    )
    sort_order = serializers.IntegerField(required=False, allow_null=True)
    options = OptionWriteSerializer(many=True, required=False, default=list)


class QuestionUpdateSerializer(serializers.Serializer):
    """Partial question update; null keeps the stored value."""

    text = serializers.CharField(required=False, allow_null=True, allow_blank=True, trim_whitespace=False)
    question_type = serializers.ChoiceField(
        choices=QuestionType.choices,
        required=False,
        allow_null=True
    )
    points = serializers.DecimalField(
        max_digits=6, decimal_places=2, coerce_to_string=False,
        required=False, allow_null=True
    )
    sort_order = serializers.IntegerField(required=False, allow_null=True)
    options = OptionWriteSerializer(many=True, required=False, allow_null=True)


class OptionReplaceSerializer(serializers.Serializer):
    options = OptionWriteSerializer(many=True, allow_empty=True)
