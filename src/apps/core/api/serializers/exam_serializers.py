# src/apps/core/api/serializers/exam_serializers.py
"""
Exam Serializers

Serializers for exam authoring, delivery and grading endpoints.
"""

from decimal import Decimal

from rest_framework import serializers

from ...models import Exam
from .question_serializers import QuestionWriteSerializer


class ExamListSerializer(serializers.ModelSerializer):
    """Serializer for exam list view."""

    course_title = serializers.CharField(source='course.title', read_only=True)
    module_title = serializers.CharField(source='module.title', read_only=True, allow_null=True)
    question_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Exam
        fields = [
            'id',
            'course',
            'course_title',
            'module',
            'module_title',
            'title',
            'description',
            'time_limit_minutes',
            'allowed_attempts',
            'pass_percentage',
            'is_active',
            'question_count',
            'created_at',
        ]


class ExamCreateSerializer(serializers.Serializer):
    """Serializer for creating exams."""

    course_id = serializers.UUIDField()
    module_id = serializers.UUIDField(required=False, allow_null=True)
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    time_limit_minutes = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    allowed_attempts = serializers.IntegerField(min_value=1, required=False, default=1)
    pass_percentage = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=Decimal('0'),
        max_value=Decimal('100'),
        required=False,
        default=Decimal('70')
    )
    is_active = serializers.BooleanField(required=False, default=True)


class ExamUpdateSerializer(serializers.Serializer):
    """Partial exam update; absent or null fields keep their stored value."""

    module_id = serializers.UUIDField(required=False, allow_null=True)
    title = serializers.CharField(max_length=255, required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    time_limit_minutes = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    allowed_attempts = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    pass_percentage = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=Decimal('0'),
        max_value=Decimal('100'),
        required=False,
        allow_null=True
    )
    is_active = serializers.BooleanField(required=False, allow_null=True)


class QuestionSyncSerializer(serializers.Serializer):
    """Desired question list of an exam."""

    questions = QuestionWriteSerializer(many=True, allow_empty=True)


class GradeSubmissionSerializer(serializers.Serializer):
    """Answers keyed by question id."""

    answers = serializers.DictField(
        child=serializers.CharField(allow_null=True, allow_blank=True, trim_whitespace=False),
        allow_empty=True
    )


class ScoreSerializer(serializers.Serializer):
    points_total = serializers.FloatField()
    points_earned = serializers.FloatField()
    percentage = serializers.FloatField()
    passed = serializers.BooleanField()
