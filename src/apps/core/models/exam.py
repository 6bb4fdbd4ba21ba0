# src/apps/core/models/exam.py
"""
Exam Models

Quizzes attached to a course (and optionally to one of its modules),
their questions and answer options.
"""

from decimal import Decimal
from typing import Dict, Any

from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models

from shared.common.mixins import UUIDPrimaryKeyMixin, TimestampMixin

from .course import Course, CourseModule


class QuestionType(models.TextChoices):
    """Question type choices."""
    MULTIPLE_CHOICE = 'multiple_choice', 'Multiple Choice'
    FREE_TEXT = 'free_text', 'Free Text'


class Exam(UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Exam model.

    Scoring rules live in ``services.scoring_service``; this model only
    stores the definition.
    """

    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name='exams'
    )
    module = models.ForeignKey(
        CourseModule,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='exams'
    )

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')

    # Rules
    time_limit_minutes = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)]
    )
    allowed_attempts = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)]
    )
    pass_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('70.00'),
        validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = 'exams'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['course', 'created_at']),
            models.Index(fields=['module']),
        ]

    def __str__(self):
        return self.title

    @property
    def instructor_id(self):
        """Owner of the exam, inherited from the course."""
        return self.course.instructor_id

    @property
    def question_count(self) -> int:
        return self.questions.count()

    def get_summary(self) -> Dict[str, Any]:
        """Get exam summary."""
        return {
            'id': str(self.id),
            'course_id': str(self.course_id),
            'module_id': str(self.module_id) if self.module_id else None,
            'title': self.title,
            'time_limit_minutes': self.time_limit_minutes,
            'pass_percentage': float(self.pass_percentage),
            'is_active': self.is_active,
            'question_count': self.question_count,
        }


class Question(UUIDPrimaryKeyMixin, TimestampMixin):
    """Question of an exam."""

    exam = models.ForeignKey(
        Exam,
        on_delete=models.CASCADE,
        related_name='questions'
    )
    text = models.TextField()
    question_type = models.CharField(
        max_length=20,
        choices=QuestionType.choices,
        default=QuestionType.MULTIPLE_CHOICE
    )
    points = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        default=Decimal('1.00'),
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    sort_order = models.IntegerField(default=0)

    class Meta:
        db_table = 'questions'
        ordering = ['sort_order', 'created_at']
        indexes = [
            models.Index(fields=['exam', 'sort_order']),
        ]

    def __str__(self):
        return self.text[:50]

    @property
    def is_multiple_choice(self) -> bool:
        return self.question_type == QuestionType.MULTIPLE_CHOICE


class Option(UUIDPrimaryKeyMixin, TimestampMixin):
    """Answer option of a multiple choice question."""

    question = models.ForeignKey(
        Question,
        on_delete=models.CASCADE,
        related_name='options'
    )
    text = models.TextField(blank=True, default='')
    is_correct = models.BooleanField(default=False)
    sort_order = models.IntegerField(default=0)

    class Meta:
        db_table = 'question_options'
        ordering = ['sort_order', 'created_at']

    def __str__(self):
        return f"{self.text[:50]}{' (correct)' if self.is_correct else ''}"
