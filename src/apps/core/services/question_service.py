# src/apps/core/services/question_service.py
"""
Question Service

Business logic for exam questions and their answer options.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Any, List, Optional

from django.db import transaction

from shared.common.exceptions import ValidationException

from ..models import Question, Option, QuestionType
from .lookups import get_or_not_found

logger = logging.getLogger(__name__)


QUESTION_FIELDS = ('text', 'question_type', 'points', 'sort_order')
MAX_POINTS = Decimal('9999.99')


def _valid_points(points: Any) -> bool:
    if isinstance(points, bool):
        return False
    try:
        value = Decimal(str(points).strip())
    except (InvalidOperation, ValueError):
        return False
    if not value.is_finite():
        return False
    return Decimal('0') < value <= MAX_POINTS and value == value.quantize(Decimal('0.01'))


def question_errors(
    text: Optional[str],
    question_type: Optional[str],
    points: Any,
    options: Optional[List[Dict[str, Any]]]
) -> Dict[str, List[str]]:
    """
    Collect the authoring errors of a question definition.

    A multiple choice question needs at least two options, at least two of
    them with text, and at least one marked correct.
    """
    errors: Dict[str, List[str]] = {}

    if not text or not str(text).strip():
        errors['text'] = ['Question text is required.']

    if question_type not in QuestionType.values:
        errors['question_type'] = [
            f"Must be one of: {', '.join(QuestionType.values)}."
        ]

    if points is not None and not _valid_points(points):
        errors['points'] = ['Points must be a positive number with at most two decimals.']

    if question_type == QuestionType.MULTIPLE_CHOICE:
        options = options or []
        option_errors = []
        if len(options) < 2:
            option_errors.append('A multiple choice question needs at least two options.')
        if sum(1 for o in options if str(o.get('text') or '').strip()) < 2:
            option_errors.append('At least two options must have text.')
        if not any(o.get('is_correct') for o in options):
            option_errors.append('At least one option must be marked correct.')
        if option_errors:
            errors['options'] = option_errors

    return errors


def validate_question(
    text: Optional[str],
    question_type: Optional[str],
    points: Any = None,
    options: Optional[List[Dict[str, Any]]] = None
) -> None:
    """Raise ValidationException when the definition is not valid."""
    errors = question_errors(text, question_type, points, options)
    if errors:
        raise ValidationException(errors)


class QuestionService:
    """Service for managing exam questions."""

    @staticmethod
    def get_question(
        question_id: str,
        instructor_id: str,
        for_update: bool = False
    ) -> Question:
        """
        Get a question whose exam belongs to one of the instructor's courses.

        Raises:
            NotFoundException: Unknown id or foreign question
        """
        queryset = Question.objects.select_related('exam__course')
        if for_update:
            queryset = queryset.select_for_update(of=('self',))
        return get_or_not_found(
            queryset, 'Question',
            id=question_id,
            exam__course__instructor_id=instructor_id
        )

    @staticmethod
    @transaction.atomic
    def create_question(
        exam_id: str,
        instructor_id: str,
        text: str,
        question_type: str = QuestionType.MULTIPLE_CHOICE,
        points: Decimal = Decimal('1'),
        sort_order: int = None,
        options: List[Dict[str, Any]] = None
    ) -> Question:
        """
        Create a question with its options.

        Args:
            exam_id: Exam ID
            instructor_id: Instructor ID
            text: Question text
            question_type: multiple_choice or free_text
            points: Points awarded for a correct answer
            sort_order: Position; defaults to the end of the exam
            options: Options for multiple choice questions

        Returns:
            Created question
        """
        from .exam_service import ExamService

        exam = ExamService.get_exam(exam_id, instructor_id, for_update=True)
        validate_question(text, question_type, points, options)

        if sort_order is None:
            sort_order = exam.questions.count()

        question = Question.objects.create(
            exam=exam,
            text=text,
            question_type=question_type,
            points=points or 1,
            sort_order=sort_order,
        )
        if question_type == QuestionType.MULTIPLE_CHOICE:
            QuestionService._sync_options(question, options or [])

        logger.info(f"Created question: {question.id} in exam {exam.id}")

        return question

    @staticmethod
    @transaction.atomic
    def update_question(
        question_id: str,
        instructor_id: str,
        options: List[Dict[str, Any]] = None,
        **updates
    ) -> Question:
        """
        Partially update a question.

        Null fields are preserved. The merged definition is validated
        before anything is written. Switching to free text drops the options.
        """
        question = QuestionService.get_question(question_id, instructor_id, for_update=True)

        merged = {
            field: updates[field] if updates.get(field) is not None else getattr(question, field)
            for field in QUESTION_FIELDS
        }
        merged_options = options
        if merged_options is None:
            merged_options = list(question.options.values('id', 'text', 'is_correct', 'sort_order'))

        validate_question(
            merged['text'],
            merged['question_type'],
            merged['points'],
            merged_options
        )

        for field, value in merged.items():
            setattr(question, field, value)
        question.save()

        if question.question_type == QuestionType.FREE_TEXT:
            question.options.all().delete()
        elif options is not None:
            QuestionService._sync_options(question, options)

        logger.info(f"Updated question: {question.id}")

        return question

    @staticmethod
    @transaction.atomic
    def delete_question(question_id: str, instructor_id: str) -> None:
        question = QuestionService.get_question(question_id, instructor_id, for_update=True)
        question.delete()

        logger.info(f"Deleted question: {question_id}")

    @staticmethod
    @transaction.atomic
    def replace_options(
        question_id: str,
        instructor_id: str,
        options: List[Dict[str, Any]]
    ) -> List[Option]:
        """
        Replace the options of a multiple choice question.

        Options with a known id are updated in place, new ones created and
        the rest deleted, all in one transaction.

        Returns:
            Options after the change, in display order
        """
        question = QuestionService.get_question(question_id, instructor_id, for_update=True)

        if question.question_type != QuestionType.MULTIPLE_CHOICE:
            raise ValidationException(
                {'options': ['Only multiple choice questions have options.']}
            )
        validate_question(question.text, question.question_type, question.points, options)

        QuestionService._sync_options(question, options)

        logger.info(f"Replaced options of question: {question.id}")

        return list(question.options.order_by('sort_order', 'created_at'))

    @staticmethod
    def _sync_options(question: Question, options: List[Dict[str, Any]]) -> None:
        existing = {str(o.id): o for o in question.options.all()}
        kept = set()

        for position, data in enumerate(options):
            option_id = str(data['id']) if data.get('id') else None
            sort_order = data.get('sort_order')
            if sort_order is None:
                sort_order = position

            option = existing.get(option_id)
            if option is not None:
                option.text = data.get('text') or ''
                option.is_correct = bool(data.get('is_correct'))
                option.sort_order = sort_order
                option.save()
            else:
                option = Option.objects.create(
                    question=question,
                    text=data.get('text') or '',
                    is_correct=bool(data.get('is_correct')),
                    sort_order=sort_order,
                )
            kept.add(str(option.id))

        stale = [key for key in existing if key not in kept]
        if stale:
            question.options.filter(id__in=stale).delete()
