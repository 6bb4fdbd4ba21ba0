# src/apps/core/services/exam_service.py
"""
Exam Service

Business logic for exam authoring, exam payload assembly and server-side
grading of submitted answers.
"""

import logging
from typing import Dict, Any, List

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, Prefetch, Q, QuerySet

from shared.common.exceptions import ValidationException
from shared.common.validators import validate_percentage

from ..models import Course, CourseModule, Exam, Option, Question, QuestionType
from .lookups import get_or_not_found
from .question_service import QuestionService, question_errors
from .scoring_service import ExamPaper, Score, score_exam

logger = logging.getLogger(__name__)


EXAM_FIELDS = (
    'title', 'description', 'time_limit_minutes', 'allowed_attempts',
    'pass_percentage', 'is_active',
)


class ExamService:
    """Service for managing exams."""

    # =========================================================================
    # EXAM MANAGEMENT
    # =========================================================================

    @staticmethod
    def list_exams(instructor_id: str, course_id: str = None) -> QuerySet:
        """
        Get the instructor's exams, newest first.

        Args:
            instructor_id: Instructor ID
            course_id: Restrict to one course

        Returns:
            Exams annotated with question_count
        """
        queryset = Exam.objects.filter(course__instructor_id=instructor_id)

        if course_id:
            course = get_or_not_found(
                Course.objects, 'Course',
                id=course_id,
                instructor_id=instructor_id
            )
            queryset = queryset.filter(course=course)

        return (
            queryset
            .select_related('course', 'module')
            .annotate(question_count=Count('questions'))
            .order_by('-created_at')
        )

    @staticmethod
    def get_exam(
        exam_id: str,
        instructor_id: str,
        for_update: bool = False
    ) -> Exam:
        """
        Get an exam whose course belongs to the instructor.

        Raises:
            NotFoundException: Unknown id or foreign exam
        """
        queryset = Exam.objects.select_related('course', 'module')
        if for_update:
            queryset = queryset.select_for_update(of=('self',))
        return get_or_not_found(
            queryset, 'Exam',
            id=exam_id,
            course__instructor_id=instructor_id
        )

    @staticmethod
    @transaction.atomic
    def create_exam(
        instructor_id: str,
        course_id: str,
        title: str,
        module_id: str = None,
        **kwargs
    ) -> Exam:
        """
        Create an exam on one of the instructor's courses.

        Args:
            instructor_id: Instructor ID
            course_id: Course the exam belongs to
            title: Exam title
            module_id: Optional module of the same course
            **kwargs: Rules (time_limit_minutes, allowed_attempts,
                pass_percentage, is_active) and description

        Returns:
            Created exam
        """
        course = get_or_not_found(
            Course.objects, 'Course',
            id=course_id,
            instructor_id=instructor_id
        )
        module = ExamService._get_course_module(course, module_id)

        fields = {k: v for k, v in kwargs.items() if k in EXAM_FIELDS and v is not None}
        ExamService._check_rules(fields)
        exam = Exam.objects.create(
            course=course,
            module=module,
            title=title,
            **fields
        )

        logger.info(f"Created exam: {exam.id} - {exam.title}")

        return exam

    @staticmethod
    @transaction.atomic
    def update_exam(
        exam_id: str,
        instructor_id: str,
        **updates
    ) -> Exam:
        """
        Partially update an exam.

        Absent or null values keep what is stored, so an optional field
        cannot be cleared through this call.
        """
        exam = ExamService.get_exam(exam_id, instructor_id, for_update=True)

        if updates.get('module_id') is not None:
            exam.module = ExamService._get_course_module(exam.course, updates['module_id'])

        ExamService._check_rules(updates)

        for field, value in updates.items():
            if field in EXAM_FIELDS and value is not None:
                setattr(exam, field, value)

        exam.save()

        logger.info(f"Updated exam: {exam.id}")

        return exam

    @staticmethod
    @transaction.atomic
    def delete_exam(exam_id: str, instructor_id: str) -> None:
        """Delete an exam with its questions and options."""
        exam = ExamService.get_exam(exam_id, instructor_id, for_update=True)
        exam.delete()

        logger.info(f"Deleted exam: {exam_id}")

    @staticmethod
    def _check_rules(fields: Dict[str, Any]) -> None:
        if fields.get('pass_percentage') is None:
            return
        try:
            fields['pass_percentage'] = validate_percentage(
                fields['pass_percentage'], 'pass_percentage'
            )
        except ValidationError as e:
            raise ValidationException({'pass_percentage': e.messages})

    @staticmethod
    def _get_course_module(course: Course, module_id: str = None):
        if module_id is None:
            return None
        return get_or_not_found(
            CourseModule.objects, 'Module',
            id=module_id,
            course=course
        )

    # =========================================================================
    # PAYLOAD ASSEMBLY
    # =========================================================================

    @staticmethod
    def _payload_queryset() -> QuerySet:
        return Exam.objects.prefetch_related(
            Prefetch(
                'questions',
                queryset=Question.objects.order_by('sort_order', 'created_at').prefetch_related(
                    Prefetch('options', queryset=Option.objects.order_by('sort_order', 'created_at'))
                )
            )
        )

    @staticmethod
    def build_payload(exam: Exam) -> Dict[str, Any]:
        """Serialize an exam with ordered questions and options."""
        questions = []
        for question in exam.questions.all():
            options = []
            if question.question_type == QuestionType.MULTIPLE_CHOICE:
                options = [
                    {
                        'id': str(option.id),
                        'text': option.text,
                        'is_correct': option.is_correct,
                        'order': option.sort_order,
                    }
                    for option in question.options.all()
                ]
            questions.append({
                'id': str(question.id),
                'text': question.text,
                'type': question.question_type,
                'points': float(question.points),
                'order': question.sort_order,
                'options': options,
            })

        return {
            'id': str(exam.id),
            'course_id': str(exam.course_id),
            'module_id': str(exam.module_id) if exam.module_id else None,
            'title': exam.title,
            'description': exam.description,
            'time_limit_minutes': exam.time_limit_minutes,
            'allowed_attempts': exam.allowed_attempts,
            'pass_percentage': float(exam.pass_percentage),
            'is_active': exam.is_active,
            'questions': questions,
        }

    @staticmethod
    def get_exam_payload(exam_id: str, instructor_id: str) -> Dict[str, Any]:
        """Authoring view of an exam; only its owner may read it."""
        exam = get_or_not_found(
            ExamService._payload_queryset(), 'Exam',
            id=exam_id,
            course__instructor_id=instructor_id
        )
        return ExamService.build_payload(exam)

    @staticmethod
    def get_delivery_payload(exam_id: str, user_id: str) -> Dict[str, Any]:
        """
        Test-taker view of an exam.

        Visible to the owner and, while the exam is active, to any
        authenticated user.
        """
        exam = get_or_not_found(
            ExamService._payload_queryset(), 'Exam',
            Q(is_active=True) | Q(course__instructor_id=user_id),
            id=exam_id
        )
        return ExamService.build_payload(exam)

    # =========================================================================
    # QUESTION SYNC
    # =========================================================================

    @staticmethod
    @transaction.atomic
    def sync_questions(
        exam_id: str,
        instructor_id: str,
        questions: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        """
        Bring the questions of an exam in line with the submitted list.

        Every entry is validated before any row is touched. Entries with a
        known id are updated, entries without one are created and stored
        questions missing from the list are deleted.

        Args:
            exam_id: Exam ID
            instructor_id: Instructor ID
            questions: Desired questions with their options

        Returns:
            Exam payload after the sync
        """
        exam = ExamService.get_exam(exam_id, instructor_id, for_update=True)

        errors = {}
        for position, data in enumerate(questions):
            item_errors = question_errors(
                data.get('text'),
                data.get('question_type'),
                data.get('points'),
                data.get('options'),
            )
            if item_errors:
                errors[str(position)] = item_errors
        if errors:
            raise ValidationException({'questions': errors})

        existing = {str(q.id): q for q in exam.questions.all()}
        kept = set()
        created = updated = 0

        for position, data in enumerate(questions):
            question_id = str(data['id']) if data.get('id') else None
            sort_order = data.get('sort_order')
            if sort_order is None:
                sort_order = position

            question = existing.get(question_id)
            if question is not None:
                question.text = data['text']
                question.question_type = data['question_type']
                question.points = data.get('points') or 1
                question.sort_order = sort_order
                question.save()
                updated += 1
            else:
                question = Question.objects.create(
                    exam=exam,
                    text=data['text'],
                    question_type=data['question_type'],
                    points=data.get('points') or 1,
                    sort_order=sort_order,
                )
                created += 1
            kept.add(str(question.id))

            if question.question_type == QuestionType.MULTIPLE_CHOICE:
                QuestionService._sync_options(question, data.get('options') or [])
            else:
                question.options.all().delete()

        stale = [key for key in existing if key not in kept]
        if stale:
            exam.questions.filter(id__in=stale).delete()

        logger.info(
            f"Synced questions for exam {exam.id}: "
            f"{created} created, {updated} updated, {len(stale)} deleted"
        )

        return ExamService.get_exam_payload(exam.id, instructor_id)

    # =========================================================================
    # GRADING
    # =========================================================================

    @staticmethod
    def grade_submission(
        exam_id: str,
        user_id: str,
        answers: Dict[str, Any]
    ) -> Score:
        """
        Score submitted answers without storing anything.

        Args:
            exam_id: Exam ID
            user_id: Test-taker ID
            answers: Mapping of question id to answer

        Returns:
            Score
        """
        paper = ExamPaper.from_payload(ExamService.get_delivery_payload(exam_id, user_id))
        score = score_exam(paper, answers)

        logger.info(
            f"Graded submission for exam {exam_id} by {user_id}: "
            f"{score.points_earned}/{score.points_total} passed={score.passed}"
        )

        return score
