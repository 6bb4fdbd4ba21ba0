# src/apps/core/api/views/exam_views.py
"""
Exam Views

ViewSets for exam authoring, exam delivery and grading.
"""

from drf_spectacular.utils import extend_schema, OpenApiParameter
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from shared.common.permissions import IsInstructor

from ...services import ExamService, QuestionService
from ..serializers import (
    ExamCreateSerializer,
    ExamListSerializer,
    ExamUpdateSerializer,
    GradeSubmissionSerializer,
    QuestionSerializer,
    QuestionSyncSerializer,
    QuestionWriteSerializer,
    ScoreSerializer,
)


class ExamViewSet(viewsets.ModelViewSet):
    """
    ViewSet for managing exams.

    Detail responses carry the full exam payload (questions and options in
    display order).
    """

    permission_classes = [IsAuthenticated, IsInstructor]

    def get_queryset(self):
        """Get the instructor's exams, optionally for one course."""
        return ExamService.list_exams(
            instructor_id=self.request.user.id,
            course_id=self.request.query_params.get('course_id'),
        )

    def get_serializer_class(self):
        """Return appropriate serializer class."""
        if self.action == 'create':
            return ExamCreateSerializer
        elif self.action in ['update', 'partial_update']:
            return ExamUpdateSerializer
        elif self.action == 'add_question':
            return QuestionWriteSerializer
        elif self.action == 'sync_questions':
            return QuestionSyncSerializer
        return ExamListSerializer

    @extend_schema(parameters=[OpenApiParameter('course_id', str, description='Restrict to one course')])
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    def retrieve(self, request, *args, **kwargs):
        return Response(ExamService.get_exam_payload(kwargs['pk'], request.user.id))

    def create(self, request, *args, **kwargs):
        """Create a new exam."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        exam = ExamService.create_exam(
            instructor_id=request.user.id,
            **serializer.validated_data
        )

        return Response(
            ExamService.get_exam_payload(exam.id, request.user.id),
            status=status.HTTP_201_CREATED
        )

    def update(self, request, *args, **kwargs):
        """Update an exam; omitted or null fields are left as they are."""
        serializer = self.get_serializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        exam = ExamService.update_exam(
            exam_id=kwargs['pk'],
            instructor_id=request.user.id,
            **serializer.validated_data
        )

        return Response(ExamService.get_exam_payload(exam.id, request.user.id))

    def destroy(self, request, *args, **kwargs):
        ExamService.delete_exam(kwargs['pk'], request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses=QuestionSerializer)
    @action(detail=True, methods=['post'], url_path='questions')
    def add_question(self, request, pk=None):
        """Add a question with its options to the exam."""
        serializer = QuestionWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        data.pop('id', None)

        question = QuestionService.create_question(
            exam_id=pk,
            instructor_id=request.user.id,
            **data
        )

        return Response(QuestionSerializer(question).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['put'], url_path='questions/sync')
    def sync_questions(self, request, pk=None):
        """Replace the question list of the exam in one transaction."""
        serializer = QuestionSyncSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payload = ExamService.sync_questions(
            exam_id=pk,
            instructor_id=request.user.id,
            questions=serializer.validated_data['questions']
        )

        return Response(payload)


class ExamDeliveryViewSet(viewsets.ViewSet):
    """
    Exam delivery for test-takers.

    Any authenticated user may fetch an active exam and have answers graded;
    nothing about the attempt is stored.
    """

    permission_classes = [IsAuthenticated]

    def retrieve(self, request, pk=None):
        return Response(ExamService.get_delivery_payload(pk, request.user.id))

    @extend_schema(request=GradeSubmissionSerializer, responses=ScoreSerializer)
    @action(detail=True, methods=['post'])
    def grade(self, request, pk=None):
        """Score a submitted answer sheet."""
        serializer = GradeSubmissionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        score = ExamService.grade_submission(
            exam_id=pk,
            user_id=request.user.id,
            answers=serializer.validated_data['answers']
        )

        return Response(ScoreSerializer(score.to_dict()).data)
