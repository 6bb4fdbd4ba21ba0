# src/apps/core/api/views/question_views.py
"""
Question Views

ViewSet for editing single questions and their options.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from shared.common.permissions import IsInstructor

from ...services import QuestionService
from ..serializers import (
    OptionReplaceSerializer,
    OptionSerializer,
    QuestionSerializer,
    QuestionUpdateSerializer,
)


class QuestionViewSet(
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet
):
    """Questions are created through their exam; this covers the rest."""

    permission_classes = [IsAuthenticated, IsInstructor]

    def get_serializer_class(self):
        if self.action in ['update', 'partial_update']:
            return QuestionUpdateSerializer
        elif self.action == 'options':
            return OptionReplaceSerializer
        return QuestionSerializer

    def retrieve(self, request, *args, **kwargs):
        question = QuestionService.get_question(kwargs['pk'], request.user.id)
        return Response(QuestionSerializer(question).data)

    def update(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        question = QuestionService.update_question(
            question_id=kwargs['pk'],
            instructor_id=request.user.id,
            **serializer.validated_data
        )

        return Response(QuestionSerializer(question).data)

    def destroy(self, request, *args, **kwargs):
        QuestionService.delete_question(kwargs['pk'], request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses=OptionSerializer(many=True))
    @action(detail=True, methods=['put'])
    def options(self, request, pk=None):
        """Replace the options of a multiple choice question."""
        serializer = OptionReplaceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        options = QuestionService.replace_options(
            question_id=pk,
            instructor_id=request.user.id,
            options=serializer.validated_data['options']
        )

        return Response(OptionSerializer(options, many=True).data)
