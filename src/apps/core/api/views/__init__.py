# src/apps/core/api/views/__init__.py
"""
Course Authoring API Views

ViewSets for REST API endpoints.
"""

from .course_views import (
    CategoryViewSet,
    BadgeViewSet,
    CourseViewSet,
    CourseModuleViewSet,
    LessonViewSet,
)
from .exam_views import ExamViewSet, ExamDeliveryViewSet
from .question_views import QuestionViewSet

__all__ = [
    'CategoryViewSet',
    'BadgeViewSet',
    'CourseViewSet',
    'CourseModuleViewSet',
    'LessonViewSet',
    'ExamViewSet',
    'ExamDeliveryViewSet',
    'QuestionViewSet',
]
