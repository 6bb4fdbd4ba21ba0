# src/apps/core/api/serializers/__init__.py
"""
Course Authoring API Serializers

Serializers for REST API endpoints.
"""

from .course_serializers import (
    CategorySerializer,
    BadgeSerializer,
    CourseBadgeSerializer,
    BadgeAssignSerializer,
    LessonSerializer,
    LessonCreateSerializer,
    LessonUpdateSerializer,
    LessonUploadSerializer,
    CourseModuleSerializer,
    CourseModuleCreateSerializer,
    CourseModuleUpdateSerializer,
    ModuleSyncSerializer,
    CourseListSerializer,
    CourseDetailSerializer,
    CourseCreateSerializer,
    CourseUpdateSerializer,
)
from .question_serializers import (
    OptionSerializer,
    QuestionSerializer,
    QuestionWriteSerializer,
    QuestionUpdateSerializer,
    OptionReplaceSerializer,
)
from .exam_serializers import (
    ExamListSerializer,
    ExamCreateSerializer,
    ExamUpdateSerializer,
    QuestionSyncSerializer,
    GradeSubmissionSerializer,
    ScoreSerializer,
)

__all__ = [
    # Course
    'CategorySerializer',
    'BadgeSerializer',
    'CourseBadgeSerializer',
    'BadgeAssignSerializer',
    'LessonSerializer',
    'LessonCreateSerializer',
    'LessonUpdateSerializer',
    'LessonUploadSerializer',
    'CourseModuleSerializer',
    'CourseModuleCreateSerializer',
    'CourseModuleUpdateSerializer',
    'ModuleSyncSerializer',
    'CourseListSerializer',
    'CourseDetailSerializer',
    'CourseCreateSerializer',
    'CourseUpdateSerializer',
    # Question
    'OptionSerializer',
    'QuestionSerializer',
    'QuestionWriteSerializer',
    'QuestionUpdateSerializer',
    'OptionReplaceSerializer',
    # Exam
    'ExamListSerializer',
    'ExamCreateSerializer',
    'ExamUpdateSerializer',
    'QuestionSyncSerializer',
    'GradeSubmissionSerializer',
    'ScoreSerializer',
]
