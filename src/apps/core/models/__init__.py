# src/apps/core/models/__init__.py
"""
Course Authoring Models

Database models for courses, modules, lessons and exams.
"""

from .course import (
    Category,
    Badge,
    Course,
    CourseBadge,
    CourseModule,
    Lesson,
    CourseLevel,
    CourseStatus,
    LessonContentType,
)
from .exam import Exam, Question, Option, QuestionType

__all__ = [
    # Course
    'Category',
    'Badge',
    'Course',
    'CourseBadge',
    'CourseModule',
    'Lesson',
    'CourseLevel',
    'CourseStatus',
    'LessonContentType',
    # Exam
    'Exam',
    'Question',
    'Option',
    'QuestionType',
]
