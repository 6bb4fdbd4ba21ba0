# src/apps/core/services/__init__.py
"""
Course Authoring Business Logic

Service layer for courses, exams and scoring.
"""

from .course_service import CourseService
from .question_service import QuestionService, validate_question
from .exam_service import ExamService
from .scoring_service import (
    ChoiceOption,
    MultipleChoiceQuestion,
    FreeTextQuestion,
    ExamPaper,
    Score,
    initial_answers,
    unanswered_questions,
    score_exam,
)

__all__ = [
    'CourseService',
    'QuestionService',
    'validate_question',
    'ExamService',
    'ChoiceOption',
    'MultipleChoiceQuestion',
    'FreeTextQuestion',
    'ExamPaper',
    'Score',
    'initial_answers',
    'unanswered_questions',
    'score_exam',
]
