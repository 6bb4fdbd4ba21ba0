# src/apps/core/tests/conftest.py
"""
Pytest Configuration and Fixtures

Shared fixtures for course authoring tests.
"""

import time

import jwt
import pytest
from uuid import uuid4

from django.conf import settings
from rest_framework.test import APIClient


def make_token(user_id, roles=None, **claims):
    """Sign a token the way the user service does."""
    now = int(time.time())
    payload = {
        'sub': str(user_id),
        'email': f'{user_id}@example.com',
        'roles': roles if roles is not None else ['instructor'],
        'iat': now,
        'exp': now + 3600,
        'iss': settings.JWT_SETTINGS['ISSUER'],
        **claims,
    }
    return jwt.encode(
        payload,
        settings.JWT_SETTINGS['VERIFYING_KEY'],
        algorithm=settings.JWT_SETTINGS['ALGORITHM']
    )


@pytest.fixture
def instructor_id():
    """Generate a random instructor ID."""
    return str(uuid4())


@pytest.fixture
def other_instructor_id():
    """Instructor that owns nothing created by the fixtures."""
    return str(uuid4())


@pytest.fixture
def student_id():
    """Generate a random student ID."""
    return str(uuid4())


@pytest.fixture
def api_client():
    """Create API client."""
    return APIClient()


@pytest.fixture
def instructor_client(instructor_id):
    """API client authenticated as the owning instructor."""
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {make_token(instructor_id)}')
    return client


@pytest.fixture
def other_instructor_client(other_instructor_id):
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {make_token(other_instructor_id)}')
    return client


@pytest.fixture
def student_client(student_id):
    """API client authenticated as a student (no authoring role)."""
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {make_token(student_id, roles=["student"])}')
    return client


@pytest.fixture
def category(db):
    from apps.core.models import Category
    return Category.objects.create(name='Programming', description='Software courses')


@pytest.fixture
def badge(db):
    from apps.core.models import Badge
    return Badge.objects.create(name='Bestseller', icon='star')


@pytest.fixture
def course(db, instructor_id, category):
    from apps.core.models import Course
    return Course.objects.create(
        instructor_id=instructor_id,
        title='Python Basics',
        description='Intro course',
        category=category,
    )


@pytest.fixture
def module(course):
    from apps.core.models import CourseModule
    return CourseModule.objects.create(course=course, title='Getting started', sort_order=0)


@pytest.fixture
def exam(course, module):
    from apps.core.models import Exam
    return Exam.objects.create(
        course=course,
        module=module,
        title='Module quiz',
        pass_percentage=70,
    )


@pytest.fixture
def mc_question(exam):
    """Multiple choice question with one correct option out of three."""
    from apps.core.models import Question, Option, QuestionType

    question = Question.objects.create(
        exam=exam,
        text='What does len([1, 2]) return?',
        question_type=QuestionType.MULTIPLE_CHOICE,
        points=1,
        sort_order=0,
    )
    Option.objects.create(question=question, text='1', is_correct=False, sort_order=0)
    Option.objects.create(question=question, text='2', is_correct=True, sort_order=1)
    Option.objects.create(question=question, text='3', is_correct=False, sort_order=2)
    return question


@pytest.fixture
def free_text_question(exam):
    from apps.core.models import Question, QuestionType

    return Question.objects.create(
        exam=exam,
        text='Explain list comprehensions.',
        question_type=QuestionType.FREE_TEXT,
        points=2,
        sort_order=1,
    )


@pytest.fixture
def valid_options():
    return [
        {'text': 'A', 'is_correct': True},
        {'text': 'B', 'is_correct': False},
    ]
