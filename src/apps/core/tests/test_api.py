# src/apps/core/tests/test_api.py
"""
Course Authoring API Tests

Tests for REST API endpoints.
"""

from decimal import Decimal
from unittest.mock import patch
from uuid import uuid4

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import OperationalError
from rest_framework import status
from rest_framework.test import APIClient

from apps.core.models import Badge, Course, CourseModule, Exam, Lesson, Question, QuestionType

from .conftest import make_token


# 1x1 transparent GIF
TINY_GIF = (
    b'GIF89a\x01\x00\x01\x00\x80\x00\x00\x00\x00\x00\xff\xff\xff!\xf9\x04'
    b'\x01\x00\x00\x00\x00,\x00\x00\x00\x00\x01\x00\x01\x00\x00\x02\x02D\x01\x00;'
)


# =============================================================================
# AUTHENTICATION AND ERRORS
# =============================================================================

@pytest.mark.django_db
class TestAuthentication:

    def test_missing_token(self, api_client):
        response = api_client.get('/api/v1/courses/')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['success'] is False
        assert response.data['error']['code'] == 'UNAUTHORIZED'

    def test_expired_token(self, api_client, instructor_id):
        token = make_token(instructor_id, exp=1, iat=0)
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

        response = api_client.get('/api/v1/courses/')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_wrong_issuer(self, api_client, instructor_id):
        api_client.credentials(
            HTTP_AUTHORIZATION=f'Bearer {make_token(instructor_id, iss="someone-else")}'
        )

        response = api_client.get('/api/v1/courses/')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_student_cannot_author(self, student_client):
        response = student_client.get('/api/v1/courses/')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['error']['code'] == 'FORBIDDEN'

    def test_request_id_echoed(self, instructor_client):
        response = instructor_client.get('/api/v1/courses/', HTTP_X_REQUEST_ID='req-123')

        assert response['X-Request-ID'] == 'req-123'

    def test_storage_failure_is_transient(self, instructor_client, exam):
        with patch(
            'apps.core.services.ExamService.get_exam_payload',
            side_effect=OperationalError('connection refused')
        ):
            response = instructor_client.get(f'/api/v1/exams/{exam.id}/')

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.data['error']['code'] == 'TRANSIENT_IO_FAILURE'


# =============================================================================
# CATALOGUES
# =============================================================================

@pytest.mark.django_db
class TestCatalogueAPI:

    def test_categories_are_public(self, api_client, category):
        response = api_client.get('/api/v1/categories/')

        assert response.status_code == status.HTTP_200_OK
        assert [c['name'] for c in response.data] == ['Programming']

    def test_badges_for_any_user(self, student_client, badge):
        response = student_client.get('/api/v1/badges/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data[0]['name'] == 'Bestseller'


# =============================================================================
# COURSES
# =============================================================================

@pytest.mark.django_db
class TestCourseAPI:
    """Tests for Course API endpoints."""

    def test_list_own_courses(self, instructor_client, course, other_instructor_id):
        Course.objects.create(instructor_id=other_instructor_id, title='Not mine')

        response = instructor_client.get('/api/v1/courses/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['title'] == 'Python Basics'
        assert response.data['results'][0]['module_count'] == 0

    def test_create_course_json(self, instructor_client, instructor_id, category):
        response = instructor_client.post('/api/v1/courses/', {
            'title': 'Async Python',
            'category_id': str(category.id),
            'price': '49.00',
            'level': 'advanced',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['instructor_id'] == instructor_id
        assert response.data['category_name'] == 'Programming'
        assert response.data['status'] == 'draft'

    def test_create_course_with_cover(self, instructor_client):
        cover = SimpleUploadedFile('cover.gif', TINY_GIF, content_type='image/gif')

        response = instructor_client.post(
            '/api/v1/courses/',
            {'title': 'With cover', 'cover_image': cover},
            format='multipart'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['cover_image']

    def test_create_course_rejects_non_image(self, instructor_client):
        cover = SimpleUploadedFile('cover.txt', b'plain text', content_type='text/plain')

        response = instructor_client.post(
            '/api/v1/courses/',
            {'title': 'Bad cover', 'cover_image': cover},
            format='multipart'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error']['code'] == 'VALIDATION_ERROR'
        assert 'cover_image' in response.data['error']['details']

    def test_create_course_missing_title(self, instructor_client):
        response = instructor_client.post('/api/v1/courses/', {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'title' in response.data['error']['details']

    def test_retrieve_course_with_modules(self, instructor_client, course, module, exam):
        Lesson.objects.create(module=module, title='Intro', content_url='https://example.com/v')

        response = instructor_client.get(f'/api/v1/courses/{course.id}/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['modules'][0]['title'] == 'Getting started'
        assert response.data['modules'][0]['lessons'][0]['title'] == 'Intro'
        assert response.data['modules'][0]['exams'][0]['id'] == str(exam.id)

    def test_retrieve_foreign_course(self, other_instructor_client, course):
        response = other_instructor_client.get(f'/api/v1/courses/{course.id}/')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['error']['code'] == 'NOT_FOUND'

    def test_retrieve_malformed_id(self, instructor_client):
        response = instructor_client.get('/api/v1/courses/not-a-uuid/')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_patch_course(self, instructor_client, course):
        response = instructor_client.patch(
            f'/api/v1/courses/{course.id}/',
            {'status': 'published', 'description': None},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'published'
        assert response.data['description'] == 'Intro course'

    def test_delete_course(self, instructor_client, course):
        response = instructor_client.delete(f'/api/v1/courses/{course.id}/')

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Course.objects.filter(id=course.id).exists()

    def test_badges(self, instructor_client, course, badge):
        response = instructor_client.post(
            f'/api/v1/courses/{course.id}/badges/',
            {'badge_ids': [str(badge.id)]},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data[0]['id'] == str(badge.id)
        assert response.data[0]['assigned_at']

        response = instructor_client.get(f'/api/v1/courses/{course.id}/badges/')
        assert [b['name'] for b in response.data] == ['Bestseller']

    def test_unknown_badge(self, instructor_client, course):
        response = instructor_client.post(
            f'/api/v1/courses/{course.id}/badges/',
            {'badge_ids': [str(uuid4())]},
            format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'badge_ids' in response.data['error']['details']

    def test_sync_modules(self, instructor_client, course, module):
        response = instructor_client.put(
            f'/api/v1/courses/{course.id}/modules/sync/',
            {'modules': [
                {'id': str(module.id), 'title': 'Renamed'},
                {'title': 'Added'},
            ]},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert [m['title'] for m in response.data] == ['Renamed', 'Added']
        assert response.data[0]['id'] == str(module.id)


# =============================================================================
# MODULES AND LESSONS
# =============================================================================

@pytest.mark.django_db
class TestModuleAPI:

    def test_create_and_list_modules(self, instructor_client, course):
        response = instructor_client.post(
            f'/api/v1/courses/{course.id}/modules/',
            {'title': 'Basics', 'description': 'First steps'},
            format='json'
        )
        assert response.status_code == status.HTTP_201_CREATED

        response = instructor_client.get(f'/api/v1/courses/{course.id}/modules/')
        assert response.data['count'] == 1
        assert response.data['results'][0]['title'] == 'Basics'

    def test_modules_of_foreign_course(self, other_instructor_client, course, module):
        response = other_instructor_client.get(f'/api/v1/courses/{course.id}/modules/')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update_module(self, instructor_client, course, module):
        response = instructor_client.put(
            f'/api/v1/courses/{course.id}/modules/{module.id}/',
            {'title': 'Updated', 'sort_order': 3},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['title'] == 'Updated'
        assert response.data['sort_order'] == 3

    def test_delete_module(self, instructor_client, course, module):
        response = instructor_client.delete(f'/api/v1/courses/{course.id}/modules/{module.id}/')

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not CourseModule.objects.filter(id=module.id).exists()


@pytest.mark.django_db
class TestLessonAPI:

    def url(self, course, module, suffix=''):
        return f'/api/v1/courses/{course.id}/modules/{module.id}/lessons/{suffix}'

    def test_create_video_lesson(self, instructor_client, course, module):
        response = instructor_client.post(self.url(course, module), {
            'title': 'Watch',
            'content_type': 'video',
            'content_url': 'https://videos.example.com/1',
            'duration_minutes': 7,
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['content_url'] == 'https://videos.example.com/1'

    def test_video_lesson_needs_url(self, instructor_client, course, module):
        response = instructor_client.post(self.url(course, module), {'title': 'Watch'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'content_url' in response.data['error']['details']

    def test_upload_document(self, instructor_client, course, module):
        upload = SimpleUploadedFile('slides.pdf', b'%PDF-1.4', content_type='application/pdf')

        response = instructor_client.post(
            self.url(course, module, 'upload/'),
            {'file': upload},
            format='multipart'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['title'] == 'slides'
        assert response.data['content_type'] == 'resource'
        assert response.data['has_file'] is True

    def test_upload_rejects_other_types(self, instructor_client, course, module):
        upload = SimpleUploadedFile('tool.exe', b'MZ', content_type='application/octet-stream')

        response = instructor_client.post(
            self.url(course, module, 'upload/'),
            {'file': upload},
            format='multipart'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert module.lessons.count() == 0

    def test_update_and_delete_lesson(self, instructor_client, course, module):
        lesson = Lesson.objects.create(module=module, title='Old', content_url='https://example.com/v')

        response = instructor_client.patch(
            self.url(course, module, f'{lesson.id}/'),
            {'title': 'New'},
            format='json'
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.data['title'] == 'New'

        response = instructor_client.delete(self.url(course, module, f'{lesson.id}/'))
        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Lesson.objects.filter(id=lesson.id).exists()


# =============================================================================
# EXAMS AND QUESTIONS
# =============================================================================

@pytest.mark.django_db
class TestExamAPI:
    """Tests for Exam API endpoints."""

    def test_create_exam(self, instructor_client, course, module):
        response = instructor_client.post('/api/v1/exams/', {
            'course_id': str(course.id),
            'module_id': str(module.id),
            'title': 'Checkpoint',
            'time_limit_minutes': 10,
            'pass_percentage': '80',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['title'] == 'Checkpoint'
        assert response.data['pass_percentage'] == 80.0
        assert response.data['questions'] == []

    def test_create_exam_invalid_rules(self, instructor_client, course):
        response = instructor_client.post('/api/v1/exams/', {
            'course_id': str(course.id),
            'title': 'Bad',
            'time_limit_minutes': 0,
            'pass_percentage': '101',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        details = response.data['error']['details']
        assert 'time_limit_minutes' in details
        assert 'pass_percentage' in details

    def test_create_exam_on_foreign_course(self, other_instructor_client, course):
        response = other_instructor_client.post('/api/v1/exams/', {
            'course_id': str(course.id),
            'title': 'Nope',
        }, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert Exam.objects.count() == 0

    def test_list_exams_by_course(self, instructor_client, course, exam, instructor_id):
        other_course = Course.objects.create(instructor_id=instructor_id, title='Other')
        Exam.objects.create(course=other_course, title='Elsewhere')

        response = instructor_client.get('/api/v1/exams/', {'course_id': str(course.id)})

        assert response.status_code == status.HTTP_200_OK
        assert [e['title'] for e in response.data['results']] == ['Module quiz']

    def test_retrieve_exam_payload(self, instructor_client, exam, mc_question):
        response = instructor_client.get(f'/api/v1/exams/{exam.id}/')

        assert response.status_code == status.HTTP_200_OK
        question = response.data['questions'][0]
        assert question['type'] == 'multiple_choice'
        assert len(question['options']) == 3

    def test_patch_exam_keeps_nulls(self, instructor_client, exam):
        response = instructor_client.patch(
            f'/api/v1/exams/{exam.id}/',
            {'title': 'Renamed', 'pass_percentage': None},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['title'] == 'Renamed'
        assert response.data['pass_percentage'] == 70.0

    def test_delete_exam(self, instructor_client, exam, mc_question):
        response = instructor_client.delete(f'/api/v1/exams/{exam.id}/')

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Question.objects.filter(id=mc_question.id).exists()

    def test_add_question(self, instructor_client, exam):
        response = instructor_client.post(f'/api/v1/exams/{exam.id}/questions/', {
            'text': 'Which is a list?',
            'question_type': 'multiple_choice',
            'points': 2,
            'options': [
                {'text': '[]', 'is_correct': True},
                {'text': '{}', 'is_correct': False},
            ],
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['points'] == 2
        assert len(response.data['options']) == 2

    def test_add_question_with_half_point(self, instructor_client, exam):
        response = instructor_client.post(f'/api/v1/exams/{exam.id}/questions/', {
            'text': 'Name a mutable type',
            'question_type': 'free_text',
            'points': '0.5',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['points'] == Decimal('0.50')

    def test_add_invalid_question(self, instructor_client, exam):
        response = instructor_client.post(f'/api/v1/exams/{exam.id}/questions/', {
            'text': 'Which is a list?',
            'question_type': 'multiple_choice',
            'options': [{'text': '[]', 'is_correct': True}],
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error']['code'] == 'VALIDATION_ERROR'
        assert 'options' in response.data['error']['details']
        assert exam.questions.count() == 0

    def test_sync_questions(self, instructor_client, exam, mc_question):
        response = instructor_client.put(f'/api/v1/exams/{exam.id}/questions/sync/', {
            'questions': [
                {'text': 'Describe a tuple', 'question_type': 'free_text', 'points': 3},
            ],
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['questions']) == 1
        assert response.data['questions'][0]['type'] == 'free_text'
        assert not Question.objects.filter(id=mc_question.id).exists()

    def test_sync_questions_invalid_keeps_data(self, instructor_client, exam, mc_question):
        response = instructor_client.put(f'/api/v1/exams/{exam.id}/questions/sync/', {
            'questions': [
                {'text': '', 'question_type': 'free_text'},
            ],
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert Question.objects.filter(id=mc_question.id).exists()


@pytest.mark.django_db
class TestQuestionAPI:

    def test_retrieve_question(self, instructor_client, mc_question):
        response = instructor_client.get(f'/api/v1/questions/{mc_question.id}/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['question_type'] == QuestionType.MULTIPLE_CHOICE

    def test_foreign_question(self, other_instructor_client, mc_question):
        response = other_instructor_client.get(f'/api/v1/questions/{mc_question.id}/')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update_question(self, instructor_client, mc_question):
        response = instructor_client.patch(
            f'/api/v1/questions/{mc_question.id}/',
            {'points': 4},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['points'] == 4
        assert len(response.data['options']) == 3

    def test_replace_options(self, instructor_client, mc_question):
        response = instructor_client.put(
            f'/api/v1/questions/{mc_question.id}/options/',
            {'options': [
                {'text': 'yes', 'is_correct': True},
                {'text': 'no', 'is_correct': False},
            ]},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert [o['text'] for o in response.data] == ['yes', 'no']

    def test_delete_question(self, instructor_client, mc_question):
        response = instructor_client.delete(f'/api/v1/questions/{mc_question.id}/')

        assert response.status_code == status.HTTP_204_NO_CONTENT


# =============================================================================
# DELIVERY
# =============================================================================

@pytest.mark.django_db
class TestDeliveryAPI:

    def test_student_fetches_active_exam(self, student_client, exam, mc_question):
        response = student_client.get(f'/api/v1/delivery/{exam.id}/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['id'] == str(exam.id)
        assert len(response.data['questions'][0]['options']) == 3

    def test_inactive_exam_hidden(self, student_client, exam):
        exam.is_active = False
        exam.save()

        response = student_client.get(f'/api/v1/delivery/{exam.id}/')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_grade(self, student_client, exam, mc_question, free_text_question):
        correct = mc_question.options.get(is_correct=True)

        response = student_client.post(f'/api/v1/delivery/{exam.id}/grade/', {
            'answers': {
                str(mc_question.id): str(correct.id),
                str(free_text_question.id): '   ',
            },
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {
            'points_total': 3,
            'points_earned': 1,
            'percentage': 33.33,
            'passed': False,
        }

    def test_grade_requires_authentication(self, api_client, exam):
        response = api_client.post(f'/api/v1/delivery/{exam.id}/grade/', {'answers': {}}, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# HEALTH
# =============================================================================

@pytest.mark.django_db
class TestHealth:

    def test_health(self, api_client):
        response = api_client.get('/health/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['service'] == 'course-service'

    def test_liveness(self, api_client):
        assert api_client.get('/health/live/').status_code == status.HTTP_200_OK

    def test_readiness(self, api_client):
        response = api_client.get('/health/ready/')

        assert response.status_code == status.HTTP_200_OK
        assert [c['name'] for c in response.data['checks']] == ['database', 'storage']
        assert response.data['status'] == 'healthy'
