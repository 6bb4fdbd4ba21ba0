# src/apps/core/api/urls.py
"""
Course Authoring API URLs

URL routing configuration for REST API endpoints.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_nested import routers

from .views import (
    CategoryViewSet,
    BadgeViewSet,
    CourseViewSet,
    CourseModuleViewSet,
    LessonViewSet,
    ExamViewSet,
    ExamDeliveryViewSet,
    QuestionViewSet,
)

# Main router
router = DefaultRouter()
router.register(r'categories', CategoryViewSet, basename='category')
router.register(r'badges', BadgeViewSet, basename='badge')
router.register(r'courses', CourseViewSet, basename='course')
router.register(r'exams', ExamViewSet, basename='exam')
router.register(r'questions', QuestionViewSet, basename='question')
router.register(r'delivery', ExamDeliveryViewSet, basename='delivery')

# Nested routers for courses
courses_router = routers.NestedDefaultRouter(router, r'courses', lookup='course')
courses_router.register(r'modules', CourseModuleViewSet, basename='course-module')

modules_router = routers.NestedDefaultRouter(courses_router, r'modules', lookup='module')
modules_router.register(r'lessons', LessonViewSet, basename='module-lesson')

urlpatterns = [
    path('', include(router.urls)),
    path('', include(courses_router.urls)),
    path('', include(modules_router.urls)),
]

# API URL Patterns Summary:
#
# Catalogues:
#   GET         /api/v1/categories/
#   GET         /api/v1/badges/
#
# Courses:
#   GET/POST    /api/v1/courses/
#   GET/PUT/DEL /api/v1/courses/{id}/
#   GET/POST    /api/v1/courses/{id}/badges/
#   PUT         /api/v1/courses/{id}/modules/sync/
#
# Course Modules (nested):
#   GET/POST    /api/v1/courses/{id}/modules/
#   GET/PUT/DEL /api/v1/courses/{id}/modules/{module_id}/
#
# Lessons (nested):
#   GET/POST    /api/v1/courses/{id}/modules/{module_id}/lessons/
#   POST        /api/v1/courses/{id}/modules/{module_id}/lessons/upload/
#   GET/PUT/DEL /api/v1/courses/{id}/modules/{module_id}/lessons/{lesson_id}/
#
# Exams:
#   GET/POST    /api/v1/exams/?course_id=
#   GET/PUT/DEL /api/v1/exams/{id}/
#   POST        /api/v1/exams/{id}/questions/
#   PUT         /api/v1/exams/{id}/questions/sync/
#
# Questions:
#   GET/PUT/DEL /api/v1/questions/{id}/
#   PUT         /api/v1/questions/{id}/options/
#
# Delivery:
#   GET         /api/v1/delivery/{id}/
#   POST        /api/v1/delivery/{id}/grade/
