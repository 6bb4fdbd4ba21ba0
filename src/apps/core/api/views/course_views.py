# src/apps/core/api/views/course_views.py
"""
Course Views

ViewSets for courses, modules, lessons and the category/badge catalogues.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from shared.common.permissions import IsInstructor

from ...services import CourseService
from ..serializers import (
    BadgeAssignSerializer,
    BadgeSerializer,
    CategorySerializer,
    CourseBadgeSerializer,
    CourseCreateSerializer,
    CourseDetailSerializer,
    CourseListSerializer,
    CourseModuleCreateSerializer,
    CourseModuleSerializer,
    CourseModuleUpdateSerializer,
    CourseUpdateSerializer,
    LessonCreateSerializer,
    LessonSerializer,
    LessonUpdateSerializer,
    LessonUploadSerializer,
    ModuleSyncSerializer,
)


class CategoryViewSet(viewsets.ReadOnlyModelViewSet):
    """Public list of course categories."""

    permission_classes = [AllowAny]
    serializer_class = CategorySerializer
    pagination_class = None

    def get_queryset(self):
        return CourseService.list_categories()


class BadgeViewSet(viewsets.ReadOnlyModelViewSet):
    """Badge catalogue."""

    permission_classes = [IsAuthenticated]
    serializer_class = BadgeSerializer
    pagination_class = None

    def get_queryset(self):
        return CourseService.list_badges()


class CourseViewSet(viewsets.ModelViewSet):
    """
    ViewSet for the instructor's courses.

    Accepts multipart bodies so a cover image can travel with the fields.
    """

    permission_classes = [IsAuthenticated, IsInstructor]
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_queryset(self):
        return CourseService.list_courses(instructor_id=self.request.user.id)

    def get_serializer_class(self):
        """Return appropriate serializer class."""
        if self.action == 'list':
            return CourseListSerializer
        elif self.action == 'create':
            return CourseCreateSerializer
        elif self.action in ['update', 'partial_update']:
            return CourseUpdateSerializer
        elif self.action == 'badges':
            return BadgeAssignSerializer
        elif self.action == 'sync_modules':
            return ModuleSyncSerializer
        return CourseDetailSerializer

    def retrieve(self, request, *args, **kwargs):
        course = CourseService.get_course(kwargs['pk'], request.user.id)
        return Response(CourseDetailSerializer(course, context={'request': request}).data)

    def create(self, request, *args, **kwargs):
        """Create a new course."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        course = CourseService.create_course(
            instructor_id=request.user.id,
            **serializer.validated_data
        )

        return Response(
            CourseDetailSerializer(course, context={'request': request}).data,
            status=status.HTTP_201_CREATED
        )

    def update(self, request, *args, **kwargs):
        """Update a course; omitted or null fields are left as they are."""
        serializer = self.get_serializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        CourseService.update_course(
            course_id=kwargs['pk'],
            instructor_id=request.user.id,
            **serializer.validated_data
        )
        course = CourseService.get_course(kwargs['pk'], request.user.id)

        return Response(CourseDetailSerializer(course, context={'request': request}).data)

    def destroy(self, request, *args, **kwargs):
        CourseService.delete_course(kwargs['pk'], request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses=CourseBadgeSerializer(many=True))
    @action(detail=True, methods=['get', 'post'])
    def badges(self, request, pk=None):
        """List or replace the badges of a course."""
        if request.method == 'GET':
            assignments = CourseService.get_course_badges(pk, request.user.id)
            return Response(CourseBadgeSerializer(assignments, many=True).data)

        serializer = BadgeAssignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        assignments = CourseService.assign_badges(
            course_id=pk,
            instructor_id=request.user.id,
            badge_ids=[str(b) for b in serializer.validated_data['badge_ids']]
        )

        return Response(CourseBadgeSerializer(assignments, many=True).data)

    @extend_schema(responses=CourseModuleSerializer(many=True))
    @action(detail=True, methods=['put'], url_path='modules/sync')
    def sync_modules(self, request, pk=None):
        """Replace the module list of a course in one transaction."""
        serializer = ModuleSyncSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        modules = CourseService.sync_modules(
            course_id=pk,
            instructor_id=request.user.id,
            modules=serializer.validated_data['modules']
        )

        return Response(
            CourseModuleSerializer(modules, many=True, context={'request': request}).data
        )


class CourseModuleViewSet(viewsets.ModelViewSet):
    """ViewSet for the modules of a course."""

    permission_classes = [IsAuthenticated, IsInstructor]

    def get_queryset(self):
        return CourseService.list_modules(
            course_id=self.kwargs['course_pk'],
            instructor_id=self.request.user.id
        )

    def get_serializer_class(self):
        if self.action == 'create':
            return CourseModuleCreateSerializer
        elif self.action in ['update', 'partial_update']:
            return CourseModuleUpdateSerializer
        return CourseModuleSerializer

    def retrieve(self, request, *args, **kwargs):
        module = CourseService.get_module(
            kwargs['pk'], request.user.id, course_id=kwargs['course_pk']
        )
        return Response(CourseModuleSerializer(module, context={'request': request}).data)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        module = CourseService.add_module(
            course_id=kwargs['course_pk'],
            instructor_id=request.user.id,
            **serializer.validated_data
        )

        return Response(
            CourseModuleSerializer(module, context={'request': request}).data,
            status=status.HTTP_201_CREATED
        )

    def update(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        module = CourseService.update_module(
            kwargs['pk'],
            request.user.id,
            course_id=kwargs['course_pk'],
            **serializer.validated_data
        )

        return Response(CourseModuleSerializer(module, context={'request': request}).data)

    def destroy(self, request, *args, **kwargs):
        CourseService.delete_module(kwargs['pk'], request.user.id, course_id=kwargs['course_pk'])
        return Response(status=status.HTTP_204_NO_CONTENT)


class LessonViewSet(viewsets.ModelViewSet):
    """ViewSet for the lessons of a module."""

    permission_classes = [IsAuthenticated, IsInstructor]
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_queryset(self):
        return CourseService.list_lessons(
            module_id=self.kwargs['module_pk'],
            instructor_id=self.request.user.id,
            course_id=self.kwargs['course_pk']
        )

    def get_serializer_class(self):
        if self.action == 'create':
            return LessonCreateSerializer
        elif self.action in ['update', 'partial_update']:
            return LessonUpdateSerializer
        elif self.action == 'upload':
            return LessonUploadSerializer
        return LessonSerializer

    def _check_module(self):
        return CourseService.get_module(
            self.kwargs['module_pk'],
            self.request.user.id,
            course_id=self.kwargs['course_pk']
        )

    def retrieve(self, request, *args, **kwargs):
        module = self._check_module()
        lesson = CourseService.get_lesson(kwargs['pk'], request.user.id, module_id=module.id)
        return Response(LessonSerializer(lesson, context={'request': request}).data)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        lesson = CourseService.add_lesson(
            module_id=kwargs['module_pk'],
            instructor_id=request.user.id,
            course_id=kwargs['course_pk'],
            **serializer.validated_data
        )

        return Response(
            LessonSerializer(lesson, context={'request': request}).data,
            status=status.HTTP_201_CREATED
        )

    def update(self, request, *args, **kwargs):
        module = self._check_module()
        serializer = self.get_serializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        lesson = CourseService.update_lesson(
            kwargs['pk'],
            request.user.id,
            module_id=module.id,
            **serializer.validated_data
        )

        return Response(LessonSerializer(lesson, context={'request': request}).data)

    def destroy(self, request, *args, **kwargs):
        module = self._check_module()
        CourseService.delete_lesson(kwargs['pk'], request.user.id, module_id=module.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses=LessonSerializer)
    @action(detail=False, methods=['post'], parser_classes=[MultiPartParser, FormParser])
    def upload(self, request, course_pk=None, module_pk=None):
        """Upload a PDF or Word document as a resource lesson."""
        serializer = LessonUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        lesson = CourseService.upload_lesson_file(
            module_id=module_pk,
            instructor_id=request.user.id,
            course_id=course_pk,
            **serializer.validated_data
        )

        return Response(
            LessonSerializer(lesson, context={'request': request}).data,
            status=status.HTTP_201_CREATED
        )
