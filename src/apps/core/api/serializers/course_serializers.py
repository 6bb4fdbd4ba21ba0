# src/apps/core/api/serializers/course_serializers.py
"""
Course Serializers

Serializers for courses, modules, lessons and the catalogues.
"""

from django.conf import settings
from django.core.validators import FileExtensionValidator
from rest_framework import serializers

from shared.common.validators import MaxFileSizeValidator

from ...models import (
    Badge,
    Category,
    Course,
    CourseBadge,
    CourseModule,
    Lesson,
    LessonContentType,
)
from ...models.course import LESSON_FILE_EXTENSIONS


# =============================================================================
# CATALOGUES
# =============================================================================

class CategorySerializer(serializers.ModelSerializer):

    class Meta:
        model = Category
        fields = ['id', 'name', 'description']


class BadgeSerializer(serializers.ModelSerializer):

    class Meta:
        model = Badge
        fields = ['id', 'name', 'description', 'icon']


class CourseBadgeSerializer(serializers.ModelSerializer):
    """Badge as assigned to a course."""

    id = serializers.UUIDField(source='badge.id', read_only=True)
    name = serializers.CharField(source='badge.name', read_only=True)
    description = serializers.CharField(source='badge.description', read_only=True)
    icon = serializers.CharField(source='badge.icon', read_only=True)

    class Meta:
        model = CourseBadge
        fields = ['id', 'name', 'description', 'icon', 'assigned_at']


class BadgeAssignSerializer(serializers.Serializer):
    """Complete list of badges a course should carry."""

    badge_ids = serializers.ListField(
        child=serializers.UUIDField(),
        allow_empty=True
    )

    def validate_badge_ids(self, value):
        if len(value) != len(set(value)):
            raise serializers.ValidationError("Badge ids must be unique.")
        return value


# =============================================================================
# LESSONS
# =============================================================================

class LessonSerializer(serializers.ModelSerializer):
    """Serializer for lesson read views."""

    has_file = serializers.ReadOnlyField()

    class Meta:
        model = Lesson
        fields = [
            'id',
            'module',
            'title',
            'description',
            'content_type',
            'content_url',
            'file',
            'has_file',
            'duration_minutes',
            'sort_order',
            'created_at',
            'updated_at',
        ]


class LessonCreateSerializer(serializers.ModelSerializer):
    """Serializer for creating link lessons."""

    sort_order = serializers.IntegerField(required=False, allow_null=True)

    class Meta:
        model = Lesson
        fields = [
            'title',
            'description',
            'content_type',
            'content_url',
            'duration_minutes',
            'sort_order',
        ]

    def validate(self, attrs):
        content_type = attrs.get('content_type', LessonContentType.VIDEO)
        if content_type == LessonContentType.VIDEO and not attrs.get('content_url'):
            raise serializers.ValidationError(
                {'content_url': ['A video lesson needs a content URL.']}
            )
        return attrs


class LessonUpdateSerializer(serializers.Serializer):
    """Partial lesson update; null keeps the stored value."""

    title = serializers.CharField(max_length=255, required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    content_type = serializers.ChoiceField(
        choices=LessonContentType.choices,
        required=False,
        allow_null=True
    )
    content_url = serializers.URLField(max_length=500, required=False, allow_null=True, allow_blank=True)
    duration_minutes = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    sort_order = serializers.IntegerField(required=False, allow_null=True)


class LessonUploadSerializer(serializers.Serializer):
    """Multipart upload of a lesson document."""

    file = serializers.FileField(
        validators=[
            FileExtensionValidator(LESSON_FILE_EXTENSIONS),
            MaxFileSizeValidator(settings.LESSON_FILE_MAX_BYTES),
        ]
    )
    title = serializers.CharField(max_length=255, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    sort_order = serializers.IntegerField(required=False, allow_null=True)


class LessonSyncItemSerializer(serializers.Serializer):
    id = serializers.UUIDField(required=False, allow_null=True)
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    content_type = serializers.ChoiceField(
        choices=LessonContentType.choices,
        required=False,
        default=LessonContentType.VIDEO
    )
    content_url = serializers.URLField(max_length=500, required=False, allow_blank=True, default='')
    duration_minutes = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    sort_order = serializers.IntegerField(required=False, allow_null=True)


# =============================================================================
# MODULES
# =============================================================================

class ModuleExamSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    title = serializers.CharField(read_only=True)
    is_active = serializers.BooleanField(read_only=True)


class CourseModuleSerializer(serializers.ModelSerializer):
    """Serializer for module read views, lessons included."""

    lessons = LessonSerializer(many=True, read_only=True)
    exams = ModuleExamSerializer(many=True, read_only=True)

    class Meta:
        model = CourseModule
        fields = [
            'id',
            'course',
            'title',
            'description',
            'sort_order',
            'lessons',
            'exams',
            'created_at',
            'updated_at',
        ]


class CourseModuleCreateSerializer(serializers.ModelSerializer):
    """Serializer for creating modules."""

    sort_order = serializers.IntegerField(required=False, allow_null=True)

    class Meta:
        model = CourseModule
        fields = ['title', 'description', 'sort_order']


class CourseModuleUpdateSerializer(serializers.Serializer):
    """Partial module update; null keeps the stored value."""

    title = serializers.CharField(max_length=255, required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    sort_order = serializers.IntegerField(required=False, allow_null=True)


class ModuleSyncItemSerializer(serializers.Serializer):
    id = serializers.UUIDField(required=False, allow_null=True)
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    sort_order = serializers.IntegerField(required=False, allow_null=True)
    lessons = LessonSyncItemSerializer(many=True, required=False)


class ModuleSyncSerializer(serializers.Serializer):
    """Desired module list of a course."""

    modules = ModuleSyncItemSerializer(many=True, allow_empty=True)


# =============================================================================
# COURSES
# =============================================================================

class CourseListSerializer(serializers.ModelSerializer):
    """Serializer for course list view."""

    category_name = serializers.CharField(source='category.name', read_only=True, allow_null=True)
    module_count = serializers.IntegerField(read_only=True)
    lesson_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Course
        fields = [
            'id',
            'title',
            'description',
            'category',
            'category_name',
            'level',
            'status',
            'price',
            'cover_image',
            'module_count',
            'lesson_count',
            'created_at',
        ]


class CourseDetailSerializer(serializers.ModelSerializer):
    """Serializer for course detail view."""

    category_name = serializers.CharField(source='category.name', read_only=True, allow_null=True)
    modules = CourseModuleSerializer(many=True, read_only=True)
    badges = BadgeSerializer(many=True, read_only=True)

    class Meta:
        model = Course
        fields = [
            'id',
            'instructor_id',
            'title',
            'description',
            'category',
            'category_name',
            'price',
            'level',
            'duration_hours',
            'language',
            'status',
            'cover_image',
            'modules',
            'badges',
            'created_at',
            'updated_at',
        ]


class CourseCreateSerializer(serializers.ModelSerializer):
    """Serializer for creating courses (multipart when a cover is sent)."""

    category_id = serializers.UUIDField(required=False, allow_null=True)

    class Meta:
        model = Course
        fields = [
            'title',
            'description',
            'category_id',
            'price',
            'level',
            'duration_hours',
            'language',
            'status',
            'cover_image',
        ]


class CourseUpdateSerializer(CourseCreateSerializer):
    """Partial course update; null keeps the stored value."""

    title = serializers.CharField(max_length=255, required=False, allow_null=True)

    class Meta(CourseCreateSerializer.Meta):
        extra_kwargs = {
            field: {'required': False, 'allow_null': True}
            for field in ['description', 'level', 'language', 'status', 'cover_image']
        }
