# src/apps/core/models/course.py
"""
Course Models

Models for courses, their modules and lessons, plus the category and
badge catalogues.
"""

from typing import Dict, Any

from django.conf import settings
from django.core.validators import FileExtensionValidator, MinValueValidator
from django.db import models

from shared.common.mixins import UUIDPrimaryKeyMixin, TimestampMixin
from shared.common.validators import MaxFileSizeValidator


COVER_IMAGE_EXTENSIONS = ['jpeg', 'jpg', 'png', 'gif', 'webp']
LESSON_FILE_EXTENSIONS = ['pdf', 'doc', 'docx']


class CourseLevel(models.TextChoices):
    """Course level choices."""
    BEGINNER = 'beginner', 'Beginner'
    INTERMEDIATE = 'intermediate', 'Intermediate'
    ADVANCED = 'advanced', 'Advanced'


class CourseStatus(models.TextChoices):
    """Course status choices."""
    DRAFT = 'draft', 'Draft'
    PUBLISHED = 'published', 'Published'
    ARCHIVED = 'archived', 'Archived'


class LessonContentType(models.TextChoices):
    """Lesson content type choices."""
    VIDEO = 'video', 'Video Link'
    RESOURCE = 'resource', 'Downloadable Resource'


class Category(UUIDPrimaryKeyMixin, TimestampMixin):
    """Course category."""

    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True, default='')

    class Meta:
        db_table = 'categories'
        ordering = ['name']
        verbose_name_plural = 'categories'

    def __str__(self):
        return self.name


class Badge(UUIDPrimaryKeyMixin, TimestampMixin):
    """Badge that can be attached to a course."""

    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True, default='')
    icon = models.CharField(max_length=255, blank=True, default='')

    class Meta:
        db_table = 'badges'
        ordering = ['name']

    def __str__(self):
        return self.name


class Course(UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Course model.

    Owned by a single instructor; the instructor id is the ``sub`` claim of
    the authenticating token.
    """

    instructor_id = models.UUIDField(db_index=True)
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='courses'
    )

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')

    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)]
    )
    level = models.CharField(
        max_length=20,
        choices=CourseLevel.choices,
        default=CourseLevel.BEGINNER
    )
    duration_hours = models.PositiveIntegerField(null=True, blank=True)
    language = models.CharField(max_length=50, default='es')
    status = models.CharField(
        max_length=20,
        choices=CourseStatus.choices,
        default=CourseStatus.DRAFT
    )

    cover_image = models.ImageField(
        upload_to='courses/',
        null=True,
        blank=True,
        validators=[
            FileExtensionValidator(COVER_IMAGE_EXTENSIONS),
            MaxFileSizeValidator(settings.COURSE_COVER_MAX_BYTES),
        ]
    )

    badges = models.ManyToManyField(
        Badge,
        through='CourseBadge',
        related_name='courses',
        blank=True
    )

    class Meta:
        db_table = 'courses'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['instructor_id', 'created_at']),
            models.Index(fields=['status']),
        ]

    def __str__(self):
        return self.title

    def get_summary(self) -> Dict[str, Any]:
        """Get course summary."""
        return {
            'id': str(self.id),
            'title': self.title,
            'level': self.level,
            'status': self.status,
            'category': self.category.name if self.category_id else None,
            'module_count': self.modules.count(),
        }


class CourseBadge(models.Model):
    """Badge assignment for a course."""

    course = models.ForeignKey(Course, on_delete=models.CASCADE)
    badge = models.ForeignKey(Badge, on_delete=models.CASCADE)
    assigned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'course_badges'
        constraints = [
            models.UniqueConstraint(
                fields=['course', 'badge'],
                name='unique_badge_per_course'
            )
        ]

    def __str__(self):
        return f"{self.course_id} - {self.badge_id}"


class CourseModule(UUIDPrimaryKeyMixin, TimestampMixin):
    """Module (section) of a course."""

    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name='modules'
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    sort_order = models.IntegerField(default=0)

    class Meta:
        db_table = 'course_modules'
        ordering = ['sort_order', 'created_at']
        indexes = [
            models.Index(fields=['course', 'sort_order']),
        ]

    def __str__(self):
        return f"{self.course.title} - {self.title}"


class Lesson(UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Lesson within a module.

    A lesson is either a video link (``content_url``) or an uploaded
    document (``file``).
    """

    module = models.ForeignKey(
        CourseModule,
        on_delete=models.CASCADE,
        related_name='lessons'
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    content_type = models.CharField(
        max_length=20,
        choices=LessonContentType.choices,
        default=LessonContentType.VIDEO
    )
    content_url = models.URLField(max_length=500, blank=True, default='')
    file = models.FileField(
        upload_to='lessons/',
        null=True,
        blank=True,
        validators=[
            FileExtensionValidator(LESSON_FILE_EXTENSIONS),
            MaxFileSizeValidator(settings.LESSON_FILE_MAX_BYTES),
        ]
    )
    duration_minutes = models.PositiveIntegerField(null=True, blank=True)
    sort_order = models.IntegerField(default=0)

    class Meta:
        db_table = 'lessons'
        ordering = ['sort_order', 'created_at']
        indexes = [
            models.Index(fields=['module', 'sort_order']),
        ]

    def __str__(self):
        return self.title

    @property
    def has_file(self) -> bool:
        return bool(self.file)
