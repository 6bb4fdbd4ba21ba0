# src/apps/core/services/course_service.py
"""
Course Service

Business logic for courses, modules, lessons and badge assignment.
Every mutation checks that the course belongs to the requesting instructor.
"""

import logging
import os
from typing import Dict, Any, List, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import Count, QuerySet, Prefetch

from shared.common.exceptions import ValidationException
from shared.common.validators import validate_uuid_list, validate_unique_list

from ..models import (
    Badge,
    Category,
    Course,
    CourseBadge,
    CourseModule,
    Lesson,
    LessonContentType,
)
from .lookups import get_or_not_found

logger = logging.getLogger(__name__)


COURSE_FIELDS = (
    'title', 'description', 'category_id', 'price', 'level',
    'duration_hours', 'language', 'status', 'cover_image',
)
MODULE_FIELDS = ('title', 'description', 'sort_order')
LESSON_FIELDS = (
    'title', 'description', 'content_type', 'content_url',
    'duration_minutes', 'sort_order',
)


def _apply_updates(instance, updates: Dict[str, Any], allowed: tuple) -> List[str]:
    """Set every allowed, non-null value; returns the changed field names."""
    changed = []
    for field, value in updates.items():
        if field not in allowed or value is None:
            continue
        setattr(instance, field, value)
        changed.append(field)
    return changed


def _delete_stored(storage, name: str) -> None:
    """Remove a stored file once the surrounding transaction has committed."""
    transaction.on_commit(lambda: storage.delete(name))


def _delete_file(field_file) -> None:
    if field_file:
        _delete_stored(field_file.storage, field_file.name)


class CourseService:
    """Service for managing courses and their content."""

    # =========================================================================
    # CATALOGUES
    # =========================================================================

    @staticmethod
    def list_categories() -> QuerySet:
        return Category.objects.order_by('name')

    @staticmethod
    def list_badges() -> QuerySet:
        return Badge.objects.order_by('name')

    # =========================================================================
    # COURSE MANAGEMENT
    # =========================================================================

    @staticmethod
    def list_courses(instructor_id: str) -> QuerySet:
        """
        Get the instructor's courses, newest first.

        Args:
            instructor_id: Instructor (token subject)

        Returns:
            Courses annotated with module_count and lesson_count
        """
        return (
            Course.objects
            .filter(instructor_id=instructor_id)
            .select_related('category')
            .annotate(
                module_count=Count('modules', distinct=True),
                lesson_count=Count('modules__lessons', distinct=True),
            )
            .order_by('-created_at')
        )

    @staticmethod
    def get_course(
        course_id: str,
        instructor_id: str,
        for_update: bool = False
    ) -> Course:
        """
        Get a course owned by the instructor.

        Raises:
            NotFoundException: Unknown id or course of another instructor
        """
        queryset = Course.objects.select_related('category')
        if for_update:
            queryset = queryset.select_for_update(of=('self',))
        else:
            queryset = queryset.prefetch_related(
                Prefetch(
                    'modules',
                    queryset=CourseModule.objects.prefetch_related('lessons', 'exams')
                ),
                'badges',
            )
        return get_or_not_found(
            queryset, 'Course',
            id=course_id,
            instructor_id=instructor_id
        )

    @staticmethod
    @transaction.atomic
    def create_course(
        instructor_id: str,
        title: str,
        **kwargs
    ) -> Course:
        """
        Create a new course.

        Args:
            instructor_id: Owner of the course
            title: Course title
            **kwargs: Additional course fields (cover_image included)

        Returns:
            Created course
        """
        CourseService._check_category(kwargs.get('category_id'))

        fields = {k: v for k, v in kwargs.items() if k in COURSE_FIELDS and v is not None}
        course = Course.objects.create(
            instructor_id=instructor_id,
            title=title,
            **fields
        )

        logger.info(f"Created course: {course.id} - {course.title}")

        return course

    @staticmethod
    @transaction.atomic
    def update_course(
        course_id: str,
        instructor_id: str,
        **updates
    ) -> Course:
        """
        Partially update a course.

        Absent or null fields keep their stored value. A new cover image
        replaces the previous file.
        """
        course = CourseService.get_course(course_id, instructor_id, for_update=True)
        CourseService._check_category(updates.get('category_id'))

        previous_cover = course.cover_image.name if course.cover_image else None
        changed = _apply_updates(course, updates, COURSE_FIELDS)
        course.save()

        if 'cover_image' in changed and previous_cover and previous_cover != course.cover_image.name:
            _delete_stored(course.cover_image.storage, previous_cover)

        logger.info(f"Updated course: {course.id} ({', '.join(changed) or 'no changes'})")

        return course

    @staticmethod
    @transaction.atomic
    def delete_course(course_id: str, instructor_id: str) -> None:
        """Delete a course with its modules, lessons and exams."""
        course = CourseService.get_course(course_id, instructor_id, for_update=True)

        files = [lesson.file for lesson in Lesson.objects.filter(module__course=course) if lesson.file]
        cover = course.cover_image

        course.delete()

        _delete_file(cover)
        for f in files:
            _delete_file(f)

        logger.info(f"Deleted course: {course_id}")

    @staticmethod
    def _check_category(category_id: Optional[str]) -> None:
        if category_id is None:
            return
        try:
            exists = Category.objects.filter(id=category_id).exists()
        except (DjangoValidationError, ValueError):
            exists = False
        if not exists:
            raise ValidationException({'category_id': ['Unknown category.']})

    # =========================================================================
    # MODULE MANAGEMENT
    # =========================================================================

    @staticmethod
    def get_module(
        module_id: str,
        instructor_id: str,
        course_id: str = None,
        for_update: bool = False
    ) -> CourseModule:
        """Get a module whose course belongs to the instructor."""
        queryset = CourseModule.objects.select_related('course')
        if for_update:
            queryset = queryset.select_for_update(of=('self',))

        filters = {'id': module_id, 'course__instructor_id': instructor_id}
        if course_id is not None:
            filters['course_id'] = course_id

        return get_or_not_found(queryset, 'Module', **filters)

    @staticmethod
    def list_modules(course_id: str, instructor_id: str) -> QuerySet:
        course = CourseService.get_course(course_id, instructor_id)
        return course.modules.prefetch_related('lessons').order_by('sort_order', 'created_at')

    @staticmethod
    @transaction.atomic
    def add_module(
        course_id: str,
        instructor_id: str,
        title: str,
        description: str = '',
        sort_order: int = None
    ) -> CourseModule:
        """
        Add a module to a course.

        Args:
            course_id: Course ID
            instructor_id: Instructor ID
            title: Module title
            description: Module description
            sort_order: Position; defaults to the end of the course

        Returns:
            Created module
        """
        course = CourseService.get_course(course_id, instructor_id, for_update=True)

        if sort_order is None:
            sort_order = course.modules.count()

        module = CourseModule.objects.create(
            course=course,
            title=title,
            description=description or '',
            sort_order=sort_order,
        )

        logger.info(f"Created module: {module.id} for course {course.id}")

        return module

    @staticmethod
    @transaction.atomic
    def update_module(
        module_id: str,
        instructor_id: str,
        course_id: str = None,
        **updates
    ) -> CourseModule:
        module = CourseService.get_module(module_id, instructor_id, course_id, for_update=True)

        _apply_updates(module, updates, MODULE_FIELDS)
        module.save()

        logger.info(f"Updated module: {module.id}")

        return module

    @staticmethod
    @transaction.atomic
    def delete_module(
        module_id: str,
        instructor_id: str,
        course_id: str = None
    ) -> None:
        """Delete a module and its lessons. Exams tied to it stay on the course."""
        module = CourseService.get_module(module_id, instructor_id, course_id, for_update=True)

        files = [lesson.file for lesson in module.lessons.all() if lesson.file]
        module.delete()
        for f in files:
            _delete_file(f)

        logger.info(f"Deleted module: {module_id}")

    @staticmethod
    @transaction.atomic
    def sync_modules(
        course_id: str,
        instructor_id: str,
        modules: List[Dict[str, Any]]
    ) -> List[CourseModule]:
        """
        Bring the modules of a course in line with the submitted list.

        Entries with a known id are updated, entries without one are created
        and stored modules missing from the list are deleted. An entry that
        carries a ``lessons`` list has its lessons synced the same way; an
        entry without the key keeps its lessons untouched. List position is
        the sort order unless ``sort_order`` is given.

        Args:
            course_id: Course ID
            instructor_id: Instructor ID
            modules: Desired modules

        Returns:
            Modules of the course after the sync
        """
        course = CourseService.get_course(course_id, instructor_id, for_update=True)

        existing = {str(m.id): m for m in course.modules.all()}
        kept = set()
        created = updated = 0

        for position, data in enumerate(modules):
            module_id = str(data['id']) if data.get('id') else None
            fields = {
                'title': data.get('title'),
                'description': data.get('description') or '',
                'sort_order': data.get('sort_order'),
            }
            if fields['sort_order'] is None:
                fields['sort_order'] = position

            if module_id in existing:
                module = existing[module_id]
                _apply_updates(module, fields, MODULE_FIELDS)
                module.save()
                updated += 1
            else:
                module = CourseModule.objects.create(course=course, **fields)
                created += 1
            kept.add(str(module.id))

            if 'lessons' in data and data['lessons'] is not None:
                CourseService._sync_lessons(module, data['lessons'])

        removed = [m for key, m in existing.items() if key not in kept]
        files = [
            lesson.file
            for lesson in Lesson.objects.filter(module__in=removed)
            if lesson.file
        ]
        for module in removed:
            module.delete()
        for f in files:
            _delete_file(f)

        logger.info(
            f"Synced modules for course {course.id}: "
            f"{created} created, {updated} updated, {len(removed)} deleted"
        )

        return list(course.modules.order_by('sort_order', 'created_at'))

    @staticmethod
    def _sync_lessons(module: CourseModule, lessons: List[Dict[str, Any]]) -> None:
        existing = {str(lesson.id): lesson for lesson in module.lessons.all()}
        kept = set()

        for position, data in enumerate(lessons):
            lesson_id = str(data['id']) if data.get('id') else None
            fields = {k: data.get(k) for k in LESSON_FIELDS}
            if fields['sort_order'] is None:
                fields['sort_order'] = position

            if lesson_id in existing:
                lesson = existing[lesson_id]
                _apply_updates(lesson, fields, LESSON_FIELDS)
                lesson.save()
            else:
                lesson = Lesson.objects.create(
                    module=module,
                    **{k: v for k, v in fields.items() if v is not None}
                )
            kept.add(str(lesson.id))

        for key, lesson in existing.items():
            if key not in kept:
                _delete_file(lesson.file)
                lesson.delete()

    # =========================================================================
    # LESSON MANAGEMENT
    # =========================================================================

    @staticmethod
    def get_lesson(
        lesson_id: str,
        instructor_id: str,
        module_id: str = None,
        for_update: bool = False
    ) -> Lesson:
        queryset = Lesson.objects.select_related('module__course')
        if for_update:
            queryset = queryset.select_for_update(of=('self',))

        filters = {'id': lesson_id, 'module__course__instructor_id': instructor_id}
        if module_id is not None:
            filters['module_id'] = module_id

        return get_or_not_found(queryset, 'Lesson', **filters)

    @staticmethod
    def list_lessons(module_id: str, instructor_id: str, course_id: str = None) -> QuerySet:
        module = CourseService.get_module(module_id, instructor_id, course_id)
        return module.lessons.order_by('sort_order', 'created_at')

    @staticmethod
    @transaction.atomic
    def add_lesson(
        module_id: str,
        instructor_id: str,
        title: str,
        course_id: str = None,
        content_type: str = LessonContentType.VIDEO,
        content_url: str = '',
        description: str = '',
        duration_minutes: int = None,
        sort_order: int = None
    ) -> Lesson:
        """
        Add a lesson (usually a video link) to a module.

        Returns:
            Created lesson
        """
        module = CourseService.get_module(module_id, instructor_id, course_id, for_update=True)

        if sort_order is None:
            sort_order = module.lessons.count()

        lesson = Lesson.objects.create(
            module=module,
            title=title,
            description=description or '',
            content_type=content_type or LessonContentType.VIDEO,
            content_url=content_url or '',
            duration_minutes=duration_minutes,
            sort_order=sort_order,
        )

        logger.info(f"Created lesson: {lesson.id} in module {module.id}")

        return lesson

    @staticmethod
    @transaction.atomic
    def upload_lesson_file(
        module_id: str,
        instructor_id: str,
        file,
        course_id: str = None,
        title: str = None,
        description: str = '',
        sort_order: int = None
    ) -> Lesson:
        """
        Store an uploaded document (pdf, doc, docx) as a resource lesson.

        Args:
            module_id: Module ID
            instructor_id: Instructor ID
            file: Uploaded file, already validated for type and size
            course_id: Optional course the module must belong to
            title: Lesson title; defaults to the file name without extension
            description: Lesson description
            sort_order: Position; defaults to the end of the module

        Returns:
            Created lesson
        """
        module = CourseService.get_module(module_id, instructor_id, course_id, for_update=True)

        if sort_order is None:
            sort_order = module.lessons.count()

        if not title:
            title = os.path.splitext(os.path.basename(file.name))[0] or file.name

        lesson = Lesson.objects.create(
            module=module,
            title=title,
            description=description or '',
            content_type=LessonContentType.RESOURCE,
            file=file,
            sort_order=sort_order,
        )

        logger.info(f"Uploaded lesson file: {lesson.id} ({lesson.file.name}) in module {module.id}")

        return lesson

    @staticmethod
    @transaction.atomic
    def update_lesson(
        lesson_id: str,
        instructor_id: str,
        module_id: str = None,
        **updates
    ) -> Lesson:
        lesson = CourseService.get_lesson(lesson_id, instructor_id, module_id, for_update=True)

        _apply_updates(lesson, updates, LESSON_FIELDS)
        lesson.save()

        logger.info(f"Updated lesson: {lesson.id}")

        return lesson

    @staticmethod
    @transaction.atomic
    def delete_lesson(
        lesson_id: str,
        instructor_id: str,
        module_id: str = None
    ) -> None:
        """Delete a lesson and its stored file, if any."""
        lesson = CourseService.get_lesson(lesson_id, instructor_id, module_id, for_update=True)

        stored = lesson.file
        lesson.delete()
        _delete_file(stored)

        logger.info(f"Deleted lesson: {lesson_id}")

    # =========================================================================
    # BADGES
    # =========================================================================

    @staticmethod
    def get_course_badges(course_id: str, instructor_id: str) -> QuerySet:
        course = CourseService.get_course(course_id, instructor_id)
        return (
            CourseBadge.objects
            .filter(course=course)
            .select_related('badge')
            .order_by('badge__name')
        )

    @staticmethod
    @transaction.atomic
    def assign_badges(
        course_id: str,
        instructor_id: str,
        badge_ids: List[str]
    ) -> QuerySet:
        """
        Replace the badges of a course.

        Badges already assigned keep their assignment date.

        Args:
            course_id: Course ID
            instructor_id: Instructor ID
            badge_ids: Complete list of badge ids the course should carry

        Returns:
            Badge assignments after the change
        """
        course = CourseService.get_course(course_id, instructor_id, for_update=True)

        try:
            ids = validate_unique_list(validate_uuid_list(badge_ids, 'badge_ids'), 'badge_ids')
        except DjangoValidationError as e:
            raise ValidationException({'badge_ids': e.messages})

        badges = list(Badge.objects.filter(id__in=ids))
        if len(badges) != len(ids):
            known = {b.id for b in badges}
            unknown = [str(i) for i in ids if i not in known]
            raise ValidationException({'badge_ids': [f"Unknown badge: {i}" for i in unknown]})

        course.badges.set(badges)

        logger.info(f"Assigned {len(badges)} badges to course {course.id}")

        return CourseService.get_course_badges(course_id, instructor_id)
