# src/shared/common/permissions.py
"""
Role-based permissions for authoring endpoints
"""

import logging
from rest_framework import permissions
from rest_framework.request import Request
from rest_framework.views import APIView

logger = logging.getLogger(__name__)


class IsInstructor(permissions.BasePermission):
    """
    Only users carrying an instructor role (see ``INSTRUCTOR_ROLES``)
    may author courses, modules, lessons and exams.

    Ownership of the individual rows is checked by the services.
    """

    message = 'Only instructors can perform this action.'

    def has_permission(self, request: Request, view: APIView) -> bool:
        user = request.user
        if not user or not user.is_authenticated:
            return False

        if getattr(user, 'is_instructor', False):
            return True

        logger.info(
            f"Denied authoring access to user {getattr(user, 'id', None)}",
            extra={'path': request.path}
        )
        return False
