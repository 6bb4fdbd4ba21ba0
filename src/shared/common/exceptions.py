# src/shared/common/exceptions.py
"""
API Exceptions and Error Envelope

Every error leaving the API is rendered as::

    {"success": false,
     "error": {"code": ..., "message": ..., "details": ..., "request_id": ...}}

``details`` is present only for field-level validation failures.
"""

import logging
import traceback
from typing import Dict, Any, Optional
from rest_framework import status
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework.exceptions import APIException
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import InterfaceError, OperationalError
from django.conf import settings

logger = logging.getLogger(__name__)

STATUS_CODES = {
    400: 'VALIDATION_ERROR',
    401: 'UNAUTHORIZED',
    403: 'FORBIDDEN',
    404: 'NOT_FOUND',
    405: 'METHOD_NOT_ALLOWED',
    415: 'UNSUPPORTED_MEDIA_TYPE',
}


# =============================================================================
# EXCEPTIONS
# =============================================================================

class BaseAPIException(APIException):
    """Base class carrying a machine-readable ``error_code``"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'An unexpected error occurred.'
    default_code = 'error'
    error_code = 'INTERNAL_ERROR'

    def __init__(self, detail: Optional[str] = None, details: Optional[Dict] = None):
        super().__init__(detail=detail)
        self.details = details


class ValidationException(BaseAPIException):
    """400: input rejected before anything was written"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Validation error.'
    default_code = 'validation_error'
    error_code = 'VALIDATION_ERROR'

    def __init__(self, errors: Dict[str, Any], detail: str = None):
        super().__init__(detail=detail, details=errors)

    @property
    def errors(self) -> Dict[str, Any]:
        return self.details


class NotFoundException(BaseAPIException):
    """404: missing, malformed or not visible to the caller"""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'The requested resource was not found.'
    default_code = 'not_found'
    error_code = 'NOT_FOUND'


class TransientIOException(BaseAPIException):
    """503: storage or network failure; the caller may retry"""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'A temporary storage error occurred. Please try again.'
    default_code = 'transient_io_failure'
    error_code = 'TRANSIENT_IO_FAILURE'


# =============================================================================
# EXCEPTION HANDLER
# =============================================================================

def error_body(code: str, message: str, request_id: str = None, details: Any = None) -> Dict:
    error = {'code': code, 'message': message, 'request_id': request_id}
    if details:
        error['details'] = details
    return {'success': False, 'error': error}


def custom_exception_handler(exc, context) -> Optional[Response]:
    """
    DRF exception handler rendering every failure in the error envelope.

    Database connectivity errors become TransientIOException, Django model
    validation errors become 400s and anything unexpected is logged with
    its traceback and returned as a 500.
    """
    request = context.get('request')
    request_id = getattr(request, 'request_id', None)

    if isinstance(exc, (OperationalError, InterfaceError)):
        logger.error(
            f"Transient storage failure: {exc}",
            extra={'request_id': request_id, 'exception_type': type(exc).__name__}
        )
        exc = TransientIOException()

    if isinstance(exc, DjangoValidationError):
        details = exc.message_dict if hasattr(exc, 'message_dict') else {'detail': exc.messages}
        return Response(
            error_body('VALIDATION_ERROR', 'Validation error', request_id, details),
            status=status.HTTP_400_BAD_REQUEST
        )

    response = exception_handler(exc, context)

    if response is not None:
        code = getattr(exc, 'error_code', None) or STATUS_CODES.get(response.status_code, 'ERROR')
        message, details = _describe(exc, response.data)
        response.data = error_body(code, message, request_id, details)
        return response

    logger.exception(
        f"Unhandled exception: {exc}",
        extra={'request_id': request_id, 'exception_type': type(exc).__name__}
    )

    body = error_body(
        'INTERNAL_ERROR',
        str(exc) if settings.DEBUG else 'An unexpected error occurred. Please try again later.',
        request_id,
    )
    if settings.DEBUG:
        body['error']['traceback'] = traceback.format_exc().split('\n')

    return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


def _describe(exc, data: Any):
    """Split DRF response data into (message, field details)."""
    details = getattr(exc, 'details', None)
    if details:
        return str(exc.detail), details

    if isinstance(data, dict) and 'detail' in data:
        return str(data['detail']), None

    if isinstance(data, dict):
        return 'Validation error', data

    if isinstance(data, list) and data:
        return str(data[0]), None

    return str(data), None
