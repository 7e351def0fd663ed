"""
Shared API response envelope.

Success: {success: true, data, message}
Error:   {success: false, message, error, details}
"""
import logging

from django.conf import settings
from django.core.exceptions import PermissionDenied
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException, AuthenticationFailed, NotAuthenticated, Throttled,
    ValidationError as DRFValidationError
)
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

logger = logging.getLogger(__name__)


def success_response(data=None, message: str = '', status_code: int = status.HTTP_200_OK, **extra):
    body = {'success': True, 'data': data, 'message': message}
    body.update(extra)
    return Response(body, status=status_code)


def error_response(message: str, error: str, details=None, status_code: int = status.HTTP_400_BAD_REQUEST):
    return Response(
        {
            'success': False,
            'message': message,
            'error': error,
            'details': details or {},
        },
        status=status_code
    )


class EnvelopeAPIView(APIView):
    """
    Base view with error handling.

    Subclasses set `domain_error` to the base exception of their app; those
    errors are rendered with their own status code and error code.
    """
    permission_classes = [IsAuthenticated]
    domain_error = None
    error_context = 'handling request'

    def handle_exception(self, exc):
        if self.domain_error is not None and isinstance(exc, self.domain_error):
            logger.warning(f"{self.__class__.__name__}: {exc.message}")
            body = exc.to_dict()
            return error_response(
                body['message'], body['error'], body['details'], status_code=exc.status_code
            )

        if isinstance(exc, DRFValidationError):
            return error_response(
                'Invalid request parameters',
                'validation_error',
                exc.detail,
                status_code=status.HTTP_400_BAD_REQUEST
            )

        if isinstance(exc, Throttled):
            return error_response(
                'Too many requests',
                'rate_limited',
                {'retry_after': exc.wait},
                status_code=status.HTTP_429_TOO_MANY_REQUESTS
            )

        if isinstance(exc, (NotAuthenticated, AuthenticationFailed)):
            return super().handle_exception(exc)

        if isinstance(exc, APIException):
            return error_response(
                str(exc.detail),
                exc.default_code,
                status_code=exc.status_code
            )

        if isinstance(exc, Http404):
            return error_response(
                str(exc) or 'Not found',
                'not_found',
                status_code=status.HTTP_404_NOT_FOUND
            )

        if isinstance(exc, PermissionDenied):
            return error_response(
                str(exc) or 'Permission denied',
                'permission_denied',
                status_code=status.HTTP_403_FORBIDDEN
            )

        logger.exception(f"Error {self.error_context}")
        return error_response(
            'Internal server error',
            str(exc) if settings.DEBUG else 'Internal server error',
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )
