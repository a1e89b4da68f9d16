"""
Service errors and the custom exception handler for Django REST Framework.
"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    ValidationError as DRFValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler

from common.store import StoreError

logger = logging.getLogger(__name__)


class ServiceError(APIException):
    """Base class for failures surfaced by the service layer."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'The request could not be completed.'
    default_code = 'error'


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'The requested resource was not found.'
    default_code = 'not_found'


class SelfRequest(ServiceError):
    default_detail = 'You cannot send a friend request to yourself.'
    default_code = 'self_request'


class Duplicate(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Friend request already sent.'
    default_code = 'duplicate_request'


class AlreadyFriends(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'You are already friends with this user.'
    default_code = 'already_friends'


class AlreadyResolved(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'This friend request has already been answered.'
    default_code = 'request_resolved'


class Unauthorized(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'You are not authorized to perform this action.'
    default_code = 'unauthorized'


class SharingDisabled(ServiceError):
    default_detail = 'Location sharing is turned off.'
    default_code = 'sharing_disabled'


class StoreUnavailable(ServiceError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'The data store is unavailable. Please try again later.'
    default_code = 'store_error'


def custom_exception_handler(exc, context):
    """
    Custom exception handler that returns consistent JSON error responses.

    Response format:
    {
        "success": false,
        "error": {
            "code": "error_code",
            "message": "Human-readable message",
            "details": { ... }  // optional, for field-level validation errors
        }
    }
    """
    # Convert Django ValidationError to DRF ValidationError
    if isinstance(exc, DjangoValidationError):
        exc = DRFValidationError(detail=exc.message_dict if hasattr(exc, 'message_dict') else exc.messages)

    if isinstance(exc, StoreError):
        logger.error(
            'Store failure in %s: %s',
            context.get('view', 'unknown view'),
            exc,
        )
        exc = StoreUnavailable()

    # Call DRF's default exception handler first
    response = exception_handler(exc, context)

    if response is None:
        # Unhandled exception
        logger.exception(
            'Unhandled exception in %s',
            context.get('view', 'unknown view'),
            exc_info=exc,
        )
        return Response(
            {
                'success': False,
                'error': {
                    'code': 'internal_error',
                    'message': 'An unexpected error occurred. Please try again later.',
                },
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    response.data = {
        'success': False,
        'error': _format_error(exc, response),
    }
    return response


def _format_error(exc, response):
    """Format the error payload based on exception type."""
    if isinstance(exc, DRFValidationError):
        return {
            'code': 'validation_error',
            'message': 'Invalid input.',
            'details': response.data,
        }

    if isinstance(exc, Http404):
        return {
            'code': 'not_found',
            'message': 'The requested resource was not found.',
        }

    if isinstance(exc, APIException):
        return {
            'code': exc.default_code if hasattr(exc, 'default_code') else 'error',
            'message': str(exc.detail) if hasattr(exc, 'detail') else str(exc),
        }

    return {
        'code': 'error',
        'message': 'An error occurred.',
    }
