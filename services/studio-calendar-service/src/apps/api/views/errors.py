# services/studio-calendar-service/src/apps/api/views/errors.py
"""
Translation of service errors into API responses.
"""

from rest_framework import status
from rest_framework.response import Response

from apps.core.services import (
    AuthorizationError,
    BookingConflictError,
    BookingStateError,
    BookingValidationError,
    CalendarServiceError,
    NotFoundError,
    RateUnresolvedError,
    ScheduleConflictError,
)

ERROR_STATUS = {
    BookingValidationError: status.HTTP_400_BAD_REQUEST,
    ScheduleConflictError: status.HTTP_400_BAD_REQUEST,
    BookingStateError: status.HTTP_400_BAD_REQUEST,
    BookingConflictError: status.HTTP_409_CONFLICT,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    RateUnresolvedError: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def service_error_response(exc: CalendarServiceError) -> Response:
    """Response for a service-layer error."""
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    if isinstance(exc, AuthorizationError) and exc.requires_login:
        status_code = status.HTTP_401_UNAUTHORIZED

    body = {
        'error': exc.code,
        'message': exc.message,
    }
    if isinstance(exc, BookingConflictError):
        body['conflicts'] = exc.conflicts
    elif exc.details:
        body['details'] = exc.details

    return Response(body, status=status_code)
