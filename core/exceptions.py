from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response
from rest_framework import status
import logging

logger = logging.getLogger("volunlink.core")


class ServiceError(APIException):
    """
    Base class for business-rule failures raised by the service layer.

    Every subclass carries a stable machine-checkable ``code`` plus a
    human-readable message, so callers outside HTTP (tasks, shell, tests)
    can branch on the kind without parsing text.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request could not be processed."
    default_code = "error"

    def __init__(self, message=None, code=None):
        super().__init__(detail=message, code=code or self.default_code)
        self.code = code or self.default_code
        self.message = str(self.detail)

    def __str__(self):
        return self.message


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class Forbidden(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have permission to perform this action."
    default_code = "forbidden"


class ValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."
    default_code = "validation_error"


class InvalidState(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Operation not allowed in the current state."
    default_code = "invalid_state"


class Conflict(InvalidState):
    default_detail = "Conflicting registration already exists."
    default_code = "conflict"


class CapacityExceeded(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Event is full."
    default_code = "capacity_exceeded"


class AlreadyFinalized(InvalidState):
    default_detail = "Attendance has already been finalized for this event."
    default_code = "already_finalized"


class AlreadySubmitted(InvalidState):
    default_detail = "Feedback already submitted for this event."
    default_code = "already_submitted"


def custom_exception_handler(exc, context):
    """
    Wrap DRF + Django exceptions into a consistent response format.

    Success responses (2xx) are not touched.
    Only errors come through here.
    """
    if isinstance(exc, ServiceError):
        logger.info(f"Service error {exc.code}: {exc.message}")
        return Response(
            {
                "success": False,
                "status_code": exc.status_code,
                "errors": {"code": exc.code, "detail": exc.message},
            },
            status=exc.status_code,
        )

    response = drf_exception_handler(exc, context)

    # If DRF handled it, wrap it
    if response is not None:
        return Response(
            {
                "success": False,
                "status_code": response.status_code,
                "errors": response.data,
            },
            status=response.status_code,
        )

    # Unhandled exceptions -> 500
    logger.exception("Unhandled API exception", exc_info=exc)

    return Response(
        {
            "success": False,
            "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
            "errors": {"detail": "Internal server error."},
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
