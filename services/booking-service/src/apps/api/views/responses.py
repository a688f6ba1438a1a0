# services/booking-service/src/apps/api/views/responses.py
"""
Scheduling Error Responses

Maps engine rejections onto HTTP responses using the shared error envelope.
"""

from rest_framework import status
from rest_framework.response import Response

from apps.core.services.exceptions import RejectionReason
from shared.common.exceptions import error_envelope

REJECTION_STATUS = {
    RejectionReason.CONFLICT: status.HTTP_409_CONFLICT,
    RejectionReason.INVALID_INTERVAL: status.HTTP_400_BAD_REQUEST,
    RejectionReason.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    RejectionReason.NOT_FOUND: status.HTTP_404_NOT_FOUND,
}


def rejection_response(rejected, request) -> Response:
    """
    Response for a Rejected outcome or a raised SchedulingError.

    Both carry reason, code, message and details.
    """
    return Response(
        error_envelope(
            rejected.code or rejected.reason.value.upper(),
            rejected.message,
            rejected.details,
            getattr(request, 'request_id', None)
        ),
        status=REJECTION_STATUS.get(rejected.reason, status.HTTP_400_BAD_REQUEST)
    )
