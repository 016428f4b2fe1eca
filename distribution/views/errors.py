# distribution/views/errors.py

from rest_framework import status
from rest_framework.response import Response

from distribution.services.exceptions import (
    AssignmentStateError,
    BidPermissionError,
    BidStateError,
    BidValidationError,
    DistributionError,
    DuplicateAssignmentError,
    OverAllocationError,
)

_STATUS_BY_ERROR = (
    (BidValidationError, status.HTTP_400_BAD_REQUEST),
    (BidPermissionError, status.HTTP_403_FORBIDDEN),
    (OverAllocationError, status.HTTP_409_CONFLICT),
    (DuplicateAssignmentError, status.HTTP_409_CONFLICT),
    (BidStateError, status.HTTP_409_CONFLICT),
    (AssignmentStateError, status.HTTP_409_CONFLICT),
)


def distribution_error_response(exc: DistributionError) -> Response:
    for exc_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, exc_type):
            return Response({"detail": str(exc)}, status=code)
    return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
