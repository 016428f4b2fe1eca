# deliveries/views/errors.py

from rest_framework import status
from rest_framework.response import Response

from deliveries.services.exceptions import (
    DeliveryError,
    DeliveryPermissionError,
    DeliveryStateError,
)


def delivery_error_response(exc: DeliveryError) -> Response:
    if isinstance(exc, DeliveryPermissionError):
        code = status.HTTP_403_FORBIDDEN
    elif isinstance(exc, DeliveryStateError):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_400_BAD_REQUEST
    return Response({"detail": str(exc)}, status=code)
