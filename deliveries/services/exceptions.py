# deliveries/services/exceptions.py


class DeliveryError(Exception):
    """Base delivery exception"""


class DeliveryValidationError(DeliveryError):
    pass


class DeliveryPermissionError(DeliveryError):
    pass


class DeliveryStateError(DeliveryError):
    pass
