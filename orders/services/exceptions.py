# orders/services/exceptions.py


class OrderError(Exception):
    """Base order exception"""


class OrderValidationError(OrderError):
    pass


class OrderPermissionError(OrderError):
    pass


class OrderStateError(OrderError):
    pass
