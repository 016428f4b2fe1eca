# earnings/services/exceptions.py


class EarningsError(Exception):
    """Base earnings exception"""


class WithdrawalError(EarningsError):
    pass


class InsufficientBalanceError(WithdrawalError):
    pass


class WithdrawalStateError(WithdrawalError):
    pass


class WithdrawalPermissionError(WithdrawalError):
    pass
