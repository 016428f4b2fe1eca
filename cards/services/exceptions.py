# cards/services/exceptions.py


class CardError(Exception):
    """Base Command Card exception"""


class CardPermissionError(CardError):
    pass


class CardStateError(CardError):
    pass


class IssuanceError(CardError):
    pass


class InsufficientPoolError(IssuanceError):
    pass


# ---------------- REDEMPTION ----------------
class RedemptionError(CardError):
    """Base redemption exception"""


class InvalidSerialError(RedemptionError):
    pass


class InvalidDisplayIdError(RedemptionError):
    pass


class InvalidPublicKeyError(RedemptionError):
    pass


class CredentialMismatchError(RedemptionError):
    pass


class CardNotActiveError(RedemptionError):
    pass


class AlreadyRedeemedError(RedemptionError):
    pass


class AlreadyClaimedError(RedemptionError):
    pass


class RedemptionConflictError(RedemptionError):
    pass
