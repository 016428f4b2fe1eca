# keybank/services/exceptions.py


class KeybankError(Exception):
    """Base display-ID / key pool exception"""


class GenerationError(KeybankError):
    pass


class DisplayIdPoolExhausted(KeybankError):
    pass
