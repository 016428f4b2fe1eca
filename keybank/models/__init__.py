# keybank/models/__init__.py

from .display_id import DisplayId
from .encryption_key import EncryptionKey

__all__ = ["DisplayId", "EncryptionKey"]
