from .pool import (
    DisplayIdGenerateView,
    DisplayIdListView,
    EncryptionKeyGenerateView,
    EncryptionKeyListView,
    MyKeysView,
)

__all__ = [
    "DisplayIdGenerateView",
    "DisplayIdListView",
    "EncryptionKeyGenerateView",
    "EncryptionKeyListView",
    "MyKeysView",
]
