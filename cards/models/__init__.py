# cards/models/__init__.py

from .access_log import AssetAccessLog
from .card import CommandCard
from .redemption import Redemption

__all__ = ["CommandCard", "Redemption", "AssetAccessLog"]
