# catalog/models/__init__.py

from .asset import DigitalAsset

__all__ = ["DigitalAsset"]
