# distribution/models/__init__.py

from .assignment import DistributionAssignment
from .bid import DistributionBid

__all__ = ["DistributionBid", "DistributionAssignment"]
