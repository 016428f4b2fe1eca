# deliveries/models/__init__.py

from .courier_assignment import CourierAssignment
from .delivery import Delivery

__all__ = ["Delivery", "CourierAssignment"]
