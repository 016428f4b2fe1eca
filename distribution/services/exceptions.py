# distribution/services/exceptions.py


class DistributionError(Exception):
    """Base distribution exception"""


class BidValidationError(DistributionError):
    pass


class BidPermissionError(DistributionError):
    pass


class BidStateError(DistributionError):
    pass


class AllocationError(DistributionError):
    """Base allocator exception"""


class OverAllocationError(AllocationError):
    pass


class DuplicateAssignmentError(AllocationError):
    pass


class AssignmentStateError(DistributionError):
    pass
