"""
OperationReason enum for the diff planning phase.

Every planned operation carries one of three reasons:
1. Missing in destination - the file only exists in the source tree (copy)
2. Size mismatch - the file exists in both trees with different byte sizes (copy)
3. Missing in source - the file only exists in the destination tree (delete)
"""

from enum import Enum


class OperationReason(Enum):
    """Encodes why the diff engine planned an operation."""
    MISSING_IN_DESTINATION = "missing-in-destination"  # Copy: file absent from destination
    SIZE_MISMATCH = "size-mismatch"                    # Copy: byte sizes differ
    MISSING_IN_SOURCE = "missing-in-source"            # Delete: file absent from source

    @property
    def is_copy(self) -> bool:
        """Whether operations with this reason are routed to the copy phase."""
        return self is not OperationReason.MISSING_IN_SOURCE
