"""
Error taxonomy for resource reconciliation.

Transport faults are not wrapped: whatever botocore raises for a failed
provider call reaches the caller as-is. TRANSPORT_FAULTS names those types so
a driver can tell them apart from the faults below.
"""

from typing import Any, Dict, List

from botocore.exceptions import BotoCoreError, ClientError

TRANSPORT_FAULTS = (ClientError, BotoCoreError)


class ReconcileError(Exception):
    """Base class for all reconciliation faults."""


class CardinalityFault(ReconcileError):
    """Raised when a tag lookup expected to identify one object does not."""

    def __init__(self, kind: str, expected: int, found: int, filters: List[Dict[str, Any]]):
        self.kind = kind
        self.expected = expected
        self.found = found
        self.filters = filters
        rendered = ", ".join(
            f"{f['Name']}={','.join(f['Values'])}" for f in filters
        )
        super().__init__(
            f"Found [{found}] {kind} objects for filter [{rendered}], expected [{expected}]"
        )


class MissingPrerequisite(ReconcileError):
    """Raised when a sibling resource has not populated a required identifier."""


class MissingIdentifier(ReconcileError):
    """Raised when deleting a resource that was never created."""


class ComparisonError(ReconcileError):
    """Raised when the comparator is handed something other than two snapshots of one kind."""


class DuplicateResource(ReconcileError):
    """Raised when two resources of one kind would share a logical name."""
