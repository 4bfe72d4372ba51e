"""
Domain models for the PGP workbench.

These are immutable (frozen) dataclasses and string enums.
"""

from pgp_workbench.models.errors import (
    ClassifiedError,
    ErrorKind,
    FieldTag,
    OperationKind,
)
from pgp_workbench.models.keys import (
    Capability,
    ExpiryStatus,
    KeyInfo,
    KeyType,
    SubkeyInfo,
)
from pgp_workbench.models.workflow import (
    VerificationResult,
    WorkflowState,
    WorkflowStatus,
)

__all__ = [
    # Keys
    "KeyType",
    "Capability",
    "ExpiryStatus",
    "KeyInfo",
    "SubkeyInfo",
    # Errors
    "OperationKind",
    "ErrorKind",
    "FieldTag",
    "ClassifiedError",
    # Workflow
    "WorkflowStatus",
    "WorkflowState",
    "VerificationResult",
]
