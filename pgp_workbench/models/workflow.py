"""
Workflow state models.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from types import MappingProxyType

from pgp_workbench.models.errors import ClassifiedError, OperationKind
from pgp_workbench.models.keys import KeyInfo


class WorkflowStatus(StrEnum):
    """Position of a workflow in its state machine."""

    IDLE = "idle"
    VALIDATING = "validating"
    NEEDS_PASSPHRASE = "needs-passphrase"
    READY = "ready"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True, kw_only=True)
class VerificationResult:
    """
    Outcome of a signature check.

    An invalid signature is a normal result, not a workflow failure.

    Attributes:
        valid: Whether a signature by the supplied key matched.
        signed_by: Primary user ID of the signing key.
        signer_key_id: Key ID recorded in the signature.
        signed_at: Signature creation time.
        message: The signed content, for clear-signed and inline-signed input.
        error: Why the signature is not valid.
    """

    valid: bool
    signed_by: str | None = None
    signer_key_id: str | None = None
    signed_at: datetime | None = None
    message: str | None = None
    error: str | None = None


@dataclass(frozen=True, kw_only=True)
class WorkflowState:
    """
    Read-only snapshot of a workflow.

    Text fields are decoded copies; the live values stay inside the session.
    """

    operation: OperationKind
    status: WorkflowStatus
    fields: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    derived_key_info: KeyInfo | None = None
    output: str | None = None
    verification: VerificationResult | None = None
    last_error: ClassifiedError | None = None
    is_busy: bool = False
    needs_passphrase: bool = False
