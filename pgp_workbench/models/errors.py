"""
Error classification models.
"""

from dataclasses import dataclass
from enum import StrEnum


class OperationKind(StrEnum):
    """Workflow an error was produced in."""

    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"
    SIGN = "sign"
    VERIFY = "verify"
    INSPECT = "inspect"


class ErrorKind(StrEnum):
    """Closed set of user-facing failure categories."""

    INVALID_KEY_FORMAT = "InvalidKeyFormat"
    WRONG_PASSPHRASE = "WrongPassphrase"
    PASSPHRASE_REQUIRED = "PassphraseRequired"
    INVALID_MESSAGE_FORMAT = "InvalidMessageFormat"
    SIGNATURE_MISMATCH = "SignatureMismatch"
    OPERATION_FAILED = "OperationFailed"


class FieldTag(StrEnum):
    """Input an error should be displayed next to."""

    PRIVATE_KEY = "privateKey"
    PUBLIC_KEY = "publicKey"
    PASSPHRASE = "passphrase"
    MESSAGE = "message"
    NONE = "none"


@dataclass(frozen=True, kw_only=True)
class ClassifiedError:
    """
    A failure mapped onto the user-facing taxonomy.

    Attributes:
        kind: Failure category.
        field: Input the failure belongs to, FieldTag.NONE for general errors.
        message: Human-readable description.
    """

    kind: ErrorKind
    field: FieldTag
    message: str
