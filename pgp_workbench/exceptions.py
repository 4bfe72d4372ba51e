"""
PGP workbench exception hierarchy.

All exceptions inherit from PGPWorkbenchError for easy catching.
The CryptoError branch is raised by PGP backends and is what the error
classifier maps onto user-facing error kinds.
"""

from typing import Any


class PGPWorkbenchError(Exception):
    """Base exception for all pgp_workbench errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class CryptoError(PGPWorkbenchError):
    """Cryptographic operation failed."""


class KeyFormatError(CryptoError):
    """Key text could not be parsed, or is the wrong kind of key."""

    def __init__(self, message: str, *, expected: str | None = None) -> None:
        super().__init__(message, expected=expected)
        self.expected = expected


class MessageFormatError(CryptoError):
    """Message, signature or ciphertext could not be parsed."""


class PassphraseError(CryptoError):
    """Passphrase-related failure."""


class WrongPassphraseError(PassphraseError):
    """The passphrase does not unlock the private key."""


class PassphraseRequiredError(PassphraseError):
    """The private key is protected and no passphrase was supplied."""

    def __init__(self, message: str = "Passphrase required to unlock the private key") -> None:
        super().__init__(message)


class SignatureMismatchError(CryptoError):
    """A signature was checked and did not match."""


class RecipientMismatchError(CryptoError):
    """The message was not encrypted to the supplied key."""


class OperationError(CryptoError):
    """Backend reported a failure with no more specific category."""


class WorkflowError(PGPWorkbenchError):
    """Workflow misuse by the caller."""


class MissingInputError(WorkflowError):
    """A required input was left empty."""

    def __init__(self, message: str, *, input_name: str) -> None:
        super().__init__(message, input_name=input_name)
        self.input_name = input_name


class UnknownFieldError(WorkflowError):
    """A field name that the workflow does not define."""

    def __init__(self, message: str, *, field: str) -> None:
        super().__init__(message, field=field)
        self.field = field
