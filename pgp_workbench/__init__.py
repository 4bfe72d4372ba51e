"""
PGP Workbench.

Guided encrypt, decrypt, sign, verify and key inspection workflows on top of
an OpenPGP library, with field-targeted error reporting and wiping of secret
inputs.

Example:
    ```python
    from pgp_workbench import PGPWorkbench

    async with PGPWorkbench() as workbench:
        sign = workbench.sign()
        sign.set_field("private_key", armored_private_key)
        sign.set_field("passphrase", "correct horse")
        sign.set_field("message", "Hello")

        signed = await sign.submit()

        verify = workbench.verify()
        verify.set_field("public_key", armored_public_key)
        verify.set_field("signed_message", signed)
        result = await verify.submit()
        print(result.valid, result.signed_by)
    ```
"""

from pgp_workbench.client import PGPWorkbench
from pgp_workbench.config import WorkbenchConfig
from pgp_workbench.exceptions import (
    CryptoError,
    KeyFormatError,
    MessageFormatError,
    MissingInputError,
    OperationError,
    PassphraseError,
    PassphraseRequiredError,
    PGPWorkbenchError,
    RecipientMismatchError,
    SignatureMismatchError,
    UnknownFieldError,
    WorkflowError,
    WrongPassphraseError,
)
from pgp_workbench.models import (
    Capability,
    ClassifiedError,
    ErrorKind,
    ExpiryStatus,
    FieldTag,
    KeyInfo,
    KeyType,
    OperationKind,
    SubkeyInfo,
    VerificationResult,
    WorkflowState,
    WorkflowStatus,
)
from pgp_workbench.workflows import (
    DecryptWorkflow,
    EncryptWorkflow,
    InspectWorkflow,
    SignWorkflow,
    VerifyWorkflow,
)

__version__ = "0.1.0"

__all__ = [
    # Main facade
    "PGPWorkbench",
    "WorkbenchConfig",
    # Workflows
    "EncryptWorkflow",
    "DecryptWorkflow",
    "SignWorkflow",
    "VerifyWorkflow",
    "InspectWorkflow",
    # Models
    "KeyType",
    "Capability",
    "ExpiryStatus",
    "KeyInfo",
    "SubkeyInfo",
    "OperationKind",
    "ErrorKind",
    "FieldTag",
    "ClassifiedError",
    "WorkflowStatus",
    "WorkflowState",
    "VerificationResult",
    # Exceptions
    "PGPWorkbenchError",
    "CryptoError",
    "KeyFormatError",
    "MessageFormatError",
    "PassphraseError",
    "WrongPassphraseError",
    "PassphraseRequiredError",
    "SignatureMismatchError",
    "RecipientMismatchError",
    "OperationError",
    "WorkflowError",
    "MissingInputError",
    "UnknownFieldError",
]
