"""
Failure classification.

Maps exceptions raised by PGP backends and workflows onto the closed ErrorKind
taxonomy, and tags each result with the input it belongs to. Classification is
by exception type (walking the MRO) against a fixed table; message text is never
inspected.
"""

import structlog
from pgpy.errors import PGPDecryptionError, PGPEncryptionError, PGPError

from pgp_workbench.exceptions import (
    KeyFormatError,
    MessageFormatError,
    MissingInputError,
    OperationError,
    PassphraseRequiredError,
    PGPWorkbenchError,
    RecipientMismatchError,
    SignatureMismatchError,
    WrongPassphraseError,
)
from pgp_workbench.models.errors import ClassifiedError, ErrorKind, FieldTag, OperationKind

logger = structlog.get_logger(__name__)

KIND_BY_EXCEPTION: dict[type[BaseException], ErrorKind] = {
    KeyFormatError: ErrorKind.INVALID_KEY_FORMAT,
    WrongPassphraseError: ErrorKind.WRONG_PASSPHRASE,
    PassphraseRequiredError: ErrorKind.PASSPHRASE_REQUIRED,
    MessageFormatError: ErrorKind.INVALID_MESSAGE_FORMAT,
    SignatureMismatchError: ErrorKind.SIGNATURE_MISMATCH,
    RecipientMismatchError: ErrorKind.OPERATION_FAILED,
    OperationError: ErrorKind.OPERATION_FAILED,
    # Raw pgpy failures from backends that do not translate them
    PGPDecryptionError: ErrorKind.WRONG_PASSPHRASE,
    PGPEncryptionError: ErrorKind.OPERATION_FAILED,
    PGPError: ErrorKind.OPERATION_FAILED,
}

KIND_BY_MISSING_INPUT: dict[str, ErrorKind] = {
    "key": ErrorKind.INVALID_KEY_FORMAT,
    "message": ErrorKind.INVALID_MESSAGE_FORMAT,
}

_KEY_FIELD_BY_OPERATION: dict[OperationKind, FieldTag] = {
    OperationKind.ENCRYPT: FieldTag.PUBLIC_KEY,
    OperationKind.DECRYPT: FieldTag.PRIVATE_KEY,
    OperationKind.SIGN: FieldTag.PRIVATE_KEY,
    OperationKind.VERIFY: FieldTag.PUBLIC_KEY,
    OperationKind.INSPECT: FieldTag.NONE,
}

_FIELD_BY_KIND: dict[ErrorKind, FieldTag] = {
    ErrorKind.WRONG_PASSPHRASE: FieldTag.PASSPHRASE,
    ErrorKind.PASSPHRASE_REQUIRED: FieldTag.PASSPHRASE,
    ErrorKind.INVALID_MESSAGE_FORMAT: FieldTag.MESSAGE,
    ErrorKind.SIGNATURE_MISMATCH: FieldTag.MESSAGE,
    ErrorKind.OPERATION_FAILED: FieldTag.NONE,
}

_KEY_FORMAT_MESSAGES: dict[FieldTag, str] = {
    FieldTag.PRIVATE_KEY: "Invalid private key. Paste a complete PGP PRIVATE KEY BLOCK.",
    FieldTag.PUBLIC_KEY: "Invalid public key. Paste a complete PGP PUBLIC KEY BLOCK.",
    FieldTag.NONE: "Invalid key. Paste a complete PGP PUBLIC or PRIVATE KEY BLOCK.",
}

_MESSAGE_FORMAT_MESSAGES: dict[OperationKind, str] = {
    OperationKind.DECRYPT: "Invalid PGP message. Paste a complete PGP MESSAGE block.",
    OperationKind.VERIFY: "Invalid signed message or signature.",
}

_DEFAULT_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.WRONG_PASSPHRASE: "Incorrect passphrase.",
    ErrorKind.PASSPHRASE_REQUIRED: "This key is passphrase-protected. Enter its passphrase.",
    ErrorKind.INVALID_MESSAGE_FORMAT: "Invalid message.",
    ErrorKind.SIGNATURE_MISMATCH: "Signature does not match the message.",
    ErrorKind.OPERATION_FAILED: "The operation failed.",
}


def field_for(kind: ErrorKind, operation: OperationKind) -> FieldTag:
    """Input an error of this kind belongs to within an operation."""
    if kind == ErrorKind.INVALID_KEY_FORMAT:
        return _KEY_FIELD_BY_OPERATION[operation]
    return _FIELD_BY_KIND[kind]


class ErrorClassifier:
    """
    Turns raw failures into ClassifiedError values.

    Example:
        classifier = ErrorClassifier()
        error = classifier.classify(WrongPassphraseError("bad"), OperationKind.DECRYPT)
        assert error.field == FieldTag.PASSPHRASE
    """

    def classify(self, raw_failure: BaseException, context: OperationKind) -> ClassifiedError:
        """
        Classify a failure.

        Args:
            raw_failure: Exception raised by a backend, the key inspector or a workflow.
            context: Operation that was running.

        Returns:
            ClassifiedError with kind, field and display message.
        """
        kind = self._kind_of(raw_failure)
        field = field_for(kind, context)
        error = ClassifiedError(
            kind=kind,
            field=field,
            message=self._message_for(raw_failure, kind, field, context),
        )
        logger.debug(
            "Classified failure",
            operation=str(context),
            kind=str(kind),
            field=str(field),
            error_type=type(raw_failure).__name__,
        )
        return error

    @staticmethod
    def _kind_of(raw_failure: BaseException) -> ErrorKind:
        if isinstance(raw_failure, MissingInputError):
            return KIND_BY_MISSING_INPUT.get(raw_failure.input_name, ErrorKind.OPERATION_FAILED)
        for cls in type(raw_failure).__mro__:
            if cls in KIND_BY_EXCEPTION:
                return KIND_BY_EXCEPTION[cls]
        return ErrorKind.OPERATION_FAILED

    @staticmethod
    def _message_for(
        raw_failure: BaseException,
        kind: ErrorKind,
        field: FieldTag,
        context: OperationKind,
    ) -> str:
        if isinstance(raw_failure, MissingInputError):
            return raw_failure.message
        if isinstance(raw_failure, KeyFormatError) and raw_failure.expected is not None:
            return raw_failure.message
        if kind == ErrorKind.INVALID_KEY_FORMAT:
            return _KEY_FORMAT_MESSAGES[field]
        if kind == ErrorKind.INVALID_MESSAGE_FORMAT:
            return _MESSAGE_FORMAT_MESSAGES.get(context, _DEFAULT_MESSAGES[kind])
        if kind == ErrorKind.OPERATION_FAILED and isinstance(raw_failure, PGPWorkbenchError):
            return raw_failure.message
        return _DEFAULT_MESSAGES[kind]
