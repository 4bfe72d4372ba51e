"""
Workflow engine.

A workflow guides one operation from raw input to a result:

    IDLE -> VALIDATING -> (NEEDS_PASSPHRASE | READY) -> RUNNING -> (SUCCEEDED | FAILED)

SUCCEEDED and FAILED re-enter VALIDATING on the next submit. Operation failures
never escape as exceptions; they are classified and returned.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Self, TypeVar

import structlog

from pgp_workbench.config import WorkbenchConfig
from pgp_workbench.core.generation import Generation
from pgp_workbench.crypto.pgpy_backend import PgpyBackend
from pgp_workbench.crypto.protocol import PGPBackend
from pgp_workbench.crypto.secure_buffer import SecureBuffer
from pgp_workbench.exceptions import (
    KeyFormatError,
    MissingInputError,
    PassphraseRequiredError,
)
from pgp_workbench.models.errors import ClassifiedError, OperationKind
from pgp_workbench.models.keys import KeyInfo
from pgp_workbench.models.workflow import VerificationResult, WorkflowState, WorkflowStatus
from pgp_workbench.services.error_classifier import ErrorClassifier
from pgp_workbench.services.key_inspector import KeyInspector
from pgp_workbench.services.session_state import SecureSession

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Result = str | VerificationResult | KeyInfo

PASSPHRASE_FIELD = "passphrase"


class Workflow(ABC):
    """
    Base class for the operation workflows.

    Subclasses declare their fields and implement _execute(), which runs in a
    worker thread with borrowed copies of the secret fields.

    Attributes:
        operation: Operation this workflow performs.
        field_names: Text fields accepted by set_field().
        key_field: Field holding the armored key.
        message_field: Field that must not be empty, None if there is none.
        key_label: Key description used in missing-input errors.
        requires_private_key: Whether the key must carry secret material.
        uses_passphrase: Whether an encrypted key is unlocked with the passphrase field.
    """

    operation: OperationKind
    field_names: tuple[str, ...]
    key_field: str
    message_field: str | None = "message"
    key_label = "key"
    requires_private_key = False
    uses_passphrase = False

    def __init__(
        self,
        backend: PGPBackend | None = None,
        *,
        config: WorkbenchConfig | None = None,
        inspector: KeyInspector | None = None,
        classifier: ErrorClassifier | None = None,
    ) -> None:
        self._config = config or WorkbenchConfig()
        self._backend = backend or PgpyBackend()
        self._classifier = classifier or ErrorClassifier()
        self._inspector = inspector or KeyInspector(self._config, self._classifier)
        self._session = SecureSession(self.field_names)
        self._generation = Generation()
        self._status = WorkflowStatus.IDLE

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *_: object) -> None:
        self.clear_all()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *_: object) -> None:
        self.clear_all()

    # =========================================================================
    # State
    # =========================================================================

    @property
    def status(self) -> WorkflowStatus:
        return self._status

    @property
    def is_busy(self) -> bool:
        return self._session.is_busy

    @property
    def last_error(self) -> ClassifiedError | None:
        return self._session.last_error

    @property
    def derived_key_info(self) -> KeyInfo | None:
        return self._session.derived_key_info

    @property
    def output(self) -> str | None:
        return self._session.output

    @property
    def needs_passphrase(self) -> bool:
        """Whether the validated key is encrypted and this operation must unlock it."""
        info = self._session.derived_key_info
        return self.uses_passphrase and info is not None and info.is_encrypted

    @property
    def state(self) -> WorkflowState:
        """Fresh read-only snapshot."""
        return WorkflowState(
            operation=self.operation,
            status=self._status,
            fields=self._session.snapshot_fields(),
            derived_key_info=self._session.derived_key_info,
            output=self._session.output,
            verification=self._session.verification,
            last_error=self._session.last_error,
            is_busy=self._session.is_busy,
            needs_passphrase=self.needs_passphrase,
        )

    # =========================================================================
    # Caller API
    # =========================================================================

    def set_field(self, name: str, value: str) -> None:
        """
        Store a field value.

        Changing the key field drops the derived key info and the last error and
        returns the workflow to IDLE. A validation or submit still running for
        the previous key is abandoned. Nothing is inspected here.

        Raises:
            UnknownFieldError: If the workflow has no such field.
        """
        self._session.set(name, value)
        if name == self.key_field:
            self._generation.advance()
            self._session.derived_key_info = None
            self._session.last_error = None
            self._on_key_changed()
            self._set_status(WorkflowStatus.IDLE)

    async def validate_key(self) -> KeyInfo | ClassifiedError:
        """
        Inspect the key field.

        Returns:
            KeyInfo on success, ClassifiedError tagged to the key field otherwise.
        """
        self._set_status(WorkflowStatus.VALIDATING)
        token = self._generation.token()
        inspected = await self._run_blocking(self._inspect_key)
        result = inspected if isinstance(inspected, ClassifiedError) else inspected[0]
        if not self._generation.is_current(token):
            logger.warning("Discarding validation of abandoned workflow", operation=str(self.operation))
            return result

        if isinstance(result, ClassifiedError):
            self._fail(result)
            return result

        self._on_key_validated(inspected)
        self._session.derived_key_info = result
        if self.needs_passphrase:
            self._set_status(WorkflowStatus.NEEDS_PASSPHRASE)
        else:
            self._set_status(WorkflowStatus.READY)
        return result

    async def submit(self) -> Result | ClassifiedError | None:
        """
        Run the operation.

        Returns:
            The operation result or a ClassifiedError. None when the call was
            ignored because another submit is running, or when clear_all()
            abandoned this one before it finished.
        """
        if self._session.is_busy:
            logger.debug("Submit ignored, operation in progress", operation=str(self.operation))
            return None

        self._session.is_busy = True
        token = self._generation.token()
        try:
            return await self._submit(token)
        except asyncio.CancelledError:
            if self._generation.is_current(token):
                self._session.clear_results()
                self._set_status(
                    WorkflowStatus.READY if self._session.derived_key_info else WorkflowStatus.IDLE
                )
            logger.info("Operation cancelled", operation=str(self.operation))
            raise
        finally:
            self._session.is_busy = False

    def clear_all(self) -> None:
        """Wipe every field and result and return to IDLE. Abandons a running submit."""
        self._generation.advance()
        self._session.wipe()
        self._on_key_changed()
        self._set_status(WorkflowStatus.IDLE)

    # =========================================================================
    # Engine
    # =========================================================================

    async def _submit(self, token: int) -> Result | ClassifiedError | None:
        self._session.clear_results()

        if self._session.derived_key_info is None:
            validated = await self.validate_key()
            if not self._generation.is_current(token):
                return None
            if isinstance(validated, ClassifiedError):
                return validated

        error = self._check_preconditions()
        if error is not None:
            return self._fail(error)

        return await self._run_operation(token)

    async def _run_operation(self, token: int) -> Result | ClassifiedError | None:
        self._set_status(WorkflowStatus.RUNNING)
        try:
            result = await self._run_blocking(self._execute)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if not self._generation.is_current(token):
                logger.warning(
                    "Discarding failure of abandoned operation",
                    operation=str(self.operation),
                    error_type=type(e).__name__,
                )
                return None
            logger.warning(
                "Operation failed",
                operation=str(self.operation),
                error_type=type(e).__name__,
            )
            return self._fail(self._classifier.classify(e, self.operation))

        if not self._generation.is_current(token):
            logger.warning("Discarding result of abandoned operation", operation=str(self.operation))
            return None

        self._store(result)
        self._set_status(WorkflowStatus.SUCCEEDED)
        logger.info("Operation completed", operation=str(self.operation))
        return result

    def _check_preconditions(self) -> ClassifiedError | None:
        info = self._session.derived_key_info
        if info is None:
            return None
        try:
            self._check_key(info)
            if self.needs_passphrase and self._session.is_empty(PASSPHRASE_FIELD):
                raise PassphraseRequiredError()
            if self.message_field is not None and self._session.is_blank(self.message_field):
                msg = "A message is required."
                raise MissingInputError(msg, input_name="message")
        except (KeyFormatError, PassphraseRequiredError, MissingInputError) as e:
            return self._classifier.classify(e, self.operation)
        return None

    def _check_key(self, info: KeyInfo) -> None:
        """
        Raises:
            KeyFormatError: If the key is the wrong type for this operation.
        """
        if self.requires_private_key and not info.is_private:
            msg = f"A private key is required to {self.operation}."
            raise KeyFormatError(msg, expected="private")
        if not self.requires_private_key and info.is_private:
            msg = f"A public key is required to {self.operation}."
            raise KeyFormatError(msg, expected="public")

    def _inspect_key(self) -> tuple[KeyInfo, ...] | ClassifiedError:
        """Inspect the key field. Runs in a worker thread and must not touch state."""
        with self._session.borrow(self.key_field) as (key_text,):
            if key_text.is_blank():
                msg = f"A {self.key_label} is required."
                return self._classifier.classify(
                    MissingInputError(msg, input_name="key"), self.operation
                )
            result = self._inspector.inspect(key_text.text, self.operation)
        return result if isinstance(result, ClassifiedError) else (result,)

    @abstractmethod
    def _execute(self) -> Result:
        """Run the backend call. Runs in a worker thread; may raise."""

    def _on_key_changed(self) -> None:
        """Hook for subclasses that cache per-key data."""

    def _on_key_validated(self, infos: tuple[KeyInfo, ...]) -> None:
        """Hook called with every inspected key once validation is accepted."""

    def _store(self, result: Result) -> None:
        if isinstance(result, VerificationResult):
            self._session.verification = result
        elif isinstance(result, KeyInfo):
            self._session.derived_key_info = result
        else:
            self._session.output = result

    def _fail(self, error: ClassifiedError) -> ClassifiedError:
        self._session.last_error = error
        self._set_status(WorkflowStatus.FAILED)
        return error

    def _set_status(self, status: WorkflowStatus) -> None:
        if status != self._status:
            logger.debug(
                "Workflow status changed",
                operation=str(self.operation),
                previous=str(self._status),
                status=str(status),
            )
        self._status = status

    async def _run_blocking(self, func: Callable[..., T], *args: Any) -> T:
        if self._config.run_in_thread:
            return await asyncio.to_thread(func, *args)
        return func(*args)

    def _passphrase_or_none(self, passphrase: SecureBuffer) -> SecureBuffer | None:
        if not self.uses_passphrase or not passphrase:
            return None
        return passphrase

    @staticmethod
    def _armored(buffer: SecureBuffer) -> str:
        return buffer.text.strip()
