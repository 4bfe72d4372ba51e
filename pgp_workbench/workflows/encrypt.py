"""Encrypt workflow."""

from pgp_workbench.config import WorkbenchConfig
from pgp_workbench.crypto.protocol import PGPBackend
from pgp_workbench.exceptions import KeyFormatError
from pgp_workbench.models.errors import ClassifiedError, OperationKind
from pgp_workbench.models.keys import KeyInfo
from pgp_workbench.services.error_classifier import ErrorClassifier
from pgp_workbench.services.key_inspector import KeyInspector
from pgp_workbench.workflows.base import Workflow


class EncryptWorkflow(Workflow):
    """
    Encrypt a message to one or more public keys.

    Fields: public_key, message. The public_key field may hold several
    concatenated PUBLIC KEY BLOCKs; every one of them becomes a recipient and
    must have an encryption-capable primary key or subkey. There is no
    passphrase step.
    """

    operation = OperationKind.ENCRYPT
    field_names = ("public_key", "message")
    key_field = "public_key"
    key_label = "public key"

    def __init__(
        self,
        backend: PGPBackend | None = None,
        *,
        config: WorkbenchConfig | None = None,
        inspector: KeyInspector | None = None,
        classifier: ErrorClassifier | None = None,
    ) -> None:
        super().__init__(backend, config=config, inspector=inspector, classifier=classifier)
        self._recipients: tuple[KeyInfo, ...] = ()

    @property
    def recipients(self) -> tuple[KeyInfo, ...]:
        """Key info of every validated recipient, in field order."""
        return self._recipients

    def _on_key_changed(self) -> None:
        self._recipients = ()

    def _on_key_validated(self, infos: tuple[KeyInfo, ...]) -> None:
        self._recipients = infos

    def _inspect_key(self) -> tuple[KeyInfo, ...] | ClassifiedError:
        with self._session.borrow(self.key_field) as (key_text,):
            blocks = self._inspector.split_blocks(key_text.text) if not key_text.is_blank() else []
        if len(blocks) <= 1:
            return super()._inspect_key()

        recipients = []
        for block in blocks:
            result = self._inspector.inspect(block, self.operation)
            if isinstance(result, ClassifiedError):
                return result
            recipients.append(result)
        return tuple(recipients)

    def _check_key(self, info: KeyInfo) -> None:
        for recipient in self._recipients or (info,):
            super()._check_key(recipient)
            if not recipient.can_encrypt:
                msg = f"Key {recipient.key_id} cannot be used for encryption."
                raise KeyFormatError(msg, expected="public")

    def _execute(self) -> str:
        with self._session.borrow("public_key", "message") as (key_text, message):
            blocks = self._inspector.split_blocks(key_text.text)
            recipients = [self._backend.parse_key(block) for block in blocks]
            return self._backend.encrypt(message.text, recipients)
