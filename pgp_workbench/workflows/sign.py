"""Sign workflow."""

from pgp_workbench.config import WorkbenchConfig
from pgp_workbench.crypto.protocol import PGPBackend
from pgp_workbench.models.errors import OperationKind
from pgp_workbench.services.error_classifier import ErrorClassifier
from pgp_workbench.services.key_inspector import KeyInspector
from pgp_workbench.workflows.base import Workflow


class SignWorkflow(Workflow):
    """
    Sign a message with a private key.

    Fields: private_key, passphrase, message. Produces a clear-signed
    PGP SIGNED MESSAGE, or only a PGP SIGNATURE when detached is set.
    The message is signed exactly as entered.
    """

    operation = OperationKind.SIGN
    field_names = ("private_key", "passphrase", "message")
    key_field = "private_key"
    key_label = "private key"
    requires_private_key = True
    uses_passphrase = True

    def __init__(
        self,
        backend: PGPBackend | None = None,
        *,
        config: WorkbenchConfig | None = None,
        inspector: KeyInspector | None = None,
        classifier: ErrorClassifier | None = None,
    ) -> None:
        super().__init__(backend, config=config, inspector=inspector, classifier=classifier)
        self._detached = self._config.default_detached

    @property
    def detached(self) -> bool:
        return self._detached

    def set_detached(self, detached: bool) -> None:
        """Choose between detached and clear-signed output. Drops a previous output."""
        if detached != self._detached:
            self._session.output = None
        self._detached = detached

    def _execute(self) -> str:
        detached = self._detached
        with self._session.borrow("private_key", "passphrase", "message") as (
            key_text,
            passphrase,
            message,
        ):
            key = self._backend.parse_key(self._armored(key_text))
            return self._backend.sign(
                message.text,
                key,
                self._passphrase_or_none(passphrase),
                detached=detached,
            )
