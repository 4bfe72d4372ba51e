"""Decrypt workflow."""

from pgp_workbench.models.errors import OperationKind
from pgp_workbench.workflows.base import Workflow


class DecryptWorkflow(Workflow):
    """
    Decrypt a PGP MESSAGE with a private key.

    Fields: private_key, passphrase, message. An encrypted key with an empty
    passphrase fails with PASSPHRASE_REQUIRED before the backend is called.
    """

    operation = OperationKind.DECRYPT
    field_names = ("private_key", "passphrase", "message")
    key_field = "private_key"
    key_label = "private key"
    requires_private_key = True
    uses_passphrase = True

    def _execute(self) -> str:
        with self._session.borrow("private_key", "passphrase", "message") as (
            key_text,
            passphrase,
            ciphertext,
        ):
            key = self._backend.parse_key(self._armored(key_text))
            return self._backend.decrypt(
                self._armored(ciphertext),
                key,
                self._passphrase_or_none(passphrase),
            )
