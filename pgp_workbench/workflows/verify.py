"""Verify workflow."""

from pgp_workbench.models.errors import OperationKind
from pgp_workbench.models.workflow import VerificationResult
from pgp_workbench.workflows.base import Workflow


class VerifyWorkflow(Workflow):
    """
    Check a signature against a public key.

    Fields: public_key, signed_message, signature. With signature empty,
    signed_message must be a clear-signed or inline-signed message. With a
    detached signature, signed_message is the signed data, used verbatim.

    A signature that does not match is a SUCCEEDED outcome with
    VerificationResult.valid set to False.
    """

    operation = OperationKind.VERIFY
    field_names = ("public_key", "signed_message", "signature")
    key_field = "public_key"
    message_field = "signed_message"
    key_label = "public key"

    @property
    def verification(self) -> VerificationResult | None:
        return self._session.verification

    def _execute(self) -> VerificationResult:
        with self._session.borrow("public_key", "signed_message", "signature") as (
            key_text,
            signed_message,
            signature,
        ):
            key = self._backend.parse_key(self._armored(key_text))
            if signature.is_blank():
                return self._backend.verify(self._armored(signed_message), key)
            return self._backend.verify(signed_message.text, key, self._armored(signature))
