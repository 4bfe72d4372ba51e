"""
PGP backend protocol definition.

This is the seam between the workflows and the library that performs the actual
OpenPGP cryptography. Implementations raise the CryptoError subclasses from
pgp_workbench.exceptions so failures can be classified without looking at
free-form message text.
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from pgp_workbench.crypto.secure_buffer import SecureBuffer
from pgp_workbench.models.workflow import VerificationResult


@runtime_checkable
class KeyMaterial(Protocol):
    """Protocol for a parsed key object."""

    @property
    def key_id(self) -> str:
        """Get the key ID."""
        ...

    @property
    def fingerprint(self) -> str:
        """Get the key fingerprint."""
        ...

    @property
    def is_public(self) -> bool:
        """Whether the key carries no secret material."""
        ...

    @property
    def is_protected(self) -> bool:
        """Whether the secret material is passphrase-protected."""
        ...


@runtime_checkable
class PGPBackend(Protocol):
    """
    Abstract interface for PGP operations.

    All text in and out is ASCII-armored except plaintext and clear-signed bodies.
    """

    def parse_key(self, armored_key: str) -> KeyMaterial:
        """
        Parse a public or private key from ASCII-armored format.

        Raises:
            KeyFormatError: If the key cannot be parsed.
        """
        ...

    def encrypt(self, plaintext: str, recipients: Sequence[KeyMaterial]) -> str:
        """
        Encrypt a message to one or more public keys.

        Returns:
            ASCII-armored PGP MESSAGE.

        Raises:
            KeyFormatError: If a recipient cannot encrypt.
            OperationError: If encryption fails.
        """
        ...

    def decrypt(
        self,
        ciphertext: str,
        private_key: KeyMaterial,
        passphrase: SecureBuffer | None,
    ) -> str:
        """
        Decrypt an ASCII-armored PGP MESSAGE.

        Raises:
            MessageFormatError: If the message cannot be parsed or is not encrypted.
            PassphraseRequiredError: If the key is protected and no passphrase is given.
            WrongPassphraseError: If the passphrase is incorrect.
            RecipientMismatchError: If the message was not encrypted to this key.
        """
        ...

    def sign(
        self,
        message: str,
        private_key: KeyMaterial,
        passphrase: SecureBuffer | None,
        *,
        detached: bool,
    ) -> str:
        """
        Sign a message.

        Returns:
            A clear-signed PGP SIGNED MESSAGE, or a detached PGP SIGNATURE.

        Raises:
            PassphraseRequiredError: If the key is protected and no passphrase is given.
            WrongPassphraseError: If the passphrase is incorrect.
        """
        ...

    def verify(
        self,
        signed_message: str,
        public_key: KeyMaterial,
        signature: str | None = None,
    ) -> VerificationResult:
        """
        Verify a clear-signed or inline-signed message, or data with a detached signature.

        A signature that does not match is reported through VerificationResult.valid.

        Raises:
            MessageFormatError: If the message or signature cannot be parsed.
        """
        ...
