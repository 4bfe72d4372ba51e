"""
PGP backend implementation using pgpy library.

Every pgpy failure is re-raised as one of the CryptoError subclasses so the
error classifier can map it by type.
"""

import re
import warnings
from collections.abc import Iterator, Sequence
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass

import pgpy
from pgpy.constants import SymmetricKeyAlgorithm
from pgpy.errors import PGPDecryptionError, PGPError

from pgp_workbench.crypto.secure_buffer import SecureBuffer
from pgp_workbench.exceptions import (
    CryptoError,
    KeyFormatError,
    MessageFormatError,
    OperationError,
    PassphraseRequiredError,
    RecipientMismatchError,
    WrongPassphraseError,
)
from pgp_workbench.models.workflow import VerificationResult

_ENCRYPTION_CIPHER = SymmetricKeyAlgorithm.AES256
_MESSAGE_ARMOR = re.compile(r"-----BEGIN PGP (?:MESSAGE|SIGNED MESSAGE)-----")
_SIGNATURE_ARMOR = re.compile(r"-----BEGIN PGP SIGNATURE-----")
_BAD_CHECKSUM_WARNING = "Incorrect crc24"


def normalize_fingerprint(fingerprint: object) -> str:
    """Lowercase hex with no separators."""
    return str(fingerprint).replace(" ", "").lower()


@contextmanager
def _strict_armor() -> Iterator[None]:
    """pgpy only warns about a bad armor checksum; make it an error."""
    with warnings.catch_warnings():
        warnings.filterwarnings("error", message=_BAD_CHECKSUM_WARNING)
        yield


@dataclass
class PgpyKey:
    """Wrapper around pgpy.PGPKey to implement KeyMaterial protocol."""

    _key: pgpy.PGPKey

    @property
    def key_id(self) -> str:
        return normalize_fingerprint(self._key.fingerprint.keyid)

    @property
    def fingerprint(self) -> str:
        return normalize_fingerprint(self._key.fingerprint)

    @property
    def is_public(self) -> bool:
        return self._key.is_public

    @property
    def is_protected(self) -> bool:
        return self._key.is_protected

    @property
    def pgpy_key(self) -> pgpy.PGPKey:
        return self._key


class PgpyBackend:
    """
    PGP backend implementation using pgpy.

    Example:
        backend = PgpyBackend()
        key = backend.parse_key(armored_key)
        plaintext = backend.decrypt(armored_message, key, SecureBuffer.from_text("passphrase"))
    """

    @staticmethod
    def parse_key(armored_key: str) -> PgpyKey:
        """
        Parse a public or private key from ASCII-armored format.

        Args:
            armored_key: ASCII-armored key block.

        Returns:
            PgpyKey wrapper.

        Raises:
            KeyFormatError: If the key cannot be parsed.
        """
        try:
            with _strict_armor():
                key, _ = pgpy.PGPKey.from_blob(armored_key.encode("utf-8"))
        except Exception as e:
            msg = f"Failed to parse key: {e}"
            raise KeyFormatError(msg) from e
        if key.fingerprint is None:
            msg = "Armor block does not contain a key"
            raise KeyFormatError(msg)
        return PgpyKey(_key=key)

    def encrypt(self, plaintext: str, recipients: Sequence[PgpyKey]) -> str:
        """
        Encrypt a message to one or more public keys.

        All recipients share one session key, so a single message is produced.

        Args:
            plaintext: Message text.
            recipients: Recipient keys. Private keys are reduced to their public half.

        Returns:
            ASCII-armored PGP MESSAGE.

        Raises:
            KeyFormatError: If there are no recipients or a recipient cannot encrypt.
            OperationError: If encryption fails.
        """
        if len(recipients) == 0:
            msg = "At least one recipient key is required"
            raise KeyFormatError(msg, expected="public")
        try:
            session_key = _ENCRYPTION_CIPHER.gen_key()
            encrypted = pgpy.PGPMessage.new(plaintext)
            for recipient in recipients:
                encrypted = recipient.pgpy_key.pubkey.encrypt(
                    encrypted, cipher=_ENCRYPTION_CIPHER, sessionkey=session_key
                )
            return str(encrypted)
        except PGPError as e:
            msg = f"Key cannot be used for encryption: {e}"
            raise KeyFormatError(msg, expected="public") from e
        except Exception as e:
            msg = f"Encryption failed: {e}"
            raise OperationError(msg) from e

    def decrypt(
        self,
        ciphertext: str,
        private_key: PgpyKey,
        passphrase: SecureBuffer | None,
    ) -> str:
        """
        Decrypt a PGP message.

        Args:
            ciphertext: ASCII-armored encrypted message.
            private_key: Private key for decryption.
            passphrase: Key passphrase, None if the key is not protected.

        Returns:
            Decrypted message text.

        Raises:
            MessageFormatError: If the message cannot be parsed or is not encrypted.
            PassphraseRequiredError: If the key is protected and no passphrase is given.
            WrongPassphraseError: If the passphrase is incorrect.
            RecipientMismatchError: If the message was not encrypted to this key.
            OperationError: If decryption fails for any other reason.
        """
        key = self._require_private(private_key)
        message = self._parse_message(ciphertext)
        if not message.is_encrypted:
            msg = "Message is not encrypted"
            raise MessageFormatError(msg)
        try:
            with self._unlocked(key, passphrase):
                decrypted = key.decrypt(message)
            return self._normalize_text(decrypted.message)
        except CryptoError:
            raise
        except PGPDecryptionError as e:
            msg = f"Failed to decrypt message: {e}"
            raise OperationError(msg) from e
        except PGPError as e:
            msg = "Message was not encrypted to this key"
            raise RecipientMismatchError(msg) from e
        except Exception as e:
            msg = f"Decryption failed: {e}"
            raise OperationError(msg) from e

    def sign(
        self,
        message: str,
        private_key: PgpyKey,
        passphrase: SecureBuffer | None,
        *,
        detached: bool,
    ) -> str:
        """
        Sign a message.

        Args:
            message: Message text.
            private_key: Signing key.
            passphrase: Key passphrase, None if the key is not protected.
            detached: Produce only the signature instead of a clear-signed document.

        Returns:
            ASCII-armored PGP SIGNATURE, or a PGP SIGNED MESSAGE.

        Raises:
            PassphraseRequiredError: If the key is protected and no passphrase is given.
            WrongPassphraseError: If the passphrase is incorrect.
            KeyFormatError: If the key cannot sign.
            OperationError: If signing fails for any other reason.
        """
        key = self._require_private(private_key)
        try:
            with self._unlocked(key, passphrase):
                if detached:
                    return str(key.sign(message))
                cleartext = pgpy.PGPMessage.new(message, cleartext=True)
                cleartext |= key.sign(cleartext)
                return str(cleartext)
        except CryptoError:
            raise
        except PGPError as e:
            msg = f"Key cannot be used for signing: {e}"
            raise KeyFormatError(msg, expected="private") from e
        except Exception as e:
            msg = f"Signing failed: {e}"
            raise OperationError(msg) from e

    def verify(
        self,
        signed_message: str,
        public_key: PgpyKey,
        signature: str | None = None,
    ) -> VerificationResult:
        """
        Verify a signed message.

        Args:
            signed_message: Clear-signed or inline-signed message, or the signed data
                when a detached signature is given.
            public_key: Signer's key.
            signature: ASCII-armored detached signature.

        Returns:
            VerificationResult; valid is False when the signature does not match or was
            made by another key.

        Raises:
            MessageFormatError: If the message or signature cannot be parsed.
            OperationError: If verification fails for any other reason.
        """
        key = public_key.pgpy_key
        if signature is not None:
            detached = self._parse_signature(signature)
            signatures = [detached]
            content: str | bytes = signed_message
        else:
            message = self._parse_message(signed_message)
            if not message.is_signed:
                msg = "Message is not signed"
                raise MessageFormatError(msg)
            signatures = message.signatures
            content = message.message

        signer_key_id = normalize_fingerprint(signatures[0].signer) if signatures else None
        try:
            if signature is not None:
                verification = key.verify(signed_message, detached)
            else:
                verification = key.verify(message)
        except PGPError:
            return VerificationResult(
                valid=False,
                signer_key_id=signer_key_id,
                error="Message was not signed by this key",
            )
        except Exception as e:
            msg = f"Verification failed: {e}"
            raise OperationError(msg) from e

        good = next(iter(verification.good_signatures), None)
        if not verification or good is None:
            return VerificationResult(
                valid=False,
                signer_key_id=signer_key_id,
                error="Signature does not match the message",
            )
        return VerificationResult(
            valid=True,
            signed_by=self._primary_user_id(key),
            signer_key_id=normalize_fingerprint(good.signature.signer),
            signed_at=good.signature.created,
            message=self._normalize_text(content),
        )

    @staticmethod
    @contextmanager
    def _unlocked(key: pgpy.PGPKey, passphrase: SecureBuffer | None) -> Iterator[pgpy.PGPKey]:
        if not key.is_protected:
            yield key
            return
        if passphrase is None or not passphrase:
            raise PassphraseRequiredError()
        with ExitStack() as stack:
            try:
                stack.enter_context(key.unlock(passphrase.text))
            except PGPDecryptionError as e:
                msg = "Incorrect passphrase"
                raise WrongPassphraseError(msg) from e
            yield key

    @staticmethod
    def _require_private(private_key: PgpyKey) -> pgpy.PGPKey:
        if private_key.is_public:
            msg = "A private key is required"
            raise KeyFormatError(msg, expected="private")
        return private_key.pgpy_key

    @staticmethod
    def _parse_message(armored: str) -> pgpy.PGPMessage:
        if _MESSAGE_ARMOR.search(armored) is None:
            msg = "Input is not an armored PGP message"
            raise MessageFormatError(msg)
        try:
            with _strict_armor():
                return pgpy.PGPMessage.from_blob(armored.encode("utf-8"))
        except Exception as e:
            msg = f"Failed to parse message: {e}"
            raise MessageFormatError(msg) from e

    @staticmethod
    def _parse_signature(armored: str) -> pgpy.PGPSignature:
        if _SIGNATURE_ARMOR.search(armored) is None:
            msg = "Input is not an armored PGP signature"
            raise MessageFormatError(msg)
        try:
            with _strict_armor():
                return pgpy.PGPSignature.from_blob(armored.encode("utf-8"))
        except Exception as e:
            msg = f"Failed to parse signature: {e}"
            raise MessageFormatError(msg) from e

    @staticmethod
    def _normalize_text(content: bytes | bytearray | str) -> str:
        if isinstance(content, str):
            return content
        try:
            return bytes(content).decode("utf-8")
        except UnicodeDecodeError as e:
            msg = "Message content is not UTF-8 text"
            raise OperationError(msg) from e

    @staticmethod
    def _primary_user_id(key: pgpy.PGPKey) -> str | None:
        user_ids = key.userids
        if len(user_ids) == 0:
            return None
        primary = next((uid for uid in user_ids if uid.is_primary), user_ids[0])
        return primary.userid
