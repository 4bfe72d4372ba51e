import re

import pgpy
import pytest

from pgp_workbench.crypto.pgpy_backend import PgpyBackend, PgpyKey, normalize_fingerprint
from pgp_workbench.crypto.protocol import KeyMaterial, PGPBackend
from pgp_workbench.crypto.secure_buffer import SecureBuffer
from pgp_workbench.exceptions import (
    KeyFormatError,
    MessageFormatError,
    PassphraseRequiredError,
    RecipientMismatchError,
    WrongPassphraseError,
)
from pgp_workbench.tests.keys import PASSPHRASE, KeyPair


def test_backend_satisfies_protocol() -> None:
    assert isinstance(PgpyBackend(), PGPBackend)


def test_parse_key_returns_pgpy_key(alice: KeyPair) -> None:
    key = PgpyBackend.parse_key(alice.private)

    assert isinstance(key, PgpyKey)
    assert isinstance(key, KeyMaterial)
    assert not key.is_public
    assert not key.is_protected
    assert key.fingerprint == normalize_fingerprint(alice.key.fingerprint)
    assert key.key_id == key.fingerprint[-16:]


def test_parse_public_key(alice: KeyPair) -> None:
    key = PgpyBackend.parse_key(alice.public)

    assert key.is_public
    assert not key.is_protected


def test_parse_key_raises_key_format_error_on_garbage() -> None:
    with pytest.raises(KeyFormatError, match="Failed to parse key"):
        PgpyBackend.parse_key("not a valid key")


def test_normalize_fingerprint_strips_spaces_and_lowercases() -> None:
    assert normalize_fingerprint("0123 4567 89AB CDEF") == "0123456789abcdef"


def test_encrypt_decrypt_round_trip(alice: KeyPair) -> None:
    backend = PgpyBackend()
    ciphertext = backend.encrypt("Hello, World!", [backend.parse_key(alice.public)])

    assert ciphertext.startswith("-----BEGIN PGP MESSAGE-----")
    assert backend.decrypt(ciphertext, backend.parse_key(alice.private), None) == "Hello, World!"


def test_encrypt_to_several_recipients(alice: KeyPair, bob: KeyPair) -> None:
    backend = PgpyBackend()
    recipients = [backend.parse_key(alice.public), backend.parse_key(bob.public)]
    ciphertext = backend.encrypt("shared", recipients)

    assert backend.decrypt(ciphertext, backend.parse_key(alice.private), None) == "shared"
    assert backend.decrypt(ciphertext, backend.parse_key(bob.private), None) == "shared"


def test_encrypt_without_recipients_raises() -> None:
    with pytest.raises(KeyFormatError, match="recipient"):
        PgpyBackend().encrypt("text", [])


def test_decrypt_with_protected_key(carol_protected: KeyPair) -> None:
    backend = PgpyBackend()
    ciphertext = backend.encrypt("for carol", [backend.parse_key(carol_protected.public)])
    key = backend.parse_key(carol_protected.private)

    with SecureBuffer.from_text(PASSPHRASE) as passphrase:
        assert backend.decrypt(ciphertext, key, passphrase) == "for carol"


def test_decrypt_raises_on_wrong_passphrase(carol_protected: KeyPair) -> None:
    backend = PgpyBackend()
    ciphertext = backend.encrypt("for carol", [backend.parse_key(carol_protected.public)])
    key = backend.parse_key(carol_protected.private)

    with pytest.raises(WrongPassphraseError):
        backend.decrypt(ciphertext, key, SecureBuffer.from_text("wrong"))


def test_decrypt_raises_when_passphrase_missing(carol_protected: KeyPair) -> None:
    backend = PgpyBackend()
    ciphertext = backend.encrypt("for carol", [backend.parse_key(carol_protected.public)])
    key = backend.parse_key(carol_protected.private)

    with pytest.raises(PassphraseRequiredError):
        backend.decrypt(ciphertext, key, None)


def test_decrypt_with_other_key_raises_recipient_mismatch(alice: KeyPair, bob: KeyPair) -> None:
    backend = PgpyBackend()
    ciphertext = backend.encrypt("for alice", [backend.parse_key(alice.public)])

    with pytest.raises(RecipientMismatchError):
        backend.decrypt(ciphertext, backend.parse_key(bob.private), None)


def test_decrypt_with_public_key_raises(alice: KeyPair) -> None:
    backend = PgpyBackend()
    ciphertext = backend.encrypt("text", [backend.parse_key(alice.public)])

    with pytest.raises(KeyFormatError) as exc_info:
        backend.decrypt(ciphertext, backend.parse_key(alice.public), None)

    assert exc_info.value.expected == "private"


def test_decrypt_rejects_non_message_input(alice: KeyPair) -> None:
    with pytest.raises(MessageFormatError):
        PgpyBackend().decrypt("hello", PgpyBackend.parse_key(alice.private), None)


def test_clear_signed_message_verifies(alice: KeyPair) -> None:
    backend = PgpyBackend()
    signed = backend.sign("Hello, World!", backend.parse_key(alice.private), None, detached=False)

    assert signed.startswith("-----BEGIN PGP SIGNED MESSAGE-----")

    result = backend.verify(signed, backend.parse_key(alice.public))

    assert result.valid
    assert result.message == "Hello, World!"
    assert result.signed_by == "Alice (test) <alice@example.com>"
    assert result.signer_key_id == normalize_fingerprint(alice.key.fingerprint.keyid)
    assert result.signed_at is not None


def test_detached_signature_verifies(alice: KeyPair) -> None:
    backend = PgpyBackend()
    signature = backend.sign("document", backend.parse_key(alice.private), None, detached=True)

    assert signature.startswith("-----BEGIN PGP SIGNATURE-----")

    result = backend.verify("document", backend.parse_key(alice.public), signature)

    assert result.valid


def test_detached_signature_over_other_data_is_invalid(alice: KeyPair) -> None:
    backend = PgpyBackend()
    signature = backend.sign("document", backend.parse_key(alice.private), None, detached=True)

    result = backend.verify("tampered document", backend.parse_key(alice.public), signature)

    assert not result.valid
    assert result.error


def test_verify_with_other_key_is_invalid(alice: KeyPair, bob: KeyPair) -> None:
    backend = PgpyBackend()
    signed = backend.sign("Hello", backend.parse_key(alice.private), None, detached=False)

    result = backend.verify(signed, backend.parse_key(bob.public))

    assert not result.valid
    assert result.error == "Message was not signed by this key"


def test_verify_rejects_unsigned_message(alice: KeyPair) -> None:
    backend = PgpyBackend()
    message = str(pgpy.PGPMessage.new("plain"))

    with pytest.raises(MessageFormatError, match="not signed"):
        backend.verify(message, backend.parse_key(alice.public))


def test_verify_rejects_garbage_signature(alice: KeyPair) -> None:
    with pytest.raises(MessageFormatError):
        PgpyBackend().verify("data", PgpyBackend.parse_key(alice.public), "not a signature")


def test_sign_with_protected_key_requires_passphrase(carol_protected: KeyPair) -> None:
    backend = PgpyBackend()
    key = backend.parse_key(carol_protected.private)

    with pytest.raises(PassphraseRequiredError):
        backend.sign("text", key, SecureBuffer(), detached=True)


def test_sign_with_protected_key_and_passphrase(carol_protected: KeyPair) -> None:
    backend = PgpyBackend()
    key = backend.parse_key(carol_protected.private)
    signature = backend.sign("text", key, SecureBuffer.from_text(PASSPHRASE), detached=True)

    assert backend.verify("text", backend.parse_key(carol_protected.public), signature).valid


def test_bad_armor_checksum_is_rejected(alice: KeyPair) -> None:
    corrupted = re.sub(r"^=[A-Za-z0-9+/]{4}$", "=AAAA", alice.public, count=1, flags=re.MULTILINE)
    assert corrupted != alice.public

    with pytest.raises(KeyFormatError, match="crc24"):
        PgpyBackend.parse_key(corrupted)


def test_bad_message_checksum_is_rejected(alice: KeyPair) -> None:
    backend = PgpyBackend()
    ciphertext = backend.encrypt("text", [backend.parse_key(alice.public)])
    corrupted = re.sub(r"^=[A-Za-z0-9+/]{4}$", "=AAAA", ciphertext, count=1, flags=re.MULTILINE)
    assert corrupted != ciphertext

    with pytest.raises(MessageFormatError):
        backend.decrypt(corrupted, backend.parse_key(alice.private), None)


def test_non_ascii_clear_signed_message_verifies(alice: KeyPair) -> None:
    backend = PgpyBackend()
    signed = backend.sign("ünïcode ✓", backend.parse_key(alice.private), None, detached=False)

    result = backend.verify(signed, backend.parse_key(alice.public))

    assert result.valid
    assert result.message == "ünïcode ✓"
