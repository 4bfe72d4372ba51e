"""
Key inspection.

Turns one ASCII-armored key block into an immutable KeyInfo. A self-signature
counts when its type fits the binding, it was issued by the primary key, it has
not expired and its signature value checks out against the primary key.
pgpy's PGPKey.verify() folds the key's own expiry and revocation into every
result, so the signature value is checked with the key packet directly.
"""

import re
from collections.abc import Iterable
from datetime import UTC, datetime

import pgpy
import structlog
from cryptography.hazmat.primitives import hashes
from pgpy.constants import EllipticCurveOID, KeyFlags, SignatureType

from pgp_workbench.config import WorkbenchConfig
from pgp_workbench.crypto.pgpy_backend import PgpyBackend, normalize_fingerprint
from pgp_workbench.exceptions import KeyFormatError
from pgp_workbench.models.errors import ClassifiedError, OperationKind
from pgp_workbench.models.keys import (
    Capability,
    ExpiryStatus,
    KeyInfo,
    KeyType,
    SubkeyInfo,
)
from pgp_workbench.services.error_classifier import ErrorClassifier

logger = structlog.get_logger(__name__)

KEY_ID_LENGTH = 16

_ARMOR_HEADER = re.compile(r"^-----BEGIN PGP ([A-Z ,/0-9]+)-----[ \t]*$", re.MULTILINE)
_KEY_ARMOR_TYPES = frozenset({"PUBLIC KEY BLOCK", "PRIVATE KEY BLOCK"})

_CERTIFICATIONS = frozenset(
    {
        SignatureType.Generic_Cert,
        SignatureType.Persona_Cert,
        SignatureType.Casual_Cert,
        SignatureType.Positive_Cert,
    }
)

CAPABILITY_BY_FLAG: dict[KeyFlags, Capability] = {
    KeyFlags.Certify: Capability.CERTIFY,
    KeyFlags.Sign: Capability.SIGN,
    KeyFlags.EncryptCommunications: Capability.ENCRYPT,
    KeyFlags.EncryptStorage: Capability.ENCRYPT,
    KeyFlags.Authentication: Capability.AUTHENTICATE,
}


def format_fingerprint(fingerprint: str) -> str:
    """
    Format a fingerprint for display.

    Example:
        format_fingerprint("0123456789abcdef...") -> "0123 4567 89AB CDEF ..."
    """
    compact = fingerprint.replace(" ", "").upper()
    return " ".join(compact[i : i + 4] for i in range(0, len(compact), 4))


def days_until_expiry(expiration_date: datetime | None, now: datetime | None = None) -> int | None:
    """Whole days until expiration, negative once expired. None if the key never expires."""
    if expiration_date is None:
        return None
    now = now or datetime.now(UTC)
    return (expiration_date - now).days


def get_expiry_status(
    expiration_date: datetime | None,
    now: datetime | None = None,
    config: WorkbenchConfig | None = None,
) -> ExpiryStatus:
    """
    Bucket an expiration date relative to now.

    Args:
        expiration_date: KeyInfo.expiration_date or SubkeyInfo.expiration_date.
        now: Reference time, defaults to the current UTC time.
        config: Source of the expiring-soon and expiring-this-week thresholds.
    """
    if expiration_date is None:
        return ExpiryStatus.NEVER
    config = config or WorkbenchConfig()
    now = now or datetime.now(UTC)
    if expiration_date <= now:
        return ExpiryStatus.EXPIRED
    days = days_until_expiry(expiration_date, now)
    if days <= config.expiry_week_days:
        return ExpiryStatus.EXPIRING_WEEK
    if days <= config.expiry_soon_days:
        return ExpiryStatus.EXPIRING_SOON
    return ExpiryStatus.VALID


class KeyInspector:
    """
    Parses armored keys into KeyInfo.

    inspect() never raises for text input: every failure comes back as a
    ClassifiedError with kind INVALID_KEY_FORMAT.

    Example:
        inspector = KeyInspector()
        result = inspector.inspect(armored)
        if isinstance(result, KeyInfo):
            print(result.fingerprint, result.capabilities)
    """

    def __init__(
        self,
        config: WorkbenchConfig | None = None,
        classifier: ErrorClassifier | None = None,
    ) -> None:
        self._config = config or WorkbenchConfig()
        self._classifier = classifier or ErrorClassifier()

    def inspect(
        self,
        armored_text: str,
        context: OperationKind = OperationKind.INSPECT,
    ) -> KeyInfo | ClassifiedError:
        """
        Inspect one armored key block.

        Args:
            armored_text: A PGP PUBLIC KEY BLOCK or PGP PRIVATE KEY BLOCK.
            context: Operation the key is inspected for; decides the error field tag.

        Returns:
            KeyInfo on success, ClassifiedError otherwise.
        """
        try:
            info = self.parse(armored_text)
        except KeyFormatError as e:
            logger.debug("Key inspection failed", operation=str(context), error_type=type(e).__name__)
            return self._classifier.classify(e, context)
        logger.debug(
            "Key inspected",
            key_id=info.key_id,
            type=str(info.type),
            subkeys=len(info.subkeys),
        )
        return info

    def parse(self, armored_text: str) -> KeyInfo:
        """
        Like inspect(), but raises.

        Raises:
            KeyFormatError: If the text is not exactly one parseable key block.
        """
        text = armored_text.strip()
        self._check_armor(text)
        key = PgpyBackend.parse_key(text).pgpy_key
        try:
            return self._describe(key)
        except KeyFormatError:
            raise
        except Exception as e:
            msg = f"Key structure could not be read: {e}"
            raise KeyFormatError(msg) from e

    def split_blocks(self, armored_text: str) -> list[str]:
        """
        Split concatenated key blocks into single blocks.

        Text outside the blocks is dropped. A block without its END line is
        returned as-is so inspection reports it.
        """
        blocks = []
        text = armored_text.strip()
        starts = [m.start() for m in _ARMOR_HEADER.finditer(text)]
        for index, start in enumerate(starts):
            end = starts[index + 1] if index + 1 < len(starts) else len(text)
            blocks.append(text[start:end].strip())
        return blocks

    def _check_armor(self, text: str) -> None:
        if len(text) == 0:
            msg = "Key text is empty"
            raise KeyFormatError(msg)
        if len(text) > self._config.max_armor_length:
            msg = "Key text exceeds the maximum accepted length"
            raise KeyFormatError(msg)
        headers = _ARMOR_HEADER.findall(text)
        if len(headers) != 1:
            msg = f"Expected exactly one armored block, found {len(headers)}"
            raise KeyFormatError(msg)
        if headers[0] not in _KEY_ARMOR_TYPES:
            msg = f"Armored block is a {headers[0]}, not a key"
            raise KeyFormatError(msg)

    def _describe(self, key: pgpy.PGPKey) -> KeyInfo:
        fingerprint = normalize_fingerprint(key.fingerprint)
        key_id = fingerprint[-KEY_ID_LENGTH:]
        curve, bit_size = _size_of(key)

        certifications = [
            sig
            for uid in key.userids
            if not _is_revoked_uid(key, key_id, uid)
            for sig in _self_signatures(key, key_id, uid, _CERTIFICATIONS)
        ]
        direct = list(_self_signatures(key, key_id, key, {SignatureType.DirectlyOnKey}))
        self_sigs = certifications + direct
        is_revoked = any(_self_signatures(key, key_id, key, {SignatureType.KeyRevocation}))

        return KeyInfo(
            type=KeyType.PUBLIC if key.is_public else KeyType.PRIVATE,
            key_id=key_id,
            fingerprint=fingerprint,
            algorithm=key.key_algorithm.name,
            created=key.created,
            curve=curve,
            bit_size=bit_size,
            expiration_date=_expiration(key.created, self_sigs),
            is_encrypted=bool(not key.is_public and key.is_protected),
            user_ids=tuple(uid.userid for uid in key.userids),
            capabilities=frozenset() if is_revoked else _capabilities(self_sigs),
            subkeys=tuple(
                self._describe_subkey(key, key_id, subkey) for subkey in key.subkeys.values()
            ),
            is_revoked=is_revoked,
        )

    @staticmethod
    def _describe_subkey(primary: pgpy.PGPKey, primary_key_id: str, subkey: pgpy.PGPKey) -> SubkeyInfo:
        fingerprint = normalize_fingerprint(subkey.fingerprint)
        curve, bit_size = _size_of(subkey)
        bindings = list(
            _self_signatures(primary, primary_key_id, subkey, {SignatureType.Subkey_Binding})
        )
        is_revoked = any(
            _self_signatures(primary, primary_key_id, subkey, {SignatureType.SubkeyRevocation})
        )
        return SubkeyInfo(
            key_id=fingerprint[-KEY_ID_LENGTH:],
            fingerprint=fingerprint,
            algorithm=subkey.key_algorithm.name,
            created=subkey.created,
            curve=curve,
            bit_size=bit_size,
            expiration_date=_expiration(subkey.created, bindings),
            capabilities=frozenset() if is_revoked else _capabilities(bindings),
            is_revoked=is_revoked,
        )


def _self_signatures(
    primary: pgpy.PGPKey,
    primary_key_id: str,
    subject: pgpy.PGPKey | pgpy.PGPUID,
    types: Iterable[SignatureType],
) -> Iterable[pgpy.PGPSignature]:
    """Signatures on subject of the given types that the primary key really made."""
    wanted = set(types)
    for sig in subject.__sig__:
        if sig.type not in wanted or sig.signer is None:
            continue
        if normalize_fingerprint(sig.signer) != primary_key_id:
            continue
        if sig.is_expired:
            continue
        if not _signature_matches(primary, subject, sig):
            logger.warning(
                "Ignoring self-signature that does not verify",
                key_id=primary_key_id,
                signature_type=sig.type.name,
            )
            continue
        yield sig


def _signature_matches(
    primary: pgpy.PGPKey,
    subject: pgpy.PGPKey | pgpy.PGPUID,
    sig: pgpy.PGPSignature,
) -> bool:
    try:
        verified = primary._key.verify(
            sig.hashdata(subject),
            sig.__sig__,
            getattr(hashes, sig.hash_algorithm.name)(),
        )
    except Exception as e:
        logger.debug("Self-signature check raised", error_type=type(e).__name__)
        return False
    return verified is True


def _is_revoked_uid(primary: pgpy.PGPKey, primary_key_id: str, uid: pgpy.PGPUID) -> bool:
    return any(_self_signatures(primary, primary_key_id, uid, {SignatureType.CertRevocation}))


def _expiration(created: datetime, signatures: list[pgpy.PGPSignature]) -> datetime | None:
    if len(signatures) == 0:
        return None
    latest = max(signatures, key=lambda sig: sig.created)
    if latest.key_expiration is None:
        return None
    return created + latest.key_expiration


def _capabilities(signatures: list[pgpy.PGPSignature]) -> frozenset[Capability]:
    return frozenset(
        CAPABILITY_BY_FLAG[flag]
        for sig in signatures
        for flag in sig.key_flags
        if flag in CAPABILITY_BY_FLAG
    )


def _size_of(key: pgpy.PGPKey) -> tuple[str | None, int | None]:
    size = key.key_size
    if isinstance(size, EllipticCurveOID):
        return size.name, None
    if not size:
        return None, None
    return None, int(size)
