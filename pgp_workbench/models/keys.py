"""
Key inspection domain models.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class KeyType(StrEnum):
    """Whether an armored key carried secret material."""

    PUBLIC = "public"
    PRIVATE = "private"


class Capability(StrEnum):
    """Usage a key or subkey is authorized for by a self-signature."""

    CERTIFY = "certify"
    SIGN = "sign"
    ENCRYPT = "encrypt"
    AUTHENTICATE = "authenticate"


class ExpiryStatus(StrEnum):
    """Expiration bucket of a key relative to now."""

    NEVER = "never"
    VALID = "valid"
    EXPIRING_SOON = "expiring-soon"
    EXPIRING_WEEK = "expiring-week"
    EXPIRED = "expired"


@dataclass(frozen=True, kw_only=True)
class SubkeyInfo:
    """
    Read-only description of a subkey.

    Attributes:
        key_id: 16 lowercase hex characters.
        fingerprint: Full lowercase hex fingerprint.
        algorithm: Public key algorithm name.
        curve: Curve name for elliptic curve algorithms.
        bit_size: Key size for non elliptic curve algorithms.
        created: Subkey creation time.
        expiration_date: Expiration from the latest binding signature, None if it never expires.
        capabilities: Usages bound by valid, non-revoked binding signatures.
        is_revoked: Whether a valid subkey revocation exists.
    """

    key_id: str
    fingerprint: str
    algorithm: str
    created: datetime
    curve: str | None = None
    bit_size: int | None = None
    expiration_date: datetime | None = None
    capabilities: frozenset[Capability] = frozenset()
    is_revoked: bool = False


@dataclass(frozen=True, kw_only=True)
class KeyInfo:
    """
    Read-only description of a parsed primary key.

    A new instance is produced by every inspection; instances are never mutated.

    Attributes:
        type: Public or private.
        key_id: 16 lowercase hex characters.
        fingerprint: Full lowercase hex fingerprint, no separators.
        algorithm: Public key algorithm name.
        curve: Curve name for elliptic curve algorithms.
        bit_size: Key size for non elliptic curve algorithms.
        created: Primary key creation time.
        expiration_date: Expiration from the latest self-signature, None if it never expires.
        is_encrypted: Whether the secret material is passphrase-protected (private keys only).
        user_ids: User ID strings in the key's own order.
        capabilities: Usages bound to the primary key.
        subkeys: Subkeys in the key's own order.
        is_revoked: Whether a valid key revocation exists.
    """

    type: KeyType
    key_id: str
    fingerprint: str
    algorithm: str
    created: datetime
    curve: str | None = None
    bit_size: int | None = None
    expiration_date: datetime | None = None
    is_encrypted: bool = False
    user_ids: tuple[str, ...] = ()
    capabilities: frozenset[Capability] = frozenset()
    subkeys: tuple[SubkeyInfo, ...] = ()
    is_revoked: bool = False

    def __post_init__(self) -> None:
        if self.type == KeyType.PUBLIC and self.is_encrypted:
            msg = "Public keys cannot be passphrase-protected"
            raise ValueError(msg)
        if self.curve is not None and self.bit_size is not None:
            msg = "curve and bit_size are mutually exclusive"
            raise ValueError(msg)

    @property
    def is_private(self) -> bool:
        return self.type == KeyType.PRIVATE

    @property
    def can_encrypt(self) -> bool:
        """Check if the primary key or any subkey may encrypt."""
        return Capability.ENCRYPT in self.capabilities or any(
            Capability.ENCRYPT in subkey.capabilities for subkey in self.subkeys
        )

    @property
    def can_sign(self) -> bool:
        """Check if the primary key or any subkey may sign."""
        return Capability.SIGN in self.capabilities or any(
            Capability.SIGN in subkey.capabilities for subkey in self.subkeys
        )
