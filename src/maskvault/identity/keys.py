"""Deterministic, origin-scoped key derivation.

Every mask is a secp256k1 key pair that is never stored: it is re-derived on
demand from the user's entropy source, keyed by a label that binds the
origin, the identity index and a purpose string. Changing any of them gives
an unrelated key; recovering one key from another requires the seed.

    label   = "\\nmaskvault\\n{origin}\\n{identity_id}\\n{purpose}"
    scalar  = SHA-256(entropy(label) || custom_salt)

The scalar is used directly as the private key.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import zlib
from dataclasses import dataclass
from typing import Protocol

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    PublicFormat,
)

from maskvault.core.exceptions import EntropyError, InvalidInputError
from maskvault.identity.models import Origin

NAMESPACE = "maskvault"

# Purpose of the login/signing masks. The "shared" suffix leaves room for
# purpose-specific key families later.
IDENTITY_SIGN_PURPOSE = "identity-sign\nshared"

SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

_SELF_AUTHENTICATING_SUFFIX = b"\x02"

# ---------------------------------------------------------------------------
# Entropy source
# ---------------------------------------------------------------------------


class EntropySource(Protocol):
    """Host-provided deterministic randomness keyed by a label."""

    def get_entropy(self, label: str) -> bytes: ...


class SeedEntropySource:
    """Entropy source backed by a locally held user seed.

    ``HMAC-SHA256(seed, label)``: deterministic per label, unpredictable
    without the seed.
    """

    MIN_SEED_BYTES = 16

    def __init__(self, seed: bytes) -> None:
        if len(seed) < self.MIN_SEED_BYTES:
            raise InvalidInputError(
                f"Seed must be at least {self.MIN_SEED_BYTES} bytes",
                field="seed",
            )
        self._seed = bytes(seed)

    def get_entropy(self, label: str) -> bytes:
        return hmac.new(self._seed, label.encode("utf-8"), hashlib.sha256).digest()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def entropy_label(origin: Origin, identity_id: int, purpose: str) -> str:
    """Build the label requested from the entropy source."""
    return f"\n{NAMESPACE}\n{origin}\n{identity_id}\n{purpose}"


def principal_from_der(der: bytes) -> str:
    """Textual self-authenticating principal for a DER-encoded public key."""
    raw = hashlib.sha224(der).digest() + _SELF_AUTHENTICATING_SUFFIX
    checksum = zlib.crc32(raw).to_bytes(4, "big")
    encoded = base64.b32encode(checksum + raw).decode("ascii").lower().rstrip("=")
    return "-".join(encoded[i : i + 5] for i in range(0, len(encoded), 5))


# ---------------------------------------------------------------------------
# DerivedKeyPair
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DerivedKeyPair:
    """A mask's signing key pair.

    Signing is deterministic (RFC 6979) and low-S normalised, so both
    operations are pure functions of the derived key.
    """

    _private_key: ec.EllipticCurvePrivateKey

    def public_key(self) -> bytes:
        """Raw 65-byte uncompressed SEC1 public key."""
        return self._private_key.public_key().public_bytes(Encoding.X962, PublicFormat.UncompressedPoint)

    def public_key_der(self) -> bytes:
        return self._private_key.public_key().public_bytes(Encoding.DER, PublicFormat.SubjectPublicKeyInfo)

    def principal(self) -> str:
        """The identifier a website sees for this mask."""
        return principal_from_der(self.public_key_der())

    def sign(self, message: bytes) -> bytes:
        """Sign ``message`` (hashed with SHA-256); returns 64-byte ``r || s``."""
        der = self._private_key.sign(message, ec.ECDSA(hashes.SHA256(), deterministic_signing=True))
        r, s = decode_dss_signature(der)
        if s > SECP256K1_ORDER // 2:
            s = SECP256K1_ORDER - s
        return r.to_bytes(32, "big") + s.to_bytes(32, "big")

    def verify(self, message: bytes, signature: bytes) -> bool:
        if len(signature) != 64:
            return False
        r = int.from_bytes(signature[:32], "big")
        s = int.from_bytes(signature[32:], "big")
        try:
            self._private_key.public_key().verify(
                encode_dss_signature(r, s),
                message,
                ec.ECDSA(hashes.SHA256()),
            )
        except InvalidSignature:
            return False
        return True


def derive_key_pair(
    entropy: EntropySource,
    origin: Origin,
    identity_id: int,
    purpose: str = IDENTITY_SIGN_PURPOSE,
    custom_salt: bytes | None = None,
) -> DerivedKeyPair:
    """Derive the key pair of one mask.

    Args:
        entropy: The user's entropy source.
        origin: Origin whose masks are used (the derivation origin).
        identity_id: Index of the mask on that origin.
        purpose: Purpose label separating key families.
        custom_salt: Optional caller salt deriving a sub-key of the mask.

    Returns:
        The :class:`DerivedKeyPair`.

    Raises:
        InvalidInputError: If ``identity_id`` is negative.
        EntropyError: If the entropy source returns no usable material.
    """
    if identity_id < 0:
        raise InvalidInputError("Identity id must be non-negative", field="identity_id", value=identity_id)

    raw = entropy.get_entropy(entropy_label(origin, identity_id, purpose))
    if not isinstance(raw, bytes | bytearray) or not raw:
        raise EntropyError("Entropy source returned no key material")

    material = bytes(raw) + (custom_salt or b"")
    scalar = int.from_bytes(hashlib.sha256(material).digest(), "big")
    if not 0 < scalar < SECP256K1_ORDER:
        raise EntropyError("Derived scalar is outside the curve order")

    return DerivedKeyPair(ec.derive_private_key(scalar, ec.SECP256K1()))
