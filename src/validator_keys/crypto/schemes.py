"""Signature scheme dispatch for validator keys (Ed25519 and secp256k1).

Each scheme maps to a fixed set of primitives (derive, sign, verify) built on
the ``cryptography`` library. Public keys use the 33-byte ledger encoding:
Ed25519 keys carry a 0xED prefix, secp256k1 keys are SEC1 compressed points.
"""

from __future__ import annotations

import hashlib
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.asymmetric.utils import (
    Prehashed,
    decode_dss_signature,
    encode_dss_signature,
)
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from validator_keys.errors import InvalidKeyEncodingError, InvalidPublicKeyError

SECRET_KEY_SIZE = 32
PUBLIC_KEY_SIZE = 33
ED25519_PUBLIC_KEY_PREFIX = 0xED
ED25519_SIGNATURE_SIZE = 64

# Order of the secp256k1 base point.
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
_SECP256K1_HALF_ORDER = SECP256K1_ORDER >> 1


class KeyScheme(str, Enum):
    """Closed set of signature schemes a validator key may use."""

    ED25519 = "ed25519"
    SECP256K1 = "secp256k1"


@dataclass(frozen=True)
class SchemeOperations:
    """Primitive set for one scheme."""

    derive_public_key: Callable[[bytes], bytes]
    sign: Callable[[bytes, bytes], bytes]
    verify: Callable[[bytes, bytes, bytes], bool]


def sha512_half(data: bytes) -> bytes:
    """First 32 bytes of SHA-512(data)."""
    return hashlib.sha512(data).digest()[:32]


# --- Ed25519 ---


def _ed25519_derive_public_key(secret_key: bytes) -> bytes:
    private_key = Ed25519PrivateKey.from_private_bytes(secret_key)
    raw = private_key.public_key().public_bytes(
        encoding=Encoding.Raw,
        format=PublicFormat.Raw,
    )
    return bytes([ED25519_PUBLIC_KEY_PREFIX]) + raw


def _ed25519_sign(secret_key: bytes, message: bytes) -> bytes:
    signature = Ed25519PrivateKey.from_private_bytes(secret_key).sign(message)
    assert len(signature) == ED25519_SIGNATURE_SIZE, "Ed25519 signature must be 64 bytes"
    return signature


def _ed25519_verify(public_key: bytes, message: bytes, signature: bytes) -> bool:
    if len(public_key) != PUBLIC_KEY_SIZE or public_key[0] != ED25519_PUBLIC_KEY_PREFIX:
        return False
    if len(signature) != ED25519_SIGNATURE_SIZE:
        return False
    try:
        Ed25519PublicKey.from_public_bytes(public_key[1:]).verify(signature, message)
    except (InvalidSignature, ValueError):
        return False
    return True


# --- secp256k1 ---


def _secp256k1_private_key(secret_key: bytes) -> ec.EllipticCurvePrivateKey:
    value = int.from_bytes(secret_key, "big")
    if not 0 < value < SECP256K1_ORDER:
        raise InvalidKeyEncodingError(
            KeyScheme.SECP256K1.value,
            "secret key outside the secp256k1 scalar range",
        )
    return ec.derive_private_key(value, ec.SECP256K1())


def _secp256k1_derive_public_key(secret_key: bytes) -> bytes:
    public_key = _secp256k1_private_key(secret_key).public_key()
    return public_key.public_bytes(
        encoding=Encoding.X962,
        format=PublicFormat.CompressedPoint,
    )


def _secp256k1_sign(secret_key: bytes, message: bytes) -> bytes:
    """ECDSA over SHA-512-Half(message); DER with S normalized to the lower half."""
    digest = sha512_half(message)
    der = _secp256k1_private_key(secret_key).sign(digest, ec.ECDSA(Prehashed(hashes.SHA256())))
    r, s = decode_dss_signature(der)
    if s > _SECP256K1_HALF_ORDER:
        s = SECP256K1_ORDER - s
    return encode_dss_signature(r, s)


def _secp256k1_verify(public_key: bytes, message: bytes, signature: bytes) -> bool:
    try:
        r, s = decode_dss_signature(signature)
    except ValueError:
        return False
    # Only strict DER with low S is canonical.
    if not (0 < r < SECP256K1_ORDER and 0 < s <= _SECP256K1_HALF_ORDER):
        return False
    if encode_dss_signature(r, s) != signature:
        return False
    try:
        verifier = ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), public_key)
    except ValueError:
        return False
    try:
        verifier.verify(
            signature, sha512_half(message), ec.ECDSA(Prehashed(hashes.SHA256()))
        )
    except InvalidSignature:
        return False
    return True


_OPERATIONS: dict[KeyScheme, SchemeOperations] = {
    KeyScheme.ED25519: SchemeOperations(
        derive_public_key=_ed25519_derive_public_key,
        sign=_ed25519_sign,
        verify=_ed25519_verify,
    ),
    KeyScheme.SECP256K1: SchemeOperations(
        derive_public_key=_secp256k1_derive_public_key,
        sign=_secp256k1_sign,
        verify=_secp256k1_verify,
    ),
}


def _check_secret_size(scheme: KeyScheme, secret_key: bytes) -> None:
    if len(secret_key) != SECRET_KEY_SIZE:
        raise InvalidKeyEncodingError(
            scheme.value,
            f"secret key must be {SECRET_KEY_SIZE} bytes, got {len(secret_key)}",
        )


def derive_public_key(scheme: KeyScheme, secret_key: bytes) -> bytes:
    """Derive the 33-byte public key. Raises InvalidKeyEncodingError for invalid secrets."""
    _check_secret_size(scheme, secret_key)
    return _OPERATIONS[scheme].derive_public_key(secret_key)


def sign(scheme: KeyScheme, secret_key: bytes, message: bytes) -> bytes:
    _check_secret_size(scheme, secret_key)
    return _OPERATIONS[scheme].sign(secret_key, message)


def verify(scheme: KeyScheme, public_key: bytes, message: bytes, signature: bytes) -> bool:
    """True iff signature is a valid, canonical signature of message under public_key."""
    return _OPERATIONS[scheme].verify(public_key, message, signature)


def scheme_for_public_key(public_key: bytes) -> KeyScheme:
    """Infer the scheme from a 33-byte public key's prefix byte."""
    if len(public_key) != PUBLIC_KEY_SIZE:
        raise InvalidPublicKeyError(
            f"expected {PUBLIC_KEY_SIZE} bytes, got {len(public_key)}",
            details={"length": len(public_key)},
        )
    prefix = public_key[0]
    if prefix == ED25519_PUBLIC_KEY_PREFIX:
        return KeyScheme.ED25519
    if prefix in (0x02, 0x03):
        return KeyScheme.SECP256K1
    raise InvalidPublicKeyError(
        f"unrecognized prefix 0x{prefix:02X}",
        details={"prefix": prefix},
    )


def verify_with_public_key(public_key: bytes, message: bytes, signature: bytes) -> bool:
    """Verify using the scheme implied by the key; False for unrecognized keys."""
    try:
        scheme = scheme_for_public_key(public_key)
    except InvalidPublicKeyError:
        return False
    return verify(scheme, public_key, message, signature)
