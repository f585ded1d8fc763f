"""Validator key material: hex secret parsing, public key derivation, raw signing."""

from __future__ import annotations

import binascii
import hmac
import os
import secrets

from validator_keys.crypto import schemes
from validator_keys.crypto.schemes import SECRET_KEY_SIZE, KeyScheme
from validator_keys.errors import InvalidKeyEncodingError
from validator_keys.observability import get_logger

logger = get_logger(__name__)


def parse_hex_secret(hex_secret: str, scheme: KeyScheme) -> bytes:
    """Decode a hex secret; raises InvalidKeyEncodingError unless it is exactly 32 bytes."""
    try:
        raw = binascii.unhexlify(hex_secret)
    except (binascii.Error, ValueError) as exc:
        raise InvalidKeyEncodingError(scheme.value, "secret key is not valid hex") from exc
    if len(raw) != SECRET_KEY_SIZE:
        raise InvalidKeyEncodingError(
            scheme.value,
            f"secret key must be {SECRET_KEY_SIZE} bytes, got {len(raw)}",
        )
    return raw


class KeyMaterial:
    """Immutable (scheme, secret key, public key) triple for one validator identity.

    The public key is derived once at construction and never changes. Use
    :meth:`from_hex` rather than the constructor when the secret comes from
    user input.
    """

    __slots__ = ("_scheme", "_secret_key", "_public_key")

    def __init__(self, secret_key: bytes, scheme: KeyScheme = KeyScheme.ED25519) -> None:
        scheme = KeyScheme(scheme)
        self._scheme = scheme
        self._secret_key = bytes(secret_key)
        self._public_key = schemes.derive_public_key(scheme, self._secret_key)

    @classmethod
    def from_hex(cls, hex_secret: str, scheme: KeyScheme = KeyScheme.ED25519) -> KeyMaterial:
        scheme = KeyScheme(scheme)
        return cls(parse_hex_secret(hex_secret, scheme), scheme)

    @classmethod
    def generate(cls, scheme: KeyScheme = KeyScheme.ED25519) -> KeyMaterial:
        """Fresh random key material; re-draws secp256k1 secrets outside the scalar range."""
        scheme = KeyScheme(scheme)
        while True:
            try:
                return cls(secrets.token_bytes(SECRET_KEY_SIZE), scheme)
            except InvalidKeyEncodingError:
                logger.debug("key.generate.redraw", scheme=scheme.value)

    @classmethod
    def from_env(cls, var_name: str, scheme: KeyScheme = KeyScheme.ED25519) -> KeyMaterial:
        """From env var holding a hex secret. Raises InvalidKeyEncodingError if unset or invalid."""
        scheme = KeyScheme(scheme)
        value = os.environ.get(var_name)
        if not value:
            raise InvalidKeyEncodingError(
                scheme.value,
                f"environment variable {var_name!r} is not set or empty",
                details={"variable": var_name},
            )
        return cls.from_hex(value.strip(), scheme)

    @property
    def scheme(self) -> KeyScheme:
        return self._scheme

    @property
    def public_key(self) -> bytes:
        return self._public_key

    @property
    def public_key_hex(self) -> str:
        return self._public_key.hex().upper()

    @property
    def secret_key(self) -> bytes:
        return self._secret_key

    @property
    def secret_key_hex(self) -> str:
        return self._secret_key.hex().upper()

    def sign(self, data: bytes) -> bytes:
        """Sign raw data with no framing or domain prefix."""
        return schemes.sign(self._scheme, self._secret_key, data)

    def verify(self, data: bytes, signature: bytes) -> bool:
        return schemes.verify(self._scheme, self._public_key, data, signature)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyMaterial):
            return NotImplemented
        return (
            self._scheme == other._scheme
            and self._public_key == other._public_key
            and hmac.compare_digest(self._secret_key, other._secret_key)
        )

    def __hash__(self) -> int:
        return hash((self._scheme, self._public_key))

    def __repr__(self) -> str:
        return f"KeyMaterial(scheme={self._scheme.value!r}, public_key={self.public_key_hex!r})"
