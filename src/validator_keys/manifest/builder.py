"""Manifest construction: ephemeral key authorization, master key revocation, raw signing.

Signing protocol for an authorization manifest:

1. ``Signature`` = ephemeral key over ``MANIFEST_PREFIX || serialize(record)``
   where record holds Sequence, PublicKey and SigningPublicKey.
2. ``MasterSignature`` = master key over
   ``MANIFEST_PREFIX || serialize(record + Signature)``.

The master signature therefore covers the ephemeral signature. A revocation
skips step 1 and carries ``Sequence == REVOKED_SEQUENCE``.
"""

from __future__ import annotations

import base64

from validator_keys.crypto.keys import KeyMaterial
from validator_keys.crypto.schemes import KeyScheme
from validator_keys.errors import EmptyInputError, SequenceOutOfRangeError
from validator_keys.manifest.record import (
    MASTER_SIGNATURE,
    PUBLIC_KEY,
    SEQUENCE,
    SIGNATURE,
    SIGNING_PUBLIC_KEY,
    UINT32_MAX,
    CanonicalRecord,
    serialize,
)
from validator_keys.observability import get_logger

logger = get_logger(__name__)

# Signing domain for manifests: "MAN\0".
MANIFEST_PREFIX = b"MAN\x00"

REVOKED_SEQUENCE = UINT32_MAX
# The two highest values are reserved: the revocation sentinel and the one below it.
MAX_AUTHORIZATION_SEQUENCE = UINT32_MAX - 2


def signing_message(record: CanonicalRecord) -> bytes:
    """Domain-separated bytes a manifest signature covers."""
    return MANIFEST_PREFIX + serialize(record)


def encode_manifest(record: CanonicalRecord) -> str:
    return base64.b64encode(serialize(record)).decode("ascii")


def create_manifest(
    master: KeyMaterial,
    ephemeral_hex_secret: str,
    ephemeral_scheme: KeyScheme,
    sequence: int,
) -> str:
    """Authorize an ephemeral key under the master key; returns the base64 manifest.

    Raises:
        SequenceOutOfRangeError: sequence is negative or above MAX_AUTHORIZATION_SEQUENCE.
        InvalidKeyEncodingError: ephemeral secret is not a valid 32-byte hex key.
    """
    if not 0 <= sequence <= MAX_AUTHORIZATION_SEQUENCE:
        raise SequenceOutOfRangeError(sequence, MAX_AUTHORIZATION_SEQUENCE)
    ephemeral = KeyMaterial.from_hex(ephemeral_hex_secret, ephemeral_scheme)

    record = CanonicalRecord()
    record[SEQUENCE] = sequence
    record[PUBLIC_KEY] = master.public_key
    record[SIGNING_PUBLIC_KEY] = ephemeral.public_key

    record[SIGNATURE] = ephemeral.sign(signing_message(record))
    record[MASTER_SIGNATURE] = master.sign(signing_message(record))

    logger.info(
        "manifest.created",
        sequence=sequence,
        master_public_key=master.public_key_hex,
        signing_public_key=ephemeral.public_key_hex,
        signing_scheme=ephemeral.scheme.value,
    )
    return encode_manifest(record)


def revoke(master: KeyMaterial) -> str:
    """Permanently retire the master key; returns the base64 revocation manifest."""
    record = CanonicalRecord()
    record[SEQUENCE] = REVOKED_SEQUENCE
    record[PUBLIC_KEY] = master.public_key
    record[MASTER_SIGNATURE] = master.sign(signing_message(record))

    logger.info("manifest.revoked", master_public_key=master.public_key_hex)
    return encode_manifest(record)


def sign(key: KeyMaterial, data: bytes | str) -> str:
    """Hex signature of the raw data bytes, without manifest framing."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    if not data:
        raise EmptyInputError()
    signature = key.sign(data)
    logger.debug("data.signed", public_key=key.public_key_hex, length=len(data))
    return signature.hex().upper()
