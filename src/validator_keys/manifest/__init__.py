"""Validator manifests: canonical record codec, builder, and verification.

Public exports:
    record: CanonicalRecord, field ids, serialize/deserialize
    builder: create_manifest, revoke, sign
    models: Manifest, parse_manifest, verify_manifest
"""

from validator_keys.manifest import builder
from validator_keys.manifest import record
from validator_keys.manifest.builder import (
    MANIFEST_PREFIX,
    MAX_AUTHORIZATION_SEQUENCE,
    REVOKED_SEQUENCE,
    create_manifest,
    revoke,
    sign,
)
from validator_keys.manifest.models import Manifest, parse_manifest, verify_manifest
from validator_keys.manifest.record import CanonicalRecord, deserialize, serialize

__all__ = [
    "builder",
    "record",
    "CanonicalRecord",
    "MANIFEST_PREFIX",
    "MAX_AUTHORIZATION_SEQUENCE",
    "Manifest",
    "REVOKED_SEQUENCE",
    "create_manifest",
    "deserialize",
    "parse_manifest",
    "revoke",
    "serialize",
    "sign",
    "verify_manifest",
]
