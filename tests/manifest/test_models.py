"""Tests for manifest parsing and signature verification."""

from __future__ import annotations

import base64

import pytest
from pydantic import ValidationError

from validator_keys.crypto.keys import KeyMaterial
from validator_keys.crypto.schemes import KeyScheme
from validator_keys.errors import (
    MalformedRecordError,
    MissingFieldError,
    SignatureVerificationError,
)
from validator_keys.manifest.builder import REVOKED_SEQUENCE, create_manifest, revoke
from validator_keys.manifest.models import Manifest, parse_manifest, verify_manifest
from validator_keys.manifest.record import (
    MASTER_SIGNATURE,
    PUBLIC_KEY,
    SEQUENCE,
    SIGNATURE,
    CanonicalRecord,
    serialize,
)

EPHEMERAL_SECRET_HEX = "1F" * 32


def _encode(record: CanonicalRecord) -> str:
    return base64.b64encode(serialize(record)).decode("ascii")


class TestParseManifest:
    """Tests for parse_manifest."""

    def test_authorization_fields(self, master_keys: KeyMaterial) -> None:
        ephemeral = KeyMaterial.from_hex(EPHEMERAL_SECRET_HEX, KeyScheme.SECP256K1)
        manifest = create_manifest(master_keys, EPHEMERAL_SECRET_HEX, KeyScheme.SECP256K1, 12)
        parsed = parse_manifest(manifest)
        assert parsed.sequence == 12
        assert parsed.public_key == master_keys.public_key
        assert parsed.signing_public_key == ephemeral.public_key
        assert parsed.signature is not None
        assert not parsed.is_revocation
        assert parsed.to_base64() == manifest

    def test_revocation_fields(self, master_keys: KeyMaterial) -> None:
        parsed = parse_manifest(revoke(master_keys))
        assert parsed.is_revocation
        assert parsed.sequence == REVOKED_SEQUENCE
        assert parsed.signing_public_key is None
        assert parsed.signature is None

    def test_invalid_base64(self) -> None:
        with pytest.raises(MalformedRecordError, match="base64"):
            parse_manifest("not base64!!")

    def test_missing_master_signature(self, ed25519_master: KeyMaterial) -> None:
        record = CanonicalRecord({SEQUENCE: REVOKED_SEQUENCE, PUBLIC_KEY: ed25519_master.public_key})
        with pytest.raises(MissingFieldError) as exc_info:
            parse_manifest(_encode(record))
        assert exc_info.value.field_name == "MasterSignature"

    def test_authorization_without_ephemeral_fields_rejected(
        self, ed25519_master: KeyMaterial
    ) -> None:
        record = CanonicalRecord(
            {SEQUENCE: 3, PUBLIC_KEY: ed25519_master.public_key, MASTER_SIGNATURE: b"\x00" * 64}
        )
        with pytest.raises(MalformedRecordError):
            parse_manifest(_encode(record))

    def test_revocation_with_ephemeral_signature_rejected(
        self, ed25519_master: KeyMaterial
    ) -> None:
        with pytest.raises(ValidationError):
            Manifest(
                sequence=REVOKED_SEQUENCE,
                public_key=ed25519_master.public_key,
                signing_public_key=ed25519_master.public_key,
                signature=b"\x00" * 64,
                master_signature=b"\x00" * 64,
            )

    def test_signature_without_signing_key_rejected(self, ed25519_master: KeyMaterial) -> None:
        with pytest.raises(ValidationError):
            Manifest(
                sequence=1,
                public_key=ed25519_master.public_key,
                signature=b"\x00" * 64,
                master_signature=b"\x00" * 64,
            )

    def test_manifest_is_frozen(self, ed25519_master: KeyMaterial) -> None:
        parsed = parse_manifest(revoke(ed25519_master))
        with pytest.raises(ValidationError):
            parsed.sequence = 1  # type: ignore[misc]


class TestVerifyManifest:
    """Tests for verify_manifest."""

    @pytest.mark.parametrize(
        "ephemeral_scheme", [KeyScheme.ED25519, KeyScheme.SECP256K1], ids=lambda s: s.value
    )
    def test_valid_authorization(
        self, master_keys: KeyMaterial, ephemeral_scheme: KeyScheme
    ) -> None:
        manifest = create_manifest(master_keys, EPHEMERAL_SECRET_HEX, ephemeral_scheme, 5)
        assert verify_manifest(manifest).sequence == 5

    def test_valid_revocation(self, master_keys: KeyMaterial) -> None:
        assert verify_manifest(revoke(master_keys)).is_revocation

    def test_accepts_parsed_manifest(self, ed25519_master: KeyMaterial) -> None:
        parsed = parse_manifest(revoke(ed25519_master))
        assert verify_manifest(parsed) is parsed

    def test_tampered_sequence_fails(self, ed25519_master: KeyMaterial) -> None:
        parsed = parse_manifest(
            create_manifest(ed25519_master, EPHEMERAL_SECRET_HEX, KeyScheme.ED25519, 5)
        )
        tampered = parsed.model_copy(update={"sequence": 6})
        with pytest.raises(SignatureVerificationError, match="Ephemeral"):
            verify_manifest(tampered)

    def test_tampered_ephemeral_signature_fails_master_check(
        self, ed25519_master: KeyMaterial
    ) -> None:
        manifest = create_manifest(ed25519_master, EPHEMERAL_SECRET_HEX, KeyScheme.ED25519, 5)
        other = create_manifest(ed25519_master, "2E" * 32, KeyScheme.ED25519, 5)
        parsed = parse_manifest(manifest)
        forged = parsed.model_copy(
            update={"master_signature": parse_manifest(other).master_signature}
        )
        with pytest.raises(SignatureVerificationError, match="Master"):
            verify_manifest(forged)

    def test_wrong_master_key_fails(self, ed25519_master: KeyMaterial) -> None:
        impostor = KeyMaterial.from_hex("42" * 32)
        parsed = parse_manifest(revoke(ed25519_master))
        forged = parsed.model_copy(update={"public_key": impostor.public_key})
        with pytest.raises(SignatureVerificationError):
            verify_manifest(forged)

    def test_unrecognized_master_key_fails(self, ed25519_master: KeyMaterial) -> None:
        record = CanonicalRecord(
            {
                SEQUENCE: REVOKED_SEQUENCE,
                PUBLIC_KEY: b"\x07" * 33,
                MASTER_SIGNATURE: b"\x00" * 64,
            }
        )
        with pytest.raises(SignatureVerificationError, match="master public key"):
            verify_manifest(_encode(record))

    def test_flipped_bit_in_signature_fails(self, master_keys: KeyMaterial) -> None:
        parsed = parse_manifest(revoke(master_keys))
        signature = bytearray(parsed.master_signature)
        signature[-1] ^= 0x01
        forged = parsed.model_copy(update={"master_signature": bytes(signature)})
        with pytest.raises(SignatureVerificationError):
            verify_manifest(forged)
