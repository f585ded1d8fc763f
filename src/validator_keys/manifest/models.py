"""Typed view of a decoded manifest, plus parsing and signature verification."""

from __future__ import annotations

import base64
import binascii

from pydantic import BaseModel, ConfigDict, Field, model_validator

from validator_keys.crypto.schemes import scheme_for_public_key, verify_with_public_key
from validator_keys.errors import (
    InvalidPublicKeyError,
    MalformedRecordError,
    SignatureVerificationError,
)
from validator_keys.manifest.builder import REVOKED_SEQUENCE, signing_message
from validator_keys.manifest.record import (
    MASTER_SIGNATURE,
    PUBLIC_KEY,
    SEQUENCE,
    SIGNATURE,
    SIGNING_PUBLIC_KEY,
    UINT32_MAX,
    CanonicalRecord,
    deserialize,
    serialize,
)


class Manifest(BaseModel):
    """Decoded manifest; validators enforce the authorization/revocation field rules."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    sequence: int = Field(..., ge=0, le=UINT32_MAX)
    public_key: bytes = Field(..., description="Master public key (33 bytes).")
    signing_public_key: bytes | None = Field(
        default=None, description="Ephemeral public key; absent in revocations."
    )
    signature: bytes | None = Field(
        default=None, description="Ephemeral signature; absent in revocations."
    )
    master_signature: bytes = Field(..., description="Master key signature.")

    @model_validator(mode="after")
    def _check_role_fields(self) -> Manifest:
        has_signing_key = self.signing_public_key is not None
        has_signature = self.signature is not None
        if has_signing_key != has_signature:
            raise ValueError("SigningPublicKey and Signature must be present together")
        if self.is_revocation and has_signing_key:
            raise ValueError("A revocation must not carry SigningPublicKey or Signature")
        if not self.is_revocation and not has_signing_key:
            raise ValueError("An authorization must carry SigningPublicKey and Signature")
        return self

    @property
    def is_revocation(self) -> bool:
        return self.sequence == REVOKED_SEQUENCE

    @classmethod
    def from_record(cls, record: CanonicalRecord) -> Manifest:
        record.require(SEQUENCE, PUBLIC_KEY, MASTER_SIGNATURE)
        return cls(
            sequence=record[SEQUENCE],
            public_key=record[PUBLIC_KEY],
            signing_public_key=record.get(SIGNING_PUBLIC_KEY),
            signature=record.get(SIGNATURE),
            master_signature=record[MASTER_SIGNATURE],
        )

    def to_record(self) -> CanonicalRecord:
        record = CanonicalRecord()
        record[SEQUENCE] = self.sequence
        record[PUBLIC_KEY] = self.public_key
        if self.signing_public_key is not None:
            record[SIGNING_PUBLIC_KEY] = self.signing_public_key
        if self.signature is not None:
            record[SIGNATURE] = self.signature
        record[MASTER_SIGNATURE] = self.master_signature
        return record

    def to_base64(self) -> str:
        return base64.b64encode(serialize(self.to_record())).decode("ascii")


def decode_manifest(manifest_b64: str) -> CanonicalRecord:
    """Base64 text to a CanonicalRecord; raises MalformedRecordError on bad encoding."""
    try:
        raw = base64.b64decode(manifest_b64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedRecordError(f"invalid base64: {exc}") from exc
    return deserialize(raw)


def parse_manifest(manifest_b64: str) -> Manifest:
    """Decode and structurally validate a manifest (signatures are not checked)."""
    record = decode_manifest(manifest_b64)
    try:
        return Manifest.from_record(record)
    except ValueError as exc:
        # pydantic.ValidationError is a ValueError
        raise MalformedRecordError(str(exc)) from exc


def verify_manifest(manifest: Manifest | str) -> Manifest:
    """Check both signatures of a manifest. Returns the parsed manifest.

    Raises:
        MalformedRecordError: The manifest cannot be decoded.
        SignatureVerificationError: A signature does not verify.
    """
    if isinstance(manifest, str):
        manifest = parse_manifest(manifest)
    record = manifest.to_record()

    try:
        scheme_for_public_key(manifest.public_key)
    except InvalidPublicKeyError as exc:
        raise SignatureVerificationError(
            f"Invalid master public key: {exc.reason}.", details=exc.details
        ) from exc

    if manifest.signing_public_key is not None and manifest.signature is not None:
        ephemeral_message = signing_message(record.without(SIGNATURE, MASTER_SIGNATURE))
        if not verify_with_public_key(
            manifest.signing_public_key, ephemeral_message, manifest.signature
        ):
            raise SignatureVerificationError(
                "Ephemeral signature verification failed: manifest may have been tampered with.",
                details={"sequence": manifest.sequence},
            )

    master_message = signing_message(record.without(MASTER_SIGNATURE))
    if not verify_with_public_key(manifest.public_key, master_message, manifest.master_signature):
        raise SignatureVerificationError(
            "Master signature verification failed: manifest may have been tampered with.",
            details={"sequence": manifest.sequence},
        )
    return manifest
