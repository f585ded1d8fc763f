"""Validator token: a manifest bundled with the ephemeral secret it authorizes."""

from __future__ import annotations

import base64
import binascii
import json
from typing import cast

import jcs
from pydantic import BaseModel, ConfigDict, ValidationError

from validator_keys.crypto.keys import KeyMaterial
from validator_keys.crypto.schemes import KeyScheme
from validator_keys.errors import MalformedRecordError


class _TokenPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    manifest: str
    validation_secret_key: str


class ValidatorToken:
    """Manifest plus the secret key a validator signs with once the manifest is published."""

    def __init__(self, manifest: str, secret_key: KeyMaterial) -> None:
        self.manifest = manifest
        self.secret_key = secret_key

    def to_string(self) -> str:
        """Base64 of the canonical JSON ``{"manifest", "validation_secret_key"}``."""
        payload = _TokenPayload(
            manifest=self.manifest,
            validation_secret_key=self.secret_key.secret_key_hex,
        )
        raw = cast(bytes, jcs.canonicalize(payload.model_dump()))
        return base64.b64encode(raw).decode("ascii")

    @classmethod
    def parse(cls, text: str, scheme: KeyScheme = KeyScheme.ED25519) -> ValidatorToken:
        """Inverse of to_string; raises MalformedRecordError or InvalidKeyEncodingError."""
        try:
            data = json.loads(base64.b64decode(text, validate=True))
        except (binascii.Error, ValueError) as exc:
            raise MalformedRecordError(f"invalid validator token encoding: {exc}") from exc
        try:
            payload = _TokenPayload.model_validate(data)
        except ValidationError as exc:
            raise MalformedRecordError(f"invalid validator token: {exc}") from exc
        return cls(payload.manifest, KeyMaterial.from_hex(payload.validation_secret_key, scheme))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidatorToken):
            return NotImplemented
        return self.manifest == other.manifest and self.secret_key == other.secret_key

    def __repr__(self) -> str:
        return f"ValidatorToken(manifest={self.manifest[:16]!r}..., secret_key=<redacted>)"
