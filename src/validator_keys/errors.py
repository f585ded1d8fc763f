"""Validator Keys Error Taxonomy.

This module defines the error hierarchy for validator key handling,
providing structured error handling with specific error codes
and context information.
"""
from __future__ import annotations

from typing import Any


class ValidatorKeysError(Exception):
    """Base exception for all validator key errors.

    Every failure raised by key parsing, manifest construction or record
    decoding derives from this class, so callers can surface it verbatim.

    Attributes:
        code: Error code following the validator_keys:<area>/<reason> pattern
        message: Human-readable error message
        details: Optional additional error context
    """

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to ``{code, message, details}`` dict."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class InvalidKeyEncodingError(ValidatorKeysError):
    """Raised when a secret key is not 32 bytes of hex or is invalid for its scheme.

    Attributes:
        scheme: Name of the signature scheme the key was parsed for
        reason: Why the key was rejected
    """

    def __init__(
        self, scheme: str, reason: str, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(
            code="validator_keys:key/invalid_encoding",
            message="Validator keys require 32 byte hex-encoded secret key.",
            details={"scheme": scheme, "reason": reason, **(details or {})},
        )
        self.scheme = scheme
        self.reason = reason


class InvalidPublicKeyError(ValidatorKeysError):
    """Raised when a public key has no recognizable scheme prefix or length."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="validator_keys:key/invalid_public_key",
            message=f"Invalid public key: {reason}",
            details=details or {},
        )
        self.reason = reason


class SequenceOutOfRangeError(ValidatorKeysError):
    """Raised when an authorization uses one of the reserved top sequence values.

    Attributes:
        sequence: The rejected sequence number
        maximum: Highest sequence an authorization manifest may carry
    """

    def __init__(
        self, sequence: int, maximum: int, details: dict[str, Any] | None = None
    ) -> None:
        message = f"Sequence {sequence} is out of range (maximum {maximum})"
        super().__init__(
            code="validator_keys:manifest/sequence_out_of_range",
            message=message,
            details={"sequence": sequence, "maximum": maximum, **(details or {})},
        )
        self.sequence = sequence
        self.maximum = maximum


class MalformedRecordError(ValidatorKeysError):
    """Raised when serialized record bytes cannot be decoded canonically.

    Covers truncation, trailing bytes, duplicate or out-of-order fields and
    bad length prefixes.
    """

    def __init__(
        self,
        reason: str,
        details: dict[str, Any] | None = None,
        code: str = "validator_keys:record/malformed",
    ) -> None:
        super().__init__(code=code, message=f"Malformed record: {reason}", details=details or {})
        self.reason = reason


class UnknownFieldError(MalformedRecordError):
    """Raised when a record carries a field id outside the registry.

    Attributes:
        type_code: Serialized type class of the unknown field
        field_code: Field code within the type class
    """

    def __init__(
        self, type_code: int, field_code: int, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(
            reason=f"unknown field (type={type_code}, code={field_code})",
            details={"type": type_code, "code": field_code, **(details or {})},
            code="validator_keys:record/unknown_field",
        )
        self.type_code = type_code
        self.field_code = field_code


class MissingFieldError(ValidatorKeysError):
    """Raised when a decoded record lacks a field its role requires."""

    def __init__(self, field_name: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="validator_keys:record/missing_field",
            message=f"Missing required field: {field_name}",
            details={"field": field_name, **(details or {})},
        )
        self.field_name = field_name


class EmptyInputError(ValidatorKeysError):
    """Raised when raw signing is requested over zero-length data."""

    def __init__(self, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="validator_keys:sign/empty_input",
            message="Syntax error: Must specify data string to sign",
            details=details or {},
        )


class SignatureVerificationError(ValidatorKeysError):
    """Tampering, wrong key, or invalid/corrupted signature; see message for cause."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="validator_keys:manifest/signature_verification",
            message=message,
            details=details or {},
        )
