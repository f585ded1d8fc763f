"""Validator key tooling: manifests that delegate a master key to an ephemeral signing key."""

from validator_keys.crypto.keys import KeyMaterial
from validator_keys.crypto.schemes import KeyScheme
from validator_keys.manifest.builder import create_manifest, revoke, sign
from validator_keys.manifest.models import Manifest, parse_manifest, verify_manifest
from validator_keys.validator_token import ValidatorToken

__version__ = "0.3.0"

__all__ = [
    "__version__",
    "KeyMaterial",
    "KeyScheme",
    "Manifest",
    "ValidatorToken",
    "create_manifest",
    "parse_manifest",
    "revoke",
    "sign",
    "verify_manifest",
]
