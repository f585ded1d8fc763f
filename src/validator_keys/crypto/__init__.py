"""Validator key cryptography.

- schemes: Ed25519 / secp256k1 dispatch (derive, sign, verify)
- keys: KeyMaterial, the validated secret + derived public key
"""

from validator_keys.crypto import keys
from validator_keys.crypto import schemes
from validator_keys.crypto.keys import KeyMaterial, parse_hex_secret
from validator_keys.crypto.schemes import KeyScheme, scheme_for_public_key

__all__ = [
    "keys",
    "schemes",
    "KeyMaterial",
    "KeyScheme",
    "parse_hex_secret",
    "scheme_for_public_key",
]
