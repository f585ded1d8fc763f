"""Property-based tests for key derivation and raw signing.

For every 32-byte seed valid under a scheme, derivation is deterministic,
KeyMaterial holds exactly the derived public key, and a signature verifies
over the signed bytes only.
"""

from __future__ import annotations

from hypothesis import assume, given, settings
from hypothesis import strategies as st

from validator_keys.crypto.keys import KeyMaterial
from validator_keys.crypto.schemes import SECP256K1_ORDER, KeyScheme, derive_public_key

st_seed = st.binary(min_size=32, max_size=32)
st_scheme = st.sampled_from(list(KeyScheme))


def _valid_for(scheme: KeyScheme, seed: bytes) -> bool:
    if scheme is KeyScheme.SECP256K1:
        return 0 < int.from_bytes(seed, "big") < SECP256K1_ORDER
    return True


@given(st_scheme, st_seed)
def test_derivation_is_deterministic(scheme: KeyScheme, seed: bytes) -> None:
    assume(_valid_for(scheme, seed))
    public_key = derive_public_key(scheme, seed)
    assert derive_public_key(scheme, seed) == public_key
    assert KeyMaterial.from_hex(seed.hex(), scheme).public_key == public_key


@settings(max_examples=50)
@given(st_scheme, st_seed, st.binary(min_size=1, max_size=256), st.integers(min_value=0))
def test_signature_binds_exact_data(
    scheme: KeyScheme, seed: bytes, data: bytes, flip: int
) -> None:
    assume(_valid_for(scheme, seed))
    keys = KeyMaterial(seed, scheme)
    signature = keys.sign(data)
    assert keys.verify(data, signature)

    tampered = bytearray(data)
    bit = flip % (len(data) * 8)
    tampered[bit // 8] ^= 1 << (bit % 8)
    assert not keys.verify(bytes(tampered), signature)
