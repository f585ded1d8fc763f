"""Property-based tests for the canonical record codec.

deserialize(serialize(r)) == r for every well-formed record, and the bytes
do not depend on insertion order.
"""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from validator_keys.manifest.record import (
    KNOWN_FIELDS,
    CanonicalRecord,
    FieldId,
    SerializedType,
    deserialize,
    serialize,
)


def st_field_value(field_id: FieldId) -> st.SearchStrategy[int | bytes]:
    if field_id.type is SerializedType.UINT32:
        return st.integers(min_value=0, max_value=0xFFFFFFFF)
    return st.binary(max_size=300)


@st.composite
def st_record_items(draw: st.DrawFn) -> list[tuple[FieldId, int | bytes]]:
    fields = draw(st.permutations(list(KNOWN_FIELDS.values())))
    count = draw(st.integers(min_value=0, max_value=len(fields)))
    return [(f, draw(st_field_value(f))) for f in fields[:count]]


@given(st_record_items())
def test_roundtrip(items: list[tuple[FieldId, int | bytes]]) -> None:
    record = CanonicalRecord(dict(items))
    assert deserialize(serialize(record)) == record


@given(st_record_items())
def test_insertion_order_irrelevant(items: list[tuple[FieldId, int | bytes]]) -> None:
    forward = CanonicalRecord(dict(items))
    backward = CanonicalRecord(dict(reversed(items)))
    assert serialize(forward) == serialize(backward)
