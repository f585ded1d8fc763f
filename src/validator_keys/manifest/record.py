"""Canonical binary record used for manifests.

A record maps field ids to typed values. Serialization walks fields in
ascending (type, code) order regardless of insertion order, so two records
holding the same fields always produce identical bytes.

Field header:
    type < 16 and code < 16   -> 1 byte  (type << 4 | code)
    type < 16, code >= 16     -> 2 bytes (type << 4, code)
    type >= 16, code < 16     -> 2 bytes (code, type)
    type >= 16, code >= 16    -> 3 bytes (0, type, code)

Payloads:
    UINT32 -> 4 bytes big-endian
    BLOB   -> variable-length prefix (1-3 bytes) followed by the raw bytes
"""

from __future__ import annotations

import struct
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Union

from validator_keys.errors import MalformedRecordError, MissingFieldError, UnknownFieldError

FieldValue = Union[int, bytes]

UINT32_MAX = 0xFFFFFFFF

# Variable-length prefix boundaries.
_VL_ONE_BYTE_MAX = 192
_VL_TWO_BYTE_MAX = 12480
_VL_THREE_BYTE_MAX = 918744


class SerializedType(IntEnum):
    UINT32 = 2
    BLOB = 7


@dataclass(frozen=True, order=True)
class FieldId:
    """Field identity: (type class, code). Ordering is the canonical order."""

    type: SerializedType
    code: int
    name: str = field(compare=False)

    def header(self) -> bytes:
        type_code = int(self.type)
        if type_code < 16:
            if self.code < 16:
                return bytes([(type_code << 4) | self.code])
            return bytes([type_code << 4, self.code])
        if self.code < 16:
            return bytes([self.code, type_code])
        return bytes([0, type_code, self.code])


SEQUENCE = FieldId(SerializedType.UINT32, 4, "Sequence")
PUBLIC_KEY = FieldId(SerializedType.BLOB, 1, "PublicKey")
SIGNING_PUBLIC_KEY = FieldId(SerializedType.BLOB, 3, "SigningPublicKey")
SIGNATURE = FieldId(SerializedType.BLOB, 6, "Signature")
MASTER_SIGNATURE = FieldId(SerializedType.BLOB, 18, "MasterSignature")

KNOWN_FIELDS: dict[tuple[int, int], FieldId] = {
    (int(f.type), f.code): f
    for f in (SEQUENCE, PUBLIC_KEY, SIGNING_PUBLIC_KEY, SIGNATURE, MASTER_SIGNATURE)
}


class CanonicalRecord:
    """Ordered mapping from FieldId to a value of the field's type."""

    def __init__(self, values: dict[FieldId, FieldValue] | None = None) -> None:
        self._values: dict[FieldId, FieldValue] = {}
        for field_id, value in (values or {}).items():
            self[field_id] = value

    def __setitem__(self, field_id: FieldId, value: FieldValue) -> None:
        if field_id.type is SerializedType.UINT32:
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{field_id.name} must be an int")
            if not 0 <= value <= UINT32_MAX:
                raise ValueError(f"{field_id.name} must fit in 32 bits, got {value}")
        elif not isinstance(value, (bytes, bytearray)):
            raise TypeError(f"{field_id.name} must be bytes")
        else:
            value = bytes(value)
        self._values[field_id] = value

    def __getitem__(self, field_id: FieldId) -> FieldValue:
        return self._values[field_id]

    def __contains__(self, field_id: object) -> bool:
        return field_id in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[FieldId]:
        return iter(sorted(self._values))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CanonicalRecord):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        inner = ", ".join(f"{f.name}={self._values[f]!r}" for f in self)
        return f"CanonicalRecord({inner})"

    def get(self, field_id: FieldId, default: FieldValue | None = None) -> FieldValue | None:
        return self._values.get(field_id, default)

    def without(self, *field_ids: FieldId) -> CanonicalRecord:
        """Copy of this record with the given fields removed."""
        return CanonicalRecord({f: v for f, v in self._values.items() if f not in field_ids})

    def require(self, *field_ids: FieldId) -> None:
        """Raise MissingFieldError for the first absent field."""
        for field_id in field_ids:
            if field_id not in self._values:
                raise MissingFieldError(field_id.name)


def _encode_length(length: int) -> bytes:
    if length <= _VL_ONE_BYTE_MAX:
        return bytes([length])
    if length <= _VL_TWO_BYTE_MAX:
        length -= _VL_ONE_BYTE_MAX + 1
        return bytes([193 + (length >> 8), length & 0xFF])
    if length <= _VL_THREE_BYTE_MAX:
        length -= _VL_TWO_BYTE_MAX + 1
        return bytes([241 + (length >> 16), (length >> 8) & 0xFF, length & 0xFF])
    raise ValueError(f"Blob too long for variable-length encoding: {length}")


def serialize(record: CanonicalRecord) -> bytes:
    out = bytearray()
    for field_id in record:
        value = record[field_id]
        out += field_id.header()
        if field_id.type is SerializedType.UINT32:
            out += struct.pack(">I", value)
        else:
            assert isinstance(value, bytes)
            out += _encode_length(len(value))
            out += value
    return bytes(out)


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    @property
    def exhausted(self) -> bool:
        return self._pos >= len(self._data)

    def take(self, count: int) -> bytes:
        end = self._pos + count
        if end > len(self._data):
            raise MalformedRecordError(
                "unexpected end of data",
                details={"offset": self._pos, "needed": count},
            )
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def byte(self) -> int:
        return self.take(1)[0]

    def field_header(self) -> tuple[int, int]:
        first = self.byte()
        type_code = first >> 4
        code = first & 0x0F
        if type_code == 0:
            type_code = self.byte()
            if type_code < 16:
                raise MalformedRecordError("non-canonical field header")
        if code == 0:
            code = self.byte()
            if code < 16:
                raise MalformedRecordError("non-canonical field header")
        return type_code, code

    def length(self) -> int:
        first = self.byte()
        if first <= _VL_ONE_BYTE_MAX:
            return first
        if first <= 240:
            return _VL_ONE_BYTE_MAX + 1 + (first - 193) * 256 + self.byte()
        if first <= 254:
            second, third = self.byte(), self.byte()
            length = _VL_TWO_BYTE_MAX + 1 + (first - 241) * 65536 + second * 256 + third
            if length > _VL_THREE_BYTE_MAX:
                raise MalformedRecordError(
                    "invalid length prefix", details={"length": length}
                )
            return length
        raise MalformedRecordError("invalid length prefix", details={"prefix": first})


def deserialize(data: bytes) -> CanonicalRecord:
    """Decode canonical bytes; raises MalformedRecordError / UnknownFieldError."""
    reader = _Reader(bytes(data))
    record = CanonicalRecord()
    previous: FieldId | None = None
    while not reader.exhausted:
        type_code, code = reader.field_header()
        field_id = KNOWN_FIELDS.get((type_code, code))
        if field_id is None:
            raise UnknownFieldError(type_code, code)
        if field_id in record:
            raise MalformedRecordError(
                f"duplicate field {field_id.name}", details={"field": field_id.name}
            )
        if previous is not None and field_id < previous:
            raise MalformedRecordError(
                f"field {field_id.name} out of canonical order",
                details={"field": field_id.name, "previous": previous.name},
            )
        if field_id.type is SerializedType.UINT32:
            record[field_id] = struct.unpack(">I", reader.take(4))[0]
        else:
            record[field_id] = reader.take(reader.length())
        previous = field_id
    return record
