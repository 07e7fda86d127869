"""Decoding of Postgres composite (row) values in the binary wire format."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterator, List, Optional, Tuple, Union

_HEADER = struct.Struct(">ii")
_COUNT = struct.Struct(">i")


class CompositeError(Exception):
    """Raised when a composite value cannot be parsed or a field cannot be read."""


class PgKind(Enum):
    """The broad kind of a Postgres type."""

    SIMPLE = "Simple"
    ENUM = "Enum"
    PSEUDO = "Pseudo"
    ARRAY = "Array"
    RANGE = "Range"
    DOMAIN = "Domain"
    COMPOSITE = "Composite"


@dataclass(frozen=True)
class PgField:
    """A named attribute of a composite type."""

    name: str
    pg_type: "PgType"


@dataclass(frozen=True)
class PgType:
    """A Postgres type; composite types carry their attributes in ``fields``."""

    name: str
    oid: int = 0
    kind: PgKind = PgKind.SIMPLE
    fields: Tuple[PgField, ...] = ()
    schema: str = "public"

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))

    def __str__(self) -> str:
        return self.name


def composite_type_ranges(buf: bytes, count: int) -> Iterator[Optional[range]]:
    """Yield the byte range of each of ``count`` fields in ``buf`` (``None`` for NULL).

    Each field is encoded as a 4-byte type OID, a 4-byte signed length (-1
    for NULL) and that many bytes of value. Ranges are relative to ``buf``.
    The buffer must hold exactly ``count`` fields.
    """
    data = bytes(buf)
    pos = 0
    for _ in range(count):
        if len(data) - pos < _HEADER.size:
            raise CompositeError("failed to fill whole buffer")
        _oid, length = _HEADER.unpack_from(data, pos)
        pos += _HEADER.size
        if length < 0:
            yield None
            continue
        if len(data) - pos < length:
            raise CompositeError("unexpected EOF")
        yield range(pos, pos + length)
        pos += length
    if pos != len(data):
        raise CompositeError("invalid buffer length: compositetyperanges is not empty")


Decoder = Callable[[PgType, bytes], Any]


class CompositeType:
    """A parsed composite value whose fields can be read by index or name."""

    def __init__(self, pg_type: PgType, body: bytes, ranges: List[Optional[range]]) -> None:
        self.pg_type = pg_type
        self._body = body
        self._ranges = ranges

    @classmethod
    def from_sql(cls, pg_type: PgType, body: bytes) -> "CompositeType":
        """Parse a binary composite value of type ``pg_type``."""
        if pg_type.kind is not PgKind.COMPOSITE:
            raise CompositeError(f"expected composite type, got {pg_type}")
        body = bytes(body)
        if len(body) < _COUNT.size:
            raise CompositeError(f"invalid composite type body length: {len(body)}")
        (num_fields,) = _COUNT.unpack_from(body, 0)
        if num_fields != len(pg_type.fields):
            raise CompositeError(f"invalid field count: {num_fields} vs {len(pg_type.fields)}")
        rest = body[_COUNT.size:]
        try:
            ranges = list(composite_type_ranges(rest, num_fields))
        except CompositeError as exc:
            raise CompositeError(f"Unable to parse composite type ranges: {exc}") from exc
        return cls(pg_type, rest, ranges)

    def fields(self) -> Tuple[PgField, ...]:
        """The attributes of the composite type."""
        return self.pg_type.fields

    def __len__(self) -> int:
        return len(self.pg_type.fields)

    def is_empty(self) -> bool:
        return len(self) == 0

    def _index(self, key: Union[int, str]) -> int:
        names = [f.name for f in self.fields()]
        if isinstance(key, int) and not isinstance(key, bool):
            if 0 <= key < len(names):
                return key
        elif isinstance(key, str):
            if key in names:
                return names.index(key)
            lowered = key.lower()
            for position, name in enumerate(names):
                if name.lower() == lowered:
                    return position
        raise CompositeError(f"Unable to find column {key} in the fields {', '.join(names)}")

    def raw(self, key: Union[int, str]) -> Optional[bytes]:
        """The raw bytes of a field, or ``None`` if it is NULL."""
        span = self._ranges[self._index(key)]
        if span is None:
            return None
        return self._body[span.start:span.stop]

    def get(self, key: Union[int, str], decoder: Decoder) -> Any:
        """Decode a field with ``decoder(pg_type, raw_bytes)``; NULL gives ``None``."""
        position = self._index(key)
        field_type = self.fields()[position].pg_type
        data = self.raw(position)
        if data is None:
            return None
        try:
            return decoder(field_type, data)
        except CompositeError:
            raise
        except Exception as exc:
            raise CompositeError(
                f"Unable to conver raw bytes into expected type: {exc}"
            ) from exc