from enum import Enum
from typing import Dict, Iterator, Mapping, Optional

from .errors import FieldTypeError

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class FieldKind(Enum):
    """Kinds of value a record field can hold."""
    INT = "int"
    INT64 = "int64"
    TEXT = "text"
    BOOL = "bool"
    ABSENT = "absent"

    @classmethod
    def of(cls, value: object) -> "FieldKind":
        # bool is a subclass of int, check it first
        if value is None:
            return cls.ABSENT
        if isinstance(value, bool):
            return cls.BOOL
        if isinstance(value, int):
            if INT32_MIN <= value <= INT32_MAX:
                return cls.INT
            if INT64_MIN <= value <= INT64_MAX:
                return cls.INT64
            raise FieldTypeError(f"integer {value} does not fit in 64 bits")
        if isinstance(value, str):
            return cls.TEXT
        raise FieldTypeError(f"unsupported field value {value!r} ({type(value).__name__})")

    @property
    def is_integer(self) -> bool:
        return self in (FieldKind.INT, FieldKind.INT64)


class Record(Mapping[str, object]):
    """Immutable named-field value bag, the unit of storage and query."""

    __slots__ = ("_fields", "_hash")

    def __init__(self, fields: Optional[Mapping[str, object]] = None, **kwargs: object):
        merged: Dict[str, object] = dict(fields or {})
        merged.update(kwargs)
        for name, value in merged.items():
            if not isinstance(name, str):
                raise FieldTypeError(f"field names must be text, got {name!r}")
            FieldKind.of(value)
        self._fields = merged
        self._hash: Optional[int] = None

    def __getitem__(self, name: str) -> object:
        return self._fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Record):
            return self._fields == other._fields
        if isinstance(other, Mapping):
            return self._fields == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash(frozenset(self._fields.items()))
        return self._hash

    def __repr__(self) -> str:
        return f"Record({self._fields!r})"

    def kind(self, name: str) -> FieldKind:
        return FieldKind.of(self._fields.get(name))

    def _typed(self, name: str, *kinds: FieldKind) -> object:
        actual = self.kind(name)
        if actual not in kinds:
            expected = "/".join(k.value for k in kinds)
            raise FieldTypeError(f"field '{name}' is {actual.value}, expected {expected}")
        return self._fields[name]

    def get_int(self, name: str) -> int:
        return self._typed(name, FieldKind.INT)

    def get_int64(self, name: str) -> int:
        # Int values widen to Int64
        return self._typed(name, FieldKind.INT, FieldKind.INT64)

    def get_text(self, name: str) -> str:
        return self._typed(name, FieldKind.TEXT)

    def get_bool(self, name: str) -> bool:
        return self._typed(name, FieldKind.BOOL)

    def project(self, *names: str) -> "Record":
        """Return a record reduced to the given fields (missing ones are dropped)."""
        return Record({name: self._fields[name] for name in names if name in self._fields})

    def to_dict(self) -> Dict[str, object]:
        return dict(self._fields)


def projection(*names: str):
    """Build a transform that keeps only ``names``."""
    def transform(record: Record) -> Record:
        return record.project(*names)
    return transform


def identity(record: Record) -> Record:
    return record
