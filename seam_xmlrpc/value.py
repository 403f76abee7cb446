"""
XML-RPC value model

Native Python values stand in for the wire union; this module names the tags
and supplies the one value type Python lacks (a second-precision DateTime).
"""

import re
import datetime
from enum import Enum
from typing import Any, Optional

INT32_MIN = -2 ** 31
INT32_MAX = 2 ** 31 - 1


class TypeTag(Enum):
    """Wire type tags, valued by their introspection names"""
    INT32 = "int"
    BIGINT = "i8"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    STRING = "string"
    DATETIME = "dateTime.iso8601"
    BASE64 = "base64"
    STRUCT = "struct"
    ARRAY = "array"
    NIL = "nil"

    @classmethod
    def from_name(cls, name: str) -> "TypeTag":
        """Resolve an introspection type name (e.g. ``i4`` or ``int``)"""
        name = name.strip()
        if name == "i4":
            return cls.INT32
        for tag in cls:
            if tag.value == name:
                return tag
        raise ValueError(f"Unknown XML-RPC type name: {name}")


_ISO8601 = re.compile(
    r"^(\d{4})-?(\d{2})-?(\d{2})T(\d{2}):?(\d{2}):?(\d{2})(?:\.\d+)?"
    r"(Z|[+-]\d{2}:?\d{2})?$"
)


class DateTime:
    """Second-precision date and time without timezone

    Compares equal to other DateTime values and to naive datetime objects
    with the same fields (microseconds ignored).
    """

    __slots__ = ("year", "month", "day", "hour", "minute", "second")

    def __init__(self, year: int, month: int, day: int,
                 hour: int = 0, minute: int = 0, second: int = 0):
        # validates field ranges
        datetime.datetime(year, month, day, hour, minute, second)
        object.__setattr__(self, "year", year)
        object.__setattr__(self, "month", month)
        object.__setattr__(self, "day", day)
        object.__setattr__(self, "hour", hour)
        object.__setattr__(self, "minute", minute)
        object.__setattr__(self, "second", second)

    def __setattr__(self, name, value):
        raise AttributeError("DateTime is immutable")

    @classmethod
    def from_datetime(cls, value: datetime.datetime) -> "DateTime":
        return cls(value.year, value.month, value.day,
                   value.hour, value.minute, value.second)

    @classmethod
    def parse(cls, text: str) -> "DateTime":
        """Parse an ISO-8601 timestamp as used by dateTime.iso8601

        Accepts basic (20240101T10:00:00) and extended (2024-01-01T10:00:00)
        forms. An explicit offset is applied so the result is in UTC.

        Raises:
            ValueError: Text is not a supported ISO-8601 timestamp
        """
        match = _ISO8601.match(text.strip())
        if not match:
            raise ValueError(f"Invalid dateTime.iso8601 value: {text!r}")
        year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
        value = datetime.datetime(year, month, day, hour, minute, second)
        offset = match.group(7)
        if offset and offset != "Z":
            sign = -1 if offset[0] == "-" else 1
            digits = offset[1:].replace(":", "")
            delta = datetime.timedelta(hours=int(digits[:2]), minutes=int(digits[2:]))
            try:
                value = value - sign * delta
            except OverflowError as e:
                raise ValueError(f"dateTime.iso8601 value out of range after UTC offset: {text!r}") from e
        return cls.from_datetime(value)

    def to_datetime(self) -> datetime.datetime:
        return datetime.datetime(self.year, self.month, self.day,
                                 self.hour, self.minute, self.second)

    def iso8601(self) -> str:
        return (f"{self.year:04d}{self.month:02d}{self.day:02d}"
                f"T{self.hour:02d}:{self.minute:02d}:{self.second:02d}")

    def _key(self):
        return (self.year, self.month, self.day, self.hour, self.minute, self.second)

    def __eq__(self, other):
        if isinstance(other, DateTime):
            return self._key() == other._key()
        if isinstance(other, datetime.datetime):
            return self._key() == DateTime.from_datetime(other)._key()
        return NotImplemented

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        return f"<DateTime {self.iso8601()}>"

    __str__ = iso8601


def type_tag(value: Any) -> Optional[TypeTag]:
    """Classify a native value, returning None when it has no wire form"""
    if value is None:
        return TypeTag.NIL
    # bool subclasses int
    if isinstance(value, bool):
        return TypeTag.BOOLEAN
    if isinstance(value, int):
        if INT32_MIN <= value <= INT32_MAX:
            return TypeTag.INT32
        return TypeTag.BIGINT
    if isinstance(value, float):
        return TypeTag.DOUBLE
    if isinstance(value, str):
        return TypeTag.STRING
    if isinstance(value, (DateTime, datetime.datetime)):
        return TypeTag.DATETIME
    if isinstance(value, (bytes, bytearray)):
        return TypeTag.BASE64
    if isinstance(value, dict):
        return TypeTag.STRUCT
    if isinstance(value, (list, tuple)):
        return TypeTag.ARRAY
    return None
