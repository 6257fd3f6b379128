"""Trello custom fields: descriptors, items and the value codec.

Custom fields are "extra bits of structured data attached to cards". A card
carries one ``CustomFieldItem`` per field that has a value; the value travels
over the wire as an object with at most one of four string-typed members::

    {"text": "some text"}
    {"number": "42"}                 # also "3.140000"
    {"date": "2021-06-01T10:00:00Z"}
    {"checked": "true"}              # or "false"
    ""                               # clears the field

``CustomFieldValue`` wraps a plain Python value (``str``, ``int``, ``float``,
``bool`` or ``datetime``) and converts it to and from that shape.

Example:
    >>> CustomFieldValue(42).to_wire()
    {'number': '42'}
    >>> CustomFieldValue.from_wire({"checked": "true"}).get()
    True
"""

from __future__ import annotations

import math
import re
import struct
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Protocol, Union, runtime_checkable

from pytrello.exceptions import (
    CustomFieldDecodeError,
    DateParseError,
    NumberConversionError,
    UnresolvableSourceError,
    UnsupportedModelTypeError,
    UnsupportedTypeError,
)


TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Fractional seconds are tolerated on input (Trello sends ".000Z"), never emitted
_DATE_RE = re.compile(r"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(\d+))?Z\Z")
_INT_RE = re.compile(r"[+-]?[0-9]+\Z")
_INFINITY_SPELLINGS = {"inf", "infinity"}

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# Upper bound on chained resolve() calls before giving up
MAX_RESOLVE_DEPTH = 32

SUPPORTED_MODEL_TYPE = "card"

Wire = Union[dict, str]


class CustomFieldKind(Enum):
    """The variant held by a custom field value"""

    TEXT = "text"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    RAW = "raw"


@runtime_checkable
class Resolvable(Protocol):
    """A value that must be evaluated before it can be encoded.

    ``resolve()`` may itself return another ``Resolvable``; encoding keeps
    resolving until a plain value comes out.
    """

    def resolve(self) -> Any: ...


@dataclass(frozen=True)
class WireValue:
    """A custom field value already in Trello's wire shape.

    Encoding passes instances through untouched, which allows sending a value
    exactly as Trello returned it.
    """

    text: str = ""
    number: str = ""
    date: str = ""
    checked: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> WireValue:
        values = {}
        for name in ("text", "number", "date", "checked"):
            raw = data.get(name)
            if raw is None:
                raw = ""
            if not isinstance(raw, str):
                raise CustomFieldDecodeError(
                    f"custom field member '{name}' must be a string, got {type(raw).__name__}",
                    raw=raw,
                )
            values[name] = raw
        return cls(**values)

    def to_dict(self) -> dict[str, str]:
        """Populated members only, as Trello expects"""
        return {
            name: value
            for name, value in (
                ("text", self.text),
                ("number", self.number),
                ("date", self.date),
                ("checked", self.checked),
            )
            if value
        }


def resolve_value(value: Any) -> Any:
    """Evaluate ``value`` until it is no longer a ``Resolvable``.

    Raises:
        UnresolvableSourceError: If a resolver fails, or resolution does not
            settle within MAX_RESOLVE_DEPTH steps
    """
    depth = 0
    while isinstance(value, Resolvable):
        if depth >= MAX_RESOLVE_DEPTH:
            raise UnresolvableSourceError(
                f"value did not resolve to a primitive after {MAX_RESOLVE_DEPTH} steps"
            )
        try:
            value = value.resolve()
        except Exception as e:
            raise UnresolvableSourceError(f"cannot resolve custom field value: {e}") from e
        depth += 1
    return value


def classify(value: Any) -> CustomFieldKind:
    """Return the variant a resolved value belongs to.

    Raises:
        UnsupportedTypeError: If the value has no wire mapping
    """
    # bool is an int subclass; check it first
    if isinstance(value, bool):
        return CustomFieldKind.BOOLEAN
    if isinstance(value, int):
        return CustomFieldKind.INTEGER
    if isinstance(value, float):
        return CustomFieldKind.FLOAT
    if isinstance(value, str):
        return CustomFieldKind.TEXT
    if isinstance(value, datetime):
        return CustomFieldKind.TIMESTAMP
    if isinstance(value, WireValue):
        return CustomFieldKind.RAW
    raise UnsupportedTypeError(type(value).__name__)


def format_date(value: datetime) -> str:
    """Format a timestamp as ``YYYY-MM-DDTHH:MM:SSZ`` (naive values are taken as UTC)"""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}Z"
    )


def parse_date(raw: str) -> datetime:
    """Parse a Trello custom field date into an aware UTC datetime

    Raises:
        DateParseError: If ``raw`` does not match the fixed format
    """
    match = _DATE_RE.match(raw)
    if not match:
        raise DateParseError(f"cannot parse date '{raw}' as {TIME_FORMAT}", raw=raw)
    try:
        parsed = datetime.strptime(match.group(1) + "Z", TIME_FORMAT)
    except ValueError as e:
        raise DateParseError(f"cannot parse date '{raw}': {e}", raw=raw) from e
    fraction = match.group(2)
    if fraction:
        parsed = parsed.replace(microsecond=int(fraction[:6].ljust(6, "0")))
    return parsed.replace(tzinfo=timezone.utc)


def _parse_int(raw: str) -> int:
    if not _INT_RE.match(raw):
        raise ValueError(f"invalid integer: {raw!r}")
    value = int(raw)
    if not INT64_MIN <= value <= INT64_MAX:
        raise ValueError(f"integer out of range: {raw!r}")
    return value


def _parse_float64(raw: str) -> float:
    # float() would also accept surrounding whitespace, digit separators and
    # non-ASCII digits
    if not raw.isascii() or raw != raw.strip() or "_" in raw:
        raise ValueError(f"invalid float: {raw!r}")
    value = float(raw)
    if math.isinf(value) and raw.lstrip("+-").lower() not in _INFINITY_SPELLINGS:
        raise ValueError(f"float out of range: {raw!r}")
    return value


def _parse_float32(raw: str) -> float:
    value = _parse_float64(raw)
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError as e:
        raise ValueError(f"float32 out of range: {raw!r}") from e


# Tried in order, first success wins. A separate 64-bit integer attempt is
# unnecessary: _parse_int already accepts exactly the int64 range.
NUMBER_PARSERS = (_parse_int, _parse_float64, _parse_float32)


def parse_number(raw: str) -> int | float:
    """Parse a ``number`` wire member, preferring integers over floats

    Raises:
        NumberConversionError: If no parser accepts ``raw``
    """
    for parser in NUMBER_PARSERS:
        try:
            return parser(raw)
        except ValueError:
            continue
    raise NumberConversionError(raw)


def encode_value(value: Any) -> Wire:
    """Convert a Python value into its custom field wire representation.

    Args:
        value: str, int, float, bool, datetime, WireValue, or a Resolvable
               producing one of those

    Returns:
        The wire dict, or the bare string ``""`` for an empty string

    Raises:
        UnresolvableSourceError: If ``value`` is a Resolvable that fails
        UnsupportedTypeError: If ``value`` has no wire mapping
    """
    value = resolve_value(value)
    kind = classify(value)

    if kind is CustomFieldKind.TEXT:
        if value == "":
            return ""
        return {"text": value}
    elif kind is CustomFieldKind.INTEGER:
        return {"number": "%d" % value}
    elif kind is CustomFieldKind.FLOAT:
        return {"number": "%f" % value}
    elif kind is CustomFieldKind.BOOLEAN:
        return {"checked": "true" if value else "false"}
    elif kind is CustomFieldKind.TIMESTAMP:
        return {"date": format_date(value)}
    elif kind is CustomFieldKind.RAW:
        return value.to_dict()

    raise UnsupportedTypeError(type(value).__name__)


def decode_value(wire: Any) -> Any:
    """Convert a custom field wire value into a Python value.

    Members are checked in the order text, date, checked, number; the first
    populated one decides the result.

    Returns:
        The decoded value, or None when no member is populated

    Raises:
        DateParseError: If ``date`` is populated but malformed
        NumberConversionError: If ``number`` is populated but not numeric
        CustomFieldDecodeError: If ``wire`` is not a wire value at all
    """
    if wire is None or wire == "":
        return None
    if not isinstance(wire, Mapping):
        raise CustomFieldDecodeError(
            f"custom field value must be an object, got {type(wire).__name__}", raw=wire
        )

    raw = WireValue.from_dict(wire)
    if raw.text:
        return raw.text
    if raw.date:
        return parse_date(raw.date)
    if raw.checked:
        return raw.checked == "true"
    if raw.number:
        return parse_number(raw.number)
    return None


class CustomFieldValue:
    """Value holder for a single custom field.

    Construction never fails; an unsupported value is only reported when the
    holder is encoded.
    """

    __slots__ = ("_value",)

    def __init__(self, value: Any = None):
        self._value = value

    def get(self) -> Any:
        """The wrapped value, or None if unset"""
        return self._value

    @property
    def is_set(self) -> bool:
        return self._value is not None

    @property
    def kind(self) -> CustomFieldKind | None:
        if self._value is None:
            return None
        return classify(resolve_value(self._value))

    def to_wire(self) -> Wire:
        return encode_value(self._value)

    @classmethod
    def from_wire(cls, wire: Any) -> CustomFieldValue:
        return cls(decode_value(wire))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CustomFieldValue):
            return NotImplemented
        return type(self._value) is type(other._value) and self._value == other._value

    def __hash__(self) -> int:
        return hash((type(self._value), self._value))

    def __repr__(self) -> str:
        return f"CustomFieldValue({self._value!r})"

    def __str__(self) -> str:
        return "" if self._value is None else str(self._value)


@dataclass
class CustomFieldItem:
    """A custom field value set on a card.

    ``id_value`` is used instead of ``value`` by dropdown (list) fields, where it
    names the selected CustomFieldOption.
    """

    value: CustomFieldValue = field(default_factory=CustomFieldValue)
    id: str = ""
    id_value: str = ""
    id_custom_field: str = ""
    id_model: str = ""
    model_type: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CustomFieldItem:
        return cls(
            value=CustomFieldValue.from_wire(data.get("value")),
            id=data.get("id") or "",
            id_value=data.get("idValue") or "",
            id_custom_field=data.get("idCustomField") or "",
            id_model=data.get("idModel") or "",
            model_type=data.get("modelType") or "",
        )

    def validate_model_type(self) -> None:
        """Raise UnsupportedModelTypeError unless the item targets a card"""
        if self.model_type and self.model_type != SUPPORTED_MODEL_TYPE:
            raise UnsupportedModelTypeError(self.model_type)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"value": self.value.to_wire()}
        for key, attr in (
            ("id", self.id),
            ("idValue", self.id_value),
            ("idCustomField", self.id_custom_field),
            ("idModel", self.id_model),
            ("modelType", self.model_type),
        ):
            if attr:
                data[key] = attr
        return data


def item_request_body(value: CustomFieldValue) -> dict[str, Any]:
    """JSON body for ``PUT cards/{card}/customField/{field}/item``"""
    return CustomFieldItem(value=value).to_dict()


@dataclass
class CustomFieldOption:
    """One choice of a dropdown custom field"""

    id: str
    id_custom_field: str = ""
    text: str = ""
    color: str = ""
    pos: float = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CustomFieldOption:
        return cls(
            id=data["id"],
            id_custom_field=data.get("idCustomField") or "",
            text=(data.get("value") or {}).get("text") or "",
            color=data.get("color") or "",
            pos=data.get("pos") or 0,
        )


@dataclass
class CustomField:
    """Definition of a custom field on a board.

    https://developers.trello.com/reference/#custom-fields
    """

    id: str
    name: str = ""
    type: str = ""
    id_model: str = ""
    model_type: str = ""
    field_group: str = ""
    pos: float = 0
    display_card_front: bool = False
    options: list[CustomFieldOption] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CustomField:
        display = data.get("display") or {}
        return cls(
            id=data["id"],
            name=data.get("name") or "",
            type=data.get("type") or "",
            id_model=data.get("idModel") or "",
            model_type=data.get("modelType") or "",
            field_group=data.get("fieldGroup") or "",
            pos=data.get("pos") or 0,
            display_card_front=bool(display.get("cardFront", display.get("cardfront"))),
            options=[CustomFieldOption.from_dict(o) for o in data.get("options") or []],
        )

    def option_text(self, option_id: str) -> str | None:
        """Text of the option with ``option_id``, or None if there is no such option"""
        for option in self.options:
            if option.id == option_id:
                return option.text
        return None
