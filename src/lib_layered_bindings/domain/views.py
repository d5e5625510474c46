"""Typed, read-only views over untyped binding data.

Purpose
-------
Service bindings arrive as weakly-typed trees (mappings, sequences, scalars)
produced by JSON/YAML/TOML parsers or plain file contents. This module wraps
such trees in immutable views whose accessors check the stored category
before handing out a value. It belongs to the domain layer and performs no
I/O.

Contents
--------
* :class:`ValueKind` – closed set of categories a stored value can belong to.
* :func:`kind_of` – classify a stored value.
* :class:`TypedMapView` – keyed accessors over a string-keyed mapping.
* :class:`TypedListView` – index accessors over an ordered sequence.

System Role
-----------
Strategies hand raw property maps to :meth:`TypedMapView.of`; consumers read
credentials through the typed accessors. Nested raw mappings and sequences are
converted once, at construction time, so every later read is a cheap category
check.

Widening rules
--------------
``get_integer`` accepts integers only, ``get_double`` accepts integers and
doubles, ``get_number`` accepts integers, doubles and arbitrary-precision
:class:`~decimal.Decimal` numbers. No other cross-category read succeeds.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Final, Iterator

from .errors import IndexNotFound, KeyNotFound, ValueCastError


_INT64_MIN: Final = -(2**63)
_INT64_MAX: Final = 2**63 - 1


class ValueKind(str, Enum):
    """Category of a value stored inside a typed view.

    ``OTHER`` covers foreign scalars (for example ``datetime`` objects emitted
    by TOML or YAML parsers). They are stored untouched, are returned by
    ``get`` and satisfy none of the typed accessors.
    """

    NULL = "null"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    DOUBLE = "double"
    NUMBER = "number"
    STRING = "string"
    LIST = "list"
    MAP = "map"
    OTHER = "other"


def kind_of(value: Any) -> ValueKind:
    """Return the :class:`ValueKind` of an already converted value.

    ``bool`` is checked before ``int`` because it subclasses ``int``. Integers
    outside the signed 64-bit range are arbitrary-precision ``NUMBER`` values:
    they fit neither the integer category nor a ``float``.

    Examples
    --------
    >>> kind_of(True).value, kind_of(1).value, kind_of(1.5).value
    ('boolean', 'integer', 'double')
    >>> kind_of(Decimal("1.5")) is ValueKind.NUMBER
    True
    >>> kind_of(2**63).value
    'number'
    """

    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        return ValueKind.INTEGER if _INT64_MIN <= value <= _INT64_MAX else ValueKind.NUMBER
    if isinstance(value, float):
        return ValueKind.DOUBLE
    if isinstance(value, Decimal):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, TypedListView):
        return ValueKind.LIST
    if isinstance(value, TypedMapView):
        return ValueKind.MAP
    return ValueKind.OTHER


_BOOLEAN: Final = frozenset({ValueKind.BOOLEAN})
_INTEGER: Final = frozenset({ValueKind.INTEGER})
_DOUBLE: Final = frozenset({ValueKind.INTEGER, ValueKind.DOUBLE})
_NUMBER: Final = frozenset({ValueKind.INTEGER, ValueKind.DOUBLE, ValueKind.NUMBER})
_STRING: Final = frozenset({ValueKind.STRING})
_MAP: Final = frozenset({ValueKind.MAP})
_LIST: Final = frozenset({ValueKind.LIST})


@dataclass(frozen=True, slots=True, repr=False)
class TypedMapView:
    """Immutable, type-checked view over a string-keyed mapping.

    Why
    ----
    Binding properties have no static schema. Consumers need reads that fail
    loudly and precisely (:class:`KeyNotFound` vs. :class:`ValueCastError`)
    instead of propagating ``None`` or silently coercing strings.

    What
    ----
    Stores converted values inside a ``MappingProxyType``. Build instances with
    :meth:`of`; the constructor expects already converted values.

    Examples
    --------
    >>> view = TypedMapView.of({"Key": "Value", "port": 5432})
    >>> view.get_string("Key")
    'Value'
    >>> view.get_double("port")
    5432.0
    >>> sorted(view.get_keys())
    ['Key', 'port']
    """

    _values: Mapping[str, Any]

    def __post_init__(self) -> None:
        object.__setattr__(self, "_values", MappingProxyType(dict(self._values)))

    @classmethod
    def of(cls, raw: Mapping[Any, Any]) -> TypedMapView:
        """Wrap *raw*, converting nested mappings and sequences recursively.

        Keys are converted with :func:`str`; when two keys collapse onto the
        same string the later one wins.
        """

        return cls({str(key): _to_typed(value) for key, value in raw.items()})

    def get_keys(self) -> frozenset[str]:
        """Return the key set; ordering is not significant."""

        return frozenset(self._values)

    def contains_key(self, key: str) -> bool:
        return key in self._values

    def get(self, key: str) -> Any:
        """Return the stored value (possibly ``None``) or raise :class:`KeyNotFound`."""

        try:
            return self._values[key]
        except KeyError:
            raise KeyNotFound(key) from None

    def get_boolean(self, key: str) -> bool:
        return _read_as(self.get(key), ValueKind.BOOLEAN, _BOOLEAN)

    def get_integer(self, key: str) -> int:
        return _read_as(self.get(key), ValueKind.INTEGER, _INTEGER)

    def get_double(self, key: str) -> float:
        return float(_read_as(self.get(key), ValueKind.DOUBLE, _DOUBLE))

    def get_number(self, key: str) -> int | float | Decimal:
        return _read_as(self.get(key), ValueKind.NUMBER, _NUMBER)

    def get_string(self, key: str) -> str:
        return _read_as(self.get(key), ValueKind.STRING, _STRING)

    def get_map_view(self, key: str) -> TypedMapView:
        return _read_as(self.get(key), ValueKind.MAP, _MAP)

    def get_list_view(self, key: str) -> TypedListView:
        return _read_as(self.get(key), ValueKind.LIST, _LIST)

    def as_dict(self) -> dict[str, Any]:
        """Return a deep, mutable ``dict`` copy with nested views unwrapped.

        Examples
        --------
        >>> TypedMapView.of({"a": {"b": [1, 2]}}).as_dict()
        {'a': {'b': [1, 2]}}
        """

        return {key: _to_plain(value) for key, value in self._values.items()}

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"TypedMapView({dict(self._values)!r})"


@dataclass(frozen=True, slots=True, repr=False)
class TypedListView:
    """Immutable, type-checked view over an ordered sequence.

    Indices are positions in ``[0, size)``; negative indices are rejected with
    :class:`IndexNotFound` rather than wrapping around.

    Examples
    --------
    >>> view = TypedListView.of([None, True, 42, 13.37, "Value"])
    >>> view.get_size(), view.get_integer(2), view.get_string(4)
    (5, 42, 'Value')
    """

    _items: tuple[Any, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "_items", tuple(self._items))

    @classmethod
    def of(cls, raw: Sequence[Any]) -> TypedListView:
        """Wrap *raw*, preserving order and duplicates."""

        return cls(tuple(_to_typed(item) for item in raw))

    def get_size(self) -> int:
        return len(self._items)

    def get(self, index: int) -> Any:
        """Return the stored value (possibly ``None``) or raise :class:`IndexNotFound`."""

        if not 0 <= index < len(self._items):
            raise IndexNotFound(index, len(self._items))
        return self._items[index]

    def get_boolean(self, index: int) -> bool:
        return _read_as(self.get(index), ValueKind.BOOLEAN, _BOOLEAN)

    def get_integer(self, index: int) -> int:
        return _read_as(self.get(index), ValueKind.INTEGER, _INTEGER)

    def get_double(self, index: int) -> float:
        return float(_read_as(self.get(index), ValueKind.DOUBLE, _DOUBLE))

    def get_number(self, index: int) -> int | float | Decimal:
        return _read_as(self.get(index), ValueKind.NUMBER, _NUMBER)

    def get_string(self, index: int) -> str:
        return _read_as(self.get(index), ValueKind.STRING, _STRING)

    def get_map_view(self, index: int) -> TypedMapView:
        return _read_as(self.get(index), ValueKind.MAP, _MAP)

    def get_list_view(self, index: int) -> TypedListView:
        return _read_as(self.get(index), ValueKind.LIST, _LIST)

    def as_list(self) -> list[Any]:
        """Return a deep, mutable ``list`` copy with nested views unwrapped."""

        return [_to_plain(item) for item in self._items]

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"TypedListView({list(self._items)!r})"


def _read_as(value: Any, expected: ValueKind, accepted: frozenset[ValueKind]) -> Any:
    """Return *value* when its kind is in *accepted*, else raise :class:`ValueCastError`."""

    actual = kind_of(value)
    if actual not in accepted:
        raise ValueCastError(expected, actual)
    return value


def _to_typed(value: Any) -> Any:
    """Convert raw nested containers into views; leave everything else untouched."""

    if isinstance(value, (TypedMapView, TypedListView)):
        return value
    if isinstance(value, Mapping):
        return TypedMapView.of(value)
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return TypedListView.of(value)
    return value


def _to_plain(value: Any) -> Any:
    if isinstance(value, TypedMapView):
        return value.as_dict()
    if isinstance(value, TypedListView):
        return value.as_list()
    return value
