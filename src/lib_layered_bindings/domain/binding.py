"""Service binding value object.

Purpose
-------
Represent one discovered binding (credentials plus connection metadata for a
single backing service instance) as an immutable value that consumers can pass
around freely.

Contents
--------
* :data:`METADATA_KEYS` – property names that describe the binding rather
  than carry secrets.
* :class:`ServiceBinding` – the value object returned by accessors.
* :func:`split_credentials` – separate metadata from credential properties.
* :func:`coerce_tags` – normalise the assorted ``tags`` representations.
* :func:`optional_string` – read an optional plan or label value.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final

from .views import TypedListView, TypedMapView

METADATA_KEYS: Final[frozenset[str]] = frozenset(
    {"instance_guid", "instance_name", "label", "plan", "tags", "type"}
)
"""Keys lifted out of the credentials by every layered parsing strategy."""


@dataclass(frozen=True, slots=True)
class ServiceBinding:
    """Immutable bundle of properties for one service binding.

    Why
    ----
    Consumers look bindings up by service type, plan or tag and then read
    credentials through typed accessors; the value object keeps both concerns
    in one place without exposing the on-disk layout it came from.

    Attributes
    ----------
    name:
        Name of the binding-instance directory.
    service_name:
        Name of the service-type directory that contains the binding.
    properties:
        Every property the strategy parsed, wrapped in a :class:`TypedMapView`.
    credentials:
        The secret part of :attr:`properties`.
    service_plan:
        Plan name when the layout declares one.
    tags:
        Tags declared by the layout, in declaration order.
    path:
        Binding directory the binding was parsed from.
    strategy:
        Name of the parsing strategy that recognised the directory.

    Examples
    --------
    >>> binding = ServiceBinding(
    ...     name="my-xsuaa",
    ...     service_name="xsuaa",
    ...     properties=TypedMapView.of({"clientid": "abc"}),
    ...     credentials=TypedMapView.of({"clientid": "abc"}),
    ... )
    >>> binding.get("clientid"), binding.contains_key("plan")
    ('abc', False)
    """

    name: str
    service_name: str
    properties: TypedMapView
    credentials: TypedMapView
    service_plan: str | None = None
    tags: tuple[str, ...] = ()
    path: Path | None = field(default=None, compare=False)
    strategy: str | None = field(default=None, compare=False)

    def get_keys(self) -> frozenset[str]:
        return self.properties.get_keys()

    def contains_key(self, key: str) -> bool:
        return self.properties.contains_key(key)

    def get(self, key: str) -> Any:
        """Return the property stored under *key* or raise :class:`KeyNotFound`."""

        return self.properties.get(key)

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-ready dictionary describing the binding.

        Why
        ----
        The CLI and debugging tools print bindings; plain dictionaries keep
        serialisation trivial.
        """

        return {
            "name": self.name,
            "service_name": self.service_name,
            "service_plan": self.service_plan,
            "tags": list(self.tags),
            "strategy": self.strategy,
            "path": str(self.path) if self.path is not None else None,
            "credentials": self.credentials.as_dict(),
            "properties": self.properties.as_dict(),
        }


def split_credentials(properties: Mapping[str, Any]) -> dict[str, Any]:
    """Return *properties* without the keys listed in :data:`METADATA_KEYS`.

    Examples
    --------
    >>> split_credentials({"plan": "lite", "url": "https://demo"})
    {'url': 'https://demo'}
    """

    return {key: value for key, value in properties.items() if key not in METADATA_KEYS}


def coerce_tags(raw: Any) -> tuple[str, ...]:
    """Normalise a ``tags`` property into a tuple of strings.

    Accepts ``None``, a sequence (raw or :class:`TypedListView`), a JSON array
    encoded as text, or a single plain string.

    Examples
    --------
    >>> coerce_tags('["hana", "db"]')
    ('hana', 'db')
    >>> coerce_tags("hana")
    ('hana',)
    >>> coerce_tags(None)
    ()
    """

    if raw is None:
        return ()
    if isinstance(raw, TypedListView):
        raw = raw.as_list()
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return ()
        try:
            decoded = json.loads(text)
        except json.JSONDecodeError:
            return (text,)
        if not isinstance(decoded, list):
            return (text,)
        raw = decoded
    if isinstance(raw, (list, tuple)):
        return tuple(str(item) for item in raw if item is not None)
    return (str(raw),)


def optional_string(raw: Any) -> str | None:
    """Return *raw* stripped when it is a non-empty string, else ``None``."""

    if isinstance(raw, str) and raw.strip():
        return raw.strip()
    return None
