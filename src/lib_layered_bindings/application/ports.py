"""Application-layer ports describing adapter responsibilities.

Purpose
-------
Define the structural contracts the composition root depends on so the
accessor never needs to know which concrete strategies, loaders, or path
resolvers it was given.

Contents
--------
* :class:`ParsingStrategy` – recognises one on-disk binding layout.
* :class:`FileLoader` – parses a structured document into a mapping.
* :class:`RootPathResolver` – decides where the binding tree lives.
* :class:`ServiceBindingAccessor` – produces the list of bindings.

System Role
-----------
These protocols enforce Dependency Inversion. They are ``runtime_checkable``
so contract tests can assert conformance with ``isinstance``.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Mapping, Protocol, runtime_checkable

if TYPE_CHECKING:  # pragma: no cover - import for annotations only
    from ..domain.binding import ServiceBinding


@runtime_checkable
class ParsingStrategy(Protocol):
    """Attempt to parse a binding-instance directory in one layout convention.

    Why
    ----
    Several layout conventions can appear side by side under one root; the
    accessor tries an ordered list of strategies and keeps the first result.

    Contract
    --------
    Return a :class:`ServiceBinding` when the directory matches, ``None`` when
    it does not. An :class:`OSError` escaping :meth:`parse` signals an I/O
    failure; the accessor logs it and moves on to the next strategy.
    """

    name: str

    def parse(self, service_name: str, binding_name: str, binding_path: Path) -> ServiceBinding | None:
        """Return the parsed binding or ``None`` when the layout does not apply."""


@runtime_checkable
class FileLoader(Protocol):
    """Parse a structured document into a mapping.

    Why
    ----
    Segregate parsing concerns (JSON/TOML/YAML) from layout recognition.
    """

    def load(self, path: str) -> Mapping[str, object]:
        """Read *path* and return a mapping or raise ``NotFound``/``InvalidFormat``."""


@runtime_checkable
class RootPathResolver(Protocol):
    """Locate the directory that holds one subdirectory per service type."""

    def root_path(self) -> Path:
        """Return the configured binding root."""


@runtime_checkable
class ServiceBindingAccessor(Protocol):
    """Produce every service binding visible to the accessor."""

    def get_service_bindings(self) -> list[ServiceBinding]:
        """Scan the source of truth and return all parsed bindings."""
