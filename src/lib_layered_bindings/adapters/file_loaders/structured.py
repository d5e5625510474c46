"""Structured binding document loaders.

Purpose
-------
Convert on-disk documents (the designated ``data`` document and the
secret-root-key document) into Python mappings. Adapters are small wrappers
around ``json``/``tomllib``/``yaml.safe_load`` so error handling and
observability policies live in one place.

Contents
--------
* :class:`BaseFileLoader` – shared helpers for reading files and validating
  mapping outputs.
* :class:`JSONFileLoader` – JSON documents (also used for root-key secrets).
* :class:`TOMLFileLoader` – TOML documents.
* :class:`YAMLFileLoader` – YAML documents via PyYAML.
* :data:`LOADER_TYPES` / :func:`loader_for` – loader lookup keyed by suffix.

System Role
-----------
Invoked by the parsing strategies. Missing files raise :class:`NotFound`,
malformed content raises :class:`InvalidFormat`; strategies translate both
into "layout not applicable". Genuine I/O failures surface as ``OSError``.
"""

from __future__ import annotations

import json
import tomllib
from decimal import Decimal
from pathlib import Path
from typing import Mapping

import yaml

from ...domain.errors import InvalidFormat, NotFound
from ...observability import log_debug, log_error


class BaseFileLoader:
    """Common utilities shared by the structured file loaders.

    Parameters
    ----------
    encoding:
        Text encoding used to decode documents (UTF-8 by default).
    """

    format_name = "text"

    def __init__(self, *, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def _read_text(self, path: str) -> str:
        """Read *path* as text, raising :class:`NotFound` when the file is missing.

        Side Effects
        ------------
        Emits ``binding_file_read`` debug events (size only, never content).
        """

        file_path = Path(path)
        if not file_path.is_file():
            raise NotFound(f"Binding document not found: {path}")
        payload = file_path.read_bytes()
        log_debug("binding_file_read", path=path, size=len(payload))
        try:
            return payload.decode(self.encoding)
        except UnicodeDecodeError as exc:
            raise self._invalid(path, exc) from exc

    def _invalid(self, path: str, exc: Exception) -> InvalidFormat:
        """Log *exc* and return the :class:`InvalidFormat` the caller raises."""

        log_error("binding_document_invalid", path=path, format=self.format_name, error=type(exc).__name__)
        return InvalidFormat(f"Invalid {self.format_name.upper()} in {path}: {exc}")

    def _ensure_mapping(self, data: object, *, path: str) -> Mapping[str, object]:
        """Ensure *data* behaves like a mapping, otherwise raise ``InvalidFormat``.

        Examples
        --------
        >>> BaseFileLoader()._ensure_mapping({"key": 1}, path="demo")
        {'key': 1}
        >>> BaseFileLoader()._ensure_mapping(42, path="demo")
        Traceback (most recent call last):
        ...
        lib_layered_bindings.domain.errors.InvalidFormat: File demo did not produce a mapping
        """

        if not isinstance(data, Mapping):
            raise InvalidFormat(f"File {path} did not produce a mapping")
        log_debug("binding_document_loaded", path=path, format=self.format_name)
        return data  # type: ignore[return-value]


class JSONFileLoader(BaseFileLoader):
    """Load JSON documents.

    Non-integral numbers are parsed as :class:`~decimal.Decimal` only when they
    cannot round-trip through ``float``; everything else keeps the usual
    ``int``/``float`` types so typed accessors see the expected categories.
    """

    format_name = "json"

    def load(self, path: str) -> Mapping[str, object]:
        """Return the mapping decoded from the JSON file at *path*."""

        return self.loads(self._read_text(path), path=path)

    def loads(self, text: str, *, path: str) -> Mapping[str, object]:
        """Decode *text* (already read from *path*) into a mapping."""

        try:
            data = json.loads(text, parse_float=_parse_float)
        except json.JSONDecodeError as exc:
            raise self._invalid(path, exc) from exc
        return self._ensure_mapping(data, path=path)


class TOMLFileLoader(BaseFileLoader):
    """Load TOML documents using the standard library parser."""

    format_name = "toml"

    def load(self, path: str) -> Mapping[str, object]:
        text = self._read_text(path)
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise self._invalid(path, exc) from exc
        return self._ensure_mapping(data, path=path)


class YAMLFileLoader(BaseFileLoader):
    """Load YAML documents with ``yaml.safe_load``; empty documents yield ``{}``."""

    format_name = "yaml"

    def load(self, path: str) -> Mapping[str, object]:
        text = self._read_text(path)
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise self._invalid(path, exc) from exc
        if data is None:
            data = {}
        return self._ensure_mapping(data, path=path)


def _parse_float(literal: str) -> float | Decimal:
    """Keep ``float`` when exact enough, otherwise preserve the literal as ``Decimal``.

    Examples
    --------
    >>> _parse_float("13.37")
    13.37
    >>> _parse_float("0.1000000000000000000000000001")
    Decimal('0.1000000000000000000000000001')
    """

    value = float(literal)
    if Decimal(repr(value)) == Decimal(literal):
        return value
    return Decimal(literal)


LOADER_TYPES: dict[str, type[BaseFileLoader]] = {
    ".json": JSONFileLoader,
    ".toml": TOMLFileLoader,
    ".yaml": YAMLFileLoader,
    ".yml": YAMLFileLoader,
}
"""Loader classes keyed by lower-case file suffix."""


def loader_for(path: str | Path, *, encoding: str = "utf-8") -> BaseFileLoader | None:
    """Return a loader instance for *path* based on its suffix, or ``None``.

    Examples
    --------
    >>> type(loader_for("data.yml")).__name__
    'YAMLFileLoader'
    >>> loader_for("data.ini") is None
    True
    """

    loader_type = LOADER_TYPES.get(Path(path).suffix.lower())
    if loader_type is None:
        return None
    return loader_type(encoding=encoding)
