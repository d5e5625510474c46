"""Data layout: one structured document with conventional sections.

Layout
------
::

    <root>/<service>/<binding>/data.json

    {
      "metadata": {"plan": "standard", "tags": ["objectstore"]},
      "credentials": {"bucket": "demo", "region": "eu10"}
    }

The first existing file among :data:`DEFAULT_DATA_FILE_NAMES` is loaded with
the loader matching its suffix. The document must hold a ``credentials``
mapping. ``plan``/``tags`` are read from the optional ``metadata`` section,
falling back to top-level keys.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final, Sequence

from ...domain.binding import ServiceBinding, coerce_tags, optional_string
from ...domain.errors import InvalidFormat, NotFound
from ...domain.views import TypedMapView
from ..file_loaders.structured import BaseFileLoader, loader_for
from ._layout import not_applicable

DEFAULT_DATA_FILE_NAMES: Final[tuple[str, ...]] = ("data.json", "data.yaml", "data.yml", "data.toml")
"""Candidate document names in preference order."""


class DataParsingStrategy:
    """Parse binding directories holding a designated structured data document.

    Parameters
    ----------
    file_names:
        Candidate document names, tried in order; only the first existing one
        is considered. Each name needs a suffix known to the structured
        loaders.
    encoding:
        Text encoding of the document.
    """

    name = "data"

    def __init__(self, *, file_names: Sequence[str] = DEFAULT_DATA_FILE_NAMES, encoding: str = "utf-8") -> None:
        loaders = {file_name: loader_for(file_name, encoding=encoding) for file_name in file_names}
        unsupported = [file_name for file_name, loader in loaders.items() if loader is None]
        if unsupported:
            raise ValueError(f"Unsupported data document names: {', '.join(unsupported)}")
        self.file_names = tuple(file_names)
        self.encoding = encoding
        self._loaders: dict[str, BaseFileLoader] = loaders  # type: ignore[assignment]

    def parse(self, service_name: str, binding_name: str, binding_path: Path) -> ServiceBinding | None:
        found = self._find_document(binding_path)
        if found is None:
            return not_applicable(self.name, service_name, binding_name, binding_path, "no data document")

        document_path, loader = found
        try:
            document = loader.load(str(document_path))
        except (NotFound, InvalidFormat):
            return not_applicable(self.name, service_name, binding_name, binding_path, "invalid data document")

        if not isinstance(document.get("credentials"), Mapping):
            return not_applicable(self.name, service_name, binding_name, binding_path, "missing credentials section")

        properties = TypedMapView.of(document)
        return ServiceBinding(
            name=binding_name,
            service_name=service_name,
            properties=properties,
            credentials=properties.get_map_view("credentials"),
            service_plan=optional_string(_metadata_value(document, "plan")),
            tags=coerce_tags(_metadata_value(document, "tags")),
            path=binding_path,
            strategy=self.name,
        )

    def _find_document(self, binding_path: Path) -> tuple[Path, BaseFileLoader] | None:
        for file_name in self.file_names:
            candidate = binding_path / file_name
            if candidate.is_file():
                return candidate, self._loaders[file_name]
        return None


def _metadata_value(document: Mapping[str, Any], key: str) -> Any:
    metadata = document.get("metadata")
    if isinstance(metadata, Mapping) and key in metadata:
        return metadata[key]
    return document.get(key)
