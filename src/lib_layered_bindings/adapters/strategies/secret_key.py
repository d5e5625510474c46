"""Secret-key layout: one file per property.

Layout
------
::

    <root>/<service>/<binding>/clientid       # abc
    <root>/<service>/<binding>/clientsecret   # s3cr3t
    <root>/<service>/<binding>/tags           # ["xsuaa"]

Each visible regular file name is a property key and its decoded content the
property value. The properties are exactly that flat mapping; the ``tags``
file may hold a JSON array or a single tag.
"""

from __future__ import annotations

from pathlib import Path

from ...domain.binding import ServiceBinding, coerce_tags, optional_string, split_credentials
from ...domain.views import TypedMapView
from ._layout import list_visible_files, not_applicable, read_text


class SecretKeyParsingStrategy:
    """Parse binding directories where every file is one property."""

    name = "secret_key"

    def __init__(self, *, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def parse(self, service_name: str, binding_name: str, binding_path: Path) -> ServiceBinding | None:
        files = list_visible_files(binding_path)
        if not files:
            return not_applicable(self.name, service_name, binding_name, binding_path, "no property files")

        values: dict[str, str] = {}
        for file_path in files:
            text = read_text(file_path, self.encoding)
            if text is None:
                return not_applicable(self.name, service_name, binding_name, binding_path, "undecodable content")
            values[file_path.name] = text

        return ServiceBinding(
            name=binding_name,
            service_name=service_name,
            properties=TypedMapView.of(values),
            credentials=TypedMapView.of(split_credentials(values)),
            service_plan=optional_string(values.get("plan")),
            tags=coerce_tags(values.get("tags")),
            path=binding_path,
            strategy=self.name,
        )
