"""Secret-root-key layout: one file holding the whole binding as a JSON object.

Layout
------
::

    <root>/<service>/<binding>/<root key>     # {"clientid": "...", "plan": "..."}

The binding directory must contain exactly one visible regular file and its
content must decode to a JSON object. Metadata keys (``plan``, ``tags``,
``label`` ...) are lifted out; everything else becomes a credential.
"""

from __future__ import annotations

from pathlib import Path

from ...domain.binding import ServiceBinding, coerce_tags, optional_string, split_credentials
from ...domain.errors import InvalidFormat, NotFound
from ...domain.views import TypedMapView
from ..file_loaders.structured import JSONFileLoader
from ._layout import list_visible_files, not_applicable, read_text


class SecretRootKeyParsingStrategy:
    """Parse binding directories that hold a single JSON secret document.

    Parameters
    ----------
    root_key:
        Required file name of the document. ``None`` accepts any single file.
    encoding:
        Text encoding of the document.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> binding_dir = Path(tmp.name)
    >>> _ = (binding_dir / "credentials").write_text('{"clientid": "abc", "plan": "lite"}', encoding="utf-8")
    >>> binding = SecretRootKeyParsingStrategy().parse("xsuaa", "my-xsuaa", binding_dir)
    >>> binding.credentials.get_string("clientid"), binding.service_plan
    ('abc', 'lite')
    >>> tmp.cleanup()
    """

    name = "secret_root_key"

    def __init__(self, *, root_key: str | None = None, encoding: str = "utf-8") -> None:
        self.root_key = root_key
        self.encoding = encoding
        self._loader = JSONFileLoader(encoding=encoding)

    def parse(self, service_name: str, binding_name: str, binding_path: Path) -> ServiceBinding | None:
        files = list_visible_files(binding_path)
        if len(files) != 1:
            return not_applicable(self.name, service_name, binding_name, binding_path, f"expected 1 file, found {len(files)}")
        document_path = files[0]
        if self.root_key is not None and document_path.name != self.root_key:
            return not_applicable(self.name, service_name, binding_name, binding_path, "root key mismatch")

        text = read_text(document_path, self.encoding)
        if text is None:
            return not_applicable(self.name, service_name, binding_name, binding_path, "undecodable content")
        try:
            document = self._loader.loads(text, path=str(document_path))
        except (NotFound, InvalidFormat):
            return not_applicable(self.name, service_name, binding_name, binding_path, "not a JSON object")

        return ServiceBinding(
            name=binding_name,
            service_name=service_name,
            properties=TypedMapView.of(document),
            credentials=TypedMapView.of(split_credentials(document)),
            service_plan=optional_string(document.get("plan")),
            tags=coerce_tags(document.get("tags")),
            path=binding_path,
            strategy=self.name,
        )
