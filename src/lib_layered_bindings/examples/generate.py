"""Sample binding tree generation helpers.

Purpose
-------
Produce a reproducible binding tree that demonstrates every layout the
default strategies understand. Used by documentation, demos and the CLI; it
has no runtime coupling to the composition root.

Contents
    - ``ExampleSpec``: dataclass capturing a relative path and text content.
    - ``generate_examples``: public orchestration expressed through helper
      verbs.
    - ``_build_specs``: yields one spec per sample file.
    - ``_write_spec`` / ``_should_write`` / ``_ensure_parent``: tiny filesystem
      helpers that narrate how files are written.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator


@dataclass(slots=True)
class ExampleSpec:
    """Describe a single example file to be written to disk.

    Attributes
    ----------
    relative_path:
        Path relative to the destination root
        (``<service>/<binding>/<file>``).
    content:
        File contents written as UTF-8 text.
    """

    relative_path: Path
    content: str


def generate_examples(destination: str | Path, *, force: bool = False) -> list[Path]:
    """Write one sample binding per supported layout under *destination*.

    Parameters
    ----------
    destination:
        Directory that becomes the binding root.
    force:
        When ``True`` existing files are overwritten; otherwise the function
        skips files that already exist.

    Returns
    -------
    list[Path]
        File paths written during this invocation.

    Side Effects
    ------------
    Creates directories and writes files under ``destination``.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> generated = generate_examples(tmp.name)
    >>> sorted({path.parent.parent.name for path in generated})
    ['destination', 'objectstore', 'xsuaa']
    >>> tmp.cleanup()
    """

    dest = Path(destination)
    return _write_examples(dest, _build_specs(), force)


def _write_examples(destination: Path, specs: Iterator[ExampleSpec], force: bool) -> list[Path]:
    """Write all ``specs`` under *destination* honouring the *force* flag."""

    written: list[Path] = []
    for spec in specs:
        path = destination / spec.relative_path
        if not _should_write(path, force):
            continue
        _ensure_parent(path)
        _write_spec(path, spec)
        written.append(path)
    return written


def _write_spec(path: Path, spec: ExampleSpec) -> None:
    path.write_text(spec.content, encoding="utf-8")


def _should_write(path: Path, force: bool) -> bool:
    return force or not path.exists()


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _build_specs() -> Iterator[ExampleSpec]:
    """Yield :class:`ExampleSpec` instances for each sample binding.

    Examples
    --------
    >>> [spec.relative_path.as_posix() for spec in _build_specs()][0]
    'xsuaa/root-key-binding/credentials'
    """

    yield ExampleSpec(
        Path("xsuaa/root-key-binding/credentials"),
        json.dumps(
            {
                "clientid": "sb-demo!t1",
                "clientsecret": "changeme",
                "url": "https://demo.authentication.example.com",
                "plan": "application",
                "tags": ["xsuaa"],
            },
            indent=2,
        ),
    )
    secret_key_files = {
        "type": "destination",
        "plan": "lite",
        "tags": '["destination", "conn"]',
        "uri": "https://destination-configuration.example.com",
        "clientid": "sb-destination!b1",
        "clientsecret": "changeme",
    }
    for file_name, content in secret_key_files.items():
        yield ExampleSpec(Path("destination/secret-key-binding") / file_name, content)
    yield ExampleSpec(
        Path("objectstore/data-binding/data.json"),
        json.dumps(
            {
                "metadata": {"plan": "standard", "tags": ["objectstore", "s3"]},
                "credentials": {"bucket": "demo-bucket", "region": "eu10", "port": 443},
            },
            indent=2,
        ),
    )
