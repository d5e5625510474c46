"""Filesystem helpers shared by the layered parsing strategies.

Only regular files count as binding content. Names starting with ``.`` are
skipped, which hides the ``..data`` and timestamped directories Kubernetes
creates when it mounts a secret volume.
"""

from __future__ import annotations

import os
from pathlib import Path

from ...observability import log_debug, make_event


def is_visible(name: str) -> bool:
    return not name.startswith(".")


def list_visible_files(directory: Path) -> list[Path]:
    """Return the visible regular files directly inside *directory*, sorted by name.

    Raises
    ------
    OSError
        When *directory* cannot be listed; callers treat this as an I/O
        failure rather than a layout mismatch.
    """

    with os.scandir(directory) as entries:
        files = [Path(entry.path) for entry in entries if is_visible(entry.name) and entry.is_file()]
    return sorted(files, key=lambda path: path.name)


def read_text(path: Path, encoding: str) -> str | None:
    """Return the decoded content of *path* or ``None`` when it is not valid *encoding*.

    ``OSError`` from the read itself propagates unchanged.
    """

    payload = path.read_bytes()
    log_debug("binding_file_read", path=str(path), size=len(payload))
    try:
        return payload.decode(encoding)
    except UnicodeDecodeError:
        return None


def not_applicable(strategy: str, service_name: str, binding_name: str, binding_path: Path, reason: str) -> None:
    """Log why *strategy* rejected a binding directory and return ``None``."""

    log_debug(
        "strategy_not_applicable",
        **make_event(service_name, binding_name, str(binding_path), {"strategy": strategy, "reason": reason}),
    )
    return None
