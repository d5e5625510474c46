"""Binding root and encoding resolution.

Purpose
-------
Implement the :class:`lib_layered_bindings.application.ports.RootPathResolver`
protocol. The adapter is the only component that knows the well-known mount
point and the environment overrides, so tests and custom deployments can
redirect scans without touching the accessor.

Contents
--------
* :data:`DEFAULT_ROOT_PATH` – well-known mount point of the binding tree.
* :data:`ROOT_ENV_VAR` / :data:`ENCODING_ENV_VAR` – override variables.
* :class:`DefaultRootPathResolver` – resolves root path and encoding.
"""

from __future__ import annotations

import codecs
import os
from pathlib import Path
from typing import Final, Mapping

from ...observability import log_debug

DEFAULT_ROOT_PATH: Final[Path] = Path("/etc/secrets/sapbtp")
DEFAULT_ENCODING: Final[str] = "utf-8"
ROOT_ENV_VAR: Final[str] = "LIB_LAYERED_BINDINGS_ROOT"
ENCODING_ENV_VAR: Final[str] = "LIB_LAYERED_BINDINGS_ENCODING"


class DefaultRootPathResolver:
    """Resolve the binding root and file encoding from the environment.

    Parameters
    ----------
    env:
        Mapping consulted instead of :data:`os.environ` (useful for
        deterministic tests).

    Examples
    --------
    >>> DefaultRootPathResolver(env={}).root_path().as_posix()
    '/etc/secrets/sapbtp'
    >>> DefaultRootPathResolver(env={"LIB_LAYERED_BINDINGS_ROOT": "/tmp/bindings"}).root_path().as_posix()
    '/tmp/bindings'
    """

    def __init__(self, *, env: Mapping[str, str] | None = None) -> None:
        self.env = dict(os.environ if env is None else env)

    def root_path(self) -> Path:
        override = self.env.get(ROOT_ENV_VAR, "").strip()
        if override:
            log_debug("root_path_override", path=override, variable=ROOT_ENV_VAR)
            return Path(override)
        return DEFAULT_ROOT_PATH

    def encoding(self) -> str:
        """Return the configured file encoding, validated against :mod:`codecs`.

        Raises
        ------
        LookupError
            When the configured encoding is unknown to Python.
        """

        configured = self.env.get(ENCODING_ENV_VAR, "").strip() or DEFAULT_ENCODING
        return codecs.lookup(configured).name
