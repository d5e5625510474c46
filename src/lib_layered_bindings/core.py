"""Composition root for ``lib_layered_bindings``.

Purpose
-------
Provide the entry point that walks a layered binding tree and turns every
binding-instance directory into a :class:`ServiceBinding` using an ordered set
of parsing strategies.

Contents
--------
* :data:`STRATEGY_TYPES` – strategy classes keyed by their public name.
* :func:`default_strategies` / :data:`DEFAULT_PARSING_STRATEGIES` – the
  default priority order.
* :func:`strategies_by_name` – build a custom order from strategy names.
* :class:`LayeredServiceBindingAccessor` – the scanning accessor.
* :func:`get_service_bindings` – convenience wrapper around the accessor.

System Role
-----------
Connects the strategy adapters and the root path resolver with the domain
value objects while emitting structured observability signals. The accessor
only depends on the :class:`ParsingStrategy` protocol, never on concrete
strategy types.

Scan Rules
----------
``<root>/<service type>/<binding instance>/...``: the root and every
service-type directory must be listable, otherwise the whole scan fails with
:class:`ServiceBindingAccessError`. Inside a binding-instance directory the
first strategy returning a binding wins; an ``OSError`` raised by one strategy
only disqualifies that strategy, and a directory no strategy recognises is
skipped.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Final, Iterable, Mapping, Sequence

from .adapters.path_resolvers.default import DEFAULT_ENCODING, DEFAULT_ROOT_PATH, DefaultRootPathResolver
from .adapters.strategies._layout import is_visible
from .adapters.strategies.data import DataParsingStrategy
from .adapters.strategies.secret_key import SecretKeyParsingStrategy
from .adapters.strategies.secret_root_key import SecretRootKeyParsingStrategy
from .application.ports import ParsingStrategy
from .domain.binding import ServiceBinding
from .domain.errors import ServiceBindingAccessError
from .observability import log_debug, log_error, log_info, make_event

STRATEGY_TYPES: Final[dict[str, type]] = {
    DataParsingStrategy.name: DataParsingStrategy,
    SecretRootKeyParsingStrategy.name: SecretRootKeyParsingStrategy,
    SecretKeyParsingStrategy.name: SecretKeyParsingStrategy,
}


def default_strategies(encoding: str = DEFAULT_ENCODING) -> tuple[ParsingStrategy, ...]:
    """Return the default strategies, most specific layout first.

    The data layout is recognised by its designated document, the root-key
    layout by a single JSON object file; the secret-key layout accepts any
    directory with files and therefore goes last. A data document the data
    layout rejects (for example one without a ``credentials`` mapping) is
    still a single file, so the root-key layout may claim it next.

    Examples
    --------
    >>> [strategy.name for strategy in default_strategies()]
    ['data', 'secret_root_key', 'secret_key']
    """

    return strategies_by_name(STRATEGY_TYPES, encoding=encoding)


def strategies_by_name(names: Iterable[str], *, encoding: str = DEFAULT_ENCODING) -> tuple[ParsingStrategy, ...]:
    """Instantiate the strategies called *names*, keeping the given order.

    Raises
    ------
    ValueError
        When a name is not listed in :data:`STRATEGY_TYPES`.
    """

    strategies: list[ParsingStrategy] = []
    for name in names:
        try:
            strategy_type = STRATEGY_TYPES[name]
        except KeyError:
            raise ValueError(f"Unknown parsing strategy '{name}'; expected one of: {', '.join(STRATEGY_TYPES)}") from None
        strategies.append(strategy_type(encoding=encoding))
    return tuple(strategies)


DEFAULT_PARSING_STRATEGIES: Final[tuple[ParsingStrategy, ...]] = default_strategies()


class LayeredServiceBindingAccessor:
    """Scan a layered binding tree and return every recognised binding.

    Why
    ----
    Platforms mount bindings as ``<root>/<service>/<binding>`` directories in
    several formats; consumers want one flat list regardless of the layout
    each binding uses.

    Parameters
    ----------
    root_path:
        Binding root. Defaults to ``LIB_LAYERED_BINDINGS_ROOT`` or
        :data:`DEFAULT_ROOT_PATH`.
    strategies:
        Parsing strategies in priority order. Defaults to
        :func:`default_strategies` built with *encoding*.
    encoding:
        File encoding for the default strategies. Defaults to
        ``LIB_LAYERED_BINDINGS_ENCODING`` or UTF-8. Custom strategies carry
        their own encoding.
    env:
        Environment mapping used instead of :data:`os.environ`.

    Side Effects
    ------------
    :meth:`get_service_bindings` only reads the filesystem. Nothing is cached;
    every call re-scans.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> binding_dir = Path(tmp.name) / "postgres" / "my-db"
    >>> binding_dir.mkdir(parents=True)
    >>> _ = (binding_dir / "uri").write_text("postgres://demo", encoding="utf-8")
    >>> _ = (binding_dir / "username").write_text("demo", encoding="utf-8")
    >>> bindings = LayeredServiceBindingAccessor(tmp.name).get_service_bindings()
    >>> [(b.service_name, b.name, b.credentials.get_string("uri")) for b in bindings]
    [('postgres', 'my-db', 'postgres://demo')]
    >>> tmp.cleanup()
    """

    def __init__(
        self,
        root_path: str | Path | None = None,
        strategies: Iterable[ParsingStrategy] | None = None,
        *,
        encoding: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        resolver = DefaultRootPathResolver(env=env)
        self.root_path = Path(root_path) if root_path is not None else resolver.root_path()
        self.encoding = encoding or resolver.encoding()
        if strategies is None:
            self.strategies = default_strategies(self.encoding)
        else:
            self.strategies = tuple(strategies)

    def get_service_bindings(self) -> list[ServiceBinding]:
        """Return all bindings found under :attr:`root_path`.

        Raises
        ------
        ServiceBindingAccessError
            When the root or a service-type directory cannot be listed.
        """

        root = self.root_path
        try:
            service_paths = _list_directories(root)
        except OSError as exc:
            log_error("service_bindings_unavailable", **make_event(None, None, str(root), {"error": type(exc).__name__}))
            raise ServiceBindingAccessError("Unable to access service binding files.") from exc

        bindings: list[ServiceBinding] = []
        for service_path in service_paths:
            bindings.extend(self._parse_service(service_path))
        log_info(
            "service_bindings_scanned",
            **make_event(None, None, str(root), {"services": len(service_paths), "bindings": len(bindings)}),
        )
        return bindings

    def _parse_service(self, service_path: Path) -> list[ServiceBinding]:
        try:
            binding_paths = _list_directories(service_path)
        except OSError as exc:
            log_error(
                "service_bindings_unavailable",
                **make_event(service_path.name, None, str(service_path), {"error": type(exc).__name__}),
            )
            raise ServiceBindingAccessError(f"Unable to access service binding files in '{service_path}'.") from exc

        bindings: list[ServiceBinding] = []
        for binding_path in binding_paths:
            binding = self._parse_binding(service_path.name, binding_path)
            if binding is not None:
                bindings.append(binding)
        return bindings

    def _parse_binding(self, service_name: str, binding_path: Path) -> ServiceBinding | None:
        """Return the result of the first strategy that recognises *binding_path*."""

        for strategy in self.strategies:
            binding = self._apply_strategy(strategy, service_name, binding_path)
            if binding is not None:
                log_debug(
                    "binding_parsed",
                    **make_event(service_name, binding_path.name, str(binding_path), {"strategy": strategy.name}),
                )
                return binding
        log_debug(
            "binding_skipped",
            **make_event(service_name, binding_path.name, str(binding_path), {"strategies": len(self.strategies)}),
        )
        return None

    def _apply_strategy(self, strategy: ParsingStrategy, service_name: str, binding_path: Path) -> ServiceBinding | None:
        try:
            return strategy.parse(service_name, binding_path.name, binding_path)
        except OSError as exc:
            log_debug(
                "strategy_failed",
                **make_event(
                    service_name,
                    binding_path.name,
                    str(binding_path),
                    {"strategy": strategy.name, "error": type(exc).__name__},
                ),
            )
            return None


def get_service_bindings(
    root_path: str | Path | None = None,
    *,
    strategies: Sequence[ParsingStrategy] | None = None,
    encoding: str | None = None,
) -> list[ServiceBinding]:
    """Scan *root_path* with a freshly configured :class:`LayeredServiceBindingAccessor`."""

    return LayeredServiceBindingAccessor(root_path, strategies, encoding=encoding).get_service_bindings()


def _list_directories(path: Path) -> list[Path]:
    """Return visible subdirectories of *path* sorted by name; ``OSError`` propagates."""

    with os.scandir(path) as entries:
        directories = [Path(entry.path) for entry in entries if is_visible(entry.name) and entry.is_dir()]
    return sorted(directories, key=lambda directory: directory.name)


__all__ = [
    "DEFAULT_ENCODING",
    "DEFAULT_PARSING_STRATEGIES",
    "DEFAULT_ROOT_PATH",
    "STRATEGY_TYPES",
    "LayeredServiceBindingAccessor",
    "default_strategies",
    "get_service_bindings",
    "strategies_by_name",
]
