"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by the typed views, the parsing
strategies, the accessor, and consuming applications. The hierarchy lives in
the domain layer so outer rings may depend on it without creating cycles.

Contents
--------
* :class:`ServiceBindingError` – umbrella base class for all library failures.
* :class:`KeyNotFound` – a typed map view was asked for an absent key.
* :class:`IndexNotFound` – a typed list view was asked for an invalid index.
* :class:`ValueCastError` – a stored value does not satisfy the requested type.
* :class:`ServiceBindingAccessError` – the binding tree could not be scanned.
* :class:`NotFound` / :class:`InvalidFormat` – structured document signals
  used by the file loaders.

System Role
-----------
Typed accessor errors always reach the caller. Loader signals are translated
into "layout not applicable" by the strategies, while
:class:`ServiceBindingAccessError` aborts a whole scan.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - import for annotations only
    from .views import ValueKind


class ServiceBindingError(Exception):
    """Base type for all exceptions emitted by ``lib_layered_bindings``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class KeyNotFound(ServiceBindingError, KeyError):
    """Raised when a :class:`TypedMapView` does not contain the requested key.

    Subclasses :class:`KeyError` so ``except KeyError`` blocks written against
    plain dictionaries keep working.
    """

    def __init__(self, key: str) -> None:
        super().__init__(f"Key '{key}' not found")
        self.key = key

    def __str__(self) -> str:
        return str(self.args[0])


class IndexNotFound(ServiceBindingError, IndexError):
    """Raised when a :class:`TypedListView` index lies outside ``[0, size)``."""

    def __init__(self, index: int, size: int) -> None:
        super().__init__(f"Index {index} out of range for list view of size {size}")
        self.index = index
        self.size = size


class ValueCastError(ServiceBindingError, TypeError):
    """Signal that a stored value's category does not satisfy a typed accessor.

    Why
    ----
    Consumers read externally produced data without a schema; a mismatch is a
    consumer/schema problem and is never retried.

    Attributes
    ----------
    expected:
        :class:`ValueKind` the accessor was asked to produce (e.g. ``ValueKind.INTEGER``).
    actual:
        :class:`ValueKind` of the value actually stored.
    """

    def __init__(self, expected: ValueKind, actual: ValueKind) -> None:
        super().__init__(f"Cannot read {actual.value} value as {expected.value}")
        self.expected = expected
        self.actual = actual


class ServiceBindingAccessError(ServiceBindingError):
    """Raised when the binding root or a service-type directory cannot be listed.

    Why
    ----
    A broken root or service-type directory means the scan result would be
    silently incomplete; the accessor fails the whole call instead. The
    underlying :class:`OSError` is chained via ``raise ... from``.
    """


class NotFound(ServiceBindingError):
    """Represents a missing-but-optional structured document.

    Strategies treat this as "layout not applicable" and move on.
    """


class InvalidFormat(ServiceBindingError):
    """Raised when a structured document cannot be parsed into a mapping.

    Typical Sources
    ---------------
    Structured file loaders (:mod:`json`, :mod:`tomllib`, :mod:`yaml`) and the
    secret-root-key strategy.
    """
