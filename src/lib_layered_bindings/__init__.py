"""Public package surface for layered service binding access.

Read service bindings mounted as ``<root>/<service>/<binding>`` directories
and consume their properties through immutable, type-checked views::

    from lib_layered_bindings import LayeredServiceBindingAccessor

    for binding in LayeredServiceBindingAccessor().get_service_bindings():
        url = binding.credentials.get_string("url")
"""

from __future__ import annotations

from .adapters.strategies.data import DataParsingStrategy
from .adapters.strategies.secret_key import SecretKeyParsingStrategy
from .adapters.strategies.secret_root_key import SecretRootKeyParsingStrategy
from .core import (
    DEFAULT_ENCODING,
    DEFAULT_PARSING_STRATEGIES,
    DEFAULT_ROOT_PATH,
    LayeredServiceBindingAccessor,
    default_strategies,
    get_service_bindings,
    strategies_by_name,
)
from .domain.binding import ServiceBinding
from .domain.errors import (
    IndexNotFound,
    InvalidFormat,
    KeyNotFound,
    NotFound,
    ServiceBindingAccessError,
    ServiceBindingError,
    ValueCastError,
)
from .domain.views import TypedListView, TypedMapView, ValueKind
from .observability import bind_trace_id, get_logger

__all__ = [
    "DEFAULT_ENCODING",
    "DEFAULT_PARSING_STRATEGIES",
    "DEFAULT_ROOT_PATH",
    "DataParsingStrategy",
    "IndexNotFound",
    "InvalidFormat",
    "KeyNotFound",
    "LayeredServiceBindingAccessor",
    "NotFound",
    "SecretKeyParsingStrategy",
    "SecretRootKeyParsingStrategy",
    "ServiceBinding",
    "ServiceBindingAccessError",
    "ServiceBindingError",
    "TypedListView",
    "TypedMapView",
    "ValueCastError",
    "ValueKind",
    "bind_trace_id",
    "default_strategies",
    "get_logger",
    "get_service_bindings",
    "strategies_by_name",
]
