from __future__ import annotations

from lib_layered_bindings.domain.errors import (
    IndexNotFound,
    InvalidFormat,
    KeyNotFound,
    NotFound,
    ServiceBindingAccessError,
    ServiceBindingError,
    ValueCastError,
)
from lib_layered_bindings.domain.views import ValueKind


def test_error_hierarchy() -> None:
    for exception_type in (KeyNotFound, IndexNotFound, ValueCastError, ServiceBindingAccessError, NotFound, InvalidFormat):
        assert issubclass(exception_type, ServiceBindingError)
    assert issubclass(KeyNotFound, KeyError)
    assert issubclass(IndexNotFound, IndexError)
    assert issubclass(ValueCastError, TypeError)


def test_error_messages_carry_details() -> None:
    assert KeyNotFound("url").key == "url"
    assert str(IndexNotFound(3, 2)) == "Index 3 out of range for list view of size 2"
    error = ValueCastError(ValueKind.INTEGER, ValueKind.STRING)
    assert str(error) == "Cannot read string value as integer"
    assert error.actual is ValueKind.STRING
