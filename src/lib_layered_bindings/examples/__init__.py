"""Example helper utilities for ``lib_layered_bindings``."""

from .generate import ExampleSpec, generate_examples

__all__ = [
    "ExampleSpec",
    "generate_examples",
]
