from .bindings import BindingSandbox, create_binding_sandbox

__all__ = ["BindingSandbox", "create_binding_sandbox"]
