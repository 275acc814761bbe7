"""Callable functions exposed to the model."""

from .add_product import ADD_PRODUCT
from .registry import DispatchResult, FunctionDefinition, FunctionRegistry, PartialCallResult, QAExample

BUILTIN_FUNCTIONS = (ADD_PRODUCT,)


def build_default_registry() -> FunctionRegistry:
    """Build a registry holding the built-in functions."""
    registry = FunctionRegistry()
    for definition in BUILTIN_FUNCTIONS:
        registry.register(definition)
    return registry


__all__ = [
    "ADD_PRODUCT",
    "DispatchResult",
    "FunctionDefinition",
    "FunctionRegistry",
    "PartialCallResult",
    "QAExample",
    "build_default_registry",
]
