"""Utility functions and exceptions."""

from .exceptions import (
    Cycle,
    CycleDetectedError,
    DAGError,
    DefinitionError,
    UndefinedDependencyError,
    UndefinedDependentError,
    UndefinedNodeError,
    UnhandledDependency,
    UnhandledDependencyError,
)
from .keys import Key, format_key, keys_to_strings, quote_key

__all__ = [
    "DAGError",
    "UndefinedNodeError",
    "UndefinedDependencyError",
    "UndefinedDependentError",
    "CycleDetectedError",
    "UnhandledDependencyError",
    "DefinitionError",
    "Cycle",
    "UnhandledDependency",
    "Key",
    "format_key",
    "quote_key",
    "keys_to_strings",
]
