"""Graph definition file models."""

from .definition import (
    GraphDefinition,
    NodeDefinition,
    load_definition,
    parse_definition,
)

__all__ = [
    "GraphDefinition",
    "NodeDefinition",
    "load_definition",
    "parse_definition",
]
