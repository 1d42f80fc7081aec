"""Graph definition file models (Pydantic v2).

A definition file is YAML listing nodes in the order they are registered:

    nodes:
      - name: web
        dependencies: [api, cache, net]
        labels: [frontend]
      - name: api
        dependencies: [db, cache, net]

Dependencies may name nodes defined later in the file. Dependencies on names
that are never defined are reported when a plan is requested.
"""

from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from ..dependency.strdag import StringDAG
from ..utils.exceptions import DefinitionError


def normalize_name(v: Any) -> Any:
    """
    Strip surrounding whitespace from names; numeric YAML scalars become strings.

    Args:
        v: The value to process.

    Returns:
        Any: The processed value.
    """
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    if isinstance(v, str):
        return v.strip()
    return v


def coerce_list(v: Any) -> Any:
    """
    Accept a single string or null where a list is expected.

    Args:
        v: The value to process.

    Returns:
        Any: A list for strings and None, otherwise the value unchanged.
    """
    if v is None:
        return []
    if isinstance(v, str):
        return [v]
    return v


Name = Annotated[str, BeforeValidator(normalize_name), Field(min_length=1)]


class NodeDefinition(BaseModel):
    """A single node with its dependencies and labels."""

    model_config = ConfigDict(extra="forbid")

    name: Name
    dependencies: Annotated[list[Name], BeforeValidator(coerce_list)] = Field(default_factory=list)
    labels: Annotated[list[Name], BeforeValidator(coerce_list)] = Field(default_factory=list)


class GraphDefinition(BaseModel):
    """All nodes of a graph in registration order."""

    model_config = ConfigDict(extra="forbid")

    nodes: list[NodeDefinition] = Field(default_factory=list)

    @field_validator("nodes")
    @classmethod
    def unique_names(cls, v: list[NodeDefinition]) -> list[NodeDefinition]:
        """Reject node names defined more than once."""
        seen: set[str] = set()
        duplicates: list[str] = []
        for node in v:
            if node.name in seen and node.name not in duplicates:
                duplicates.append(node.name)
            seen.add(node.name)
        if duplicates:
            raise ValueError(f"duplicate node name(s): {', '.join(duplicates)}")
        return v

    def to_dag(self) -> StringDAG:
        """
        Build a graph from this definition.

        Returns:
            StringDAG with every node, dependency and label of the definition
        """
        graph = StringDAG(capacity=len(self.nodes))
        for node in self.nodes:
            graph.add(node.name, dependencies=node.dependencies, labels=node.labels)
        return graph


def parse_definition(data: Any, path: Path | None = None) -> GraphDefinition:
    """
    Validate already-loaded definition data.

    Args:
        data: Parsed YAML document
        path: Optional source path for error messages

    Returns:
        GraphDefinition

    Raises:
        DefinitionError: If the data does not describe a valid graph
    """
    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise DefinitionError(
            f"expected a mapping with a 'nodes' list, got {type(data).__name__}", path=path
        )

    try:
        return GraphDefinition.model_validate(data)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise DefinitionError(
            f"invalid graph definition: {details}", path=path, original_error=e
        ) from e


def load_definition(path: Path) -> GraphDefinition:
    """
    Load and validate a YAML graph definition file.

    Args:
        path: Definition file

    Returns:
        GraphDefinition

    Raises:
        DefinitionError: If the file cannot be read or is invalid
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise DefinitionError(f"cannot read file: {e}", path=path, original_error=e) from e
    except yaml.YAMLError as e:
        raise DefinitionError(f"invalid YAML: {e}", path=path, original_error=e) from e

    return parse_definition(data, path=path)
