"""Tests for graph definition files."""

from pathlib import Path

import pytest

from dagplan.models.definition import (
    GraphDefinition,
    NodeDefinition,
    load_definition,
    parse_definition,
)
from dagplan.utils.exceptions import DefinitionError, UndefinedDependencyError


class TestNodeDefinition:
    """Test NodeDefinition validation."""

    def test_defaults(self):
        """Test dependencies and labels default to empty lists."""
        node = NodeDefinition(name="web")

        assert node.dependencies == []
        assert node.labels == []

    def test_whitespace_is_stripped(self):
        """Test names are stripped."""
        node = NodeDefinition(name="  web ", dependencies=[" api"])

        assert node.name == "web"
        assert node.dependencies == ["api"]

    def test_single_string_and_null(self):
        """Test a bare string or null is accepted for list fields."""
        node = NodeDefinition.model_validate({"name": "web", "dependencies": "api", "labels": None})

        assert node.dependencies == ["api"]
        assert node.labels == []

    def test_numeric_names(self):
        """Test numeric YAML scalars become strings."""
        node = NodeDefinition.model_validate({"name": 1, "dependencies": [2]})

        assert node.name == "1"
        assert node.dependencies == ["2"]

    def test_empty_name_rejected(self):
        """Test blank names fail validation."""
        with pytest.raises(ValueError):
            NodeDefinition(name="   ")

    def test_unknown_field_rejected(self):
        """Test typos in field names are caught."""
        with pytest.raises(ValueError):
            NodeDefinition.model_validate({"name": "web", "depends": ["api"]})


class TestGraphDefinition:
    """Test GraphDefinition validation and graph building."""

    def test_duplicate_names(self):
        """Test duplicate node names are rejected."""
        with pytest.raises(DefinitionError, match="duplicate node name"):
            parse_definition({"nodes": [{"name": "a"}, {"name": "a"}]})

    def test_to_dag_preserves_order_and_labels(self):
        """Test nodes are registered in file order with labels."""
        definition = GraphDefinition(
            nodes=[
                NodeDefinition(name="web", dependencies=["api"], labels=["frontend"]),
                NodeDefinition(name="api"),
            ]
        )

        graph = definition.to_dag()

        assert graph.nodes == ["web", "api"]
        assert graph.labels("web") == ["frontend"]
        assert str(graph.sort()) == "api -> web"

    def test_undefined_dependency_surfaces_at_plan_time(self):
        """Test a dependency on an undefined name loads but fails to plan."""
        graph = parse_definition({"nodes": [{"name": "web", "dependencies": ["ng"]}]}).to_dag()

        with pytest.raises(UndefinedDependencyError):
            graph.plan()

    def test_empty_document(self):
        """Test an empty document is an empty graph."""
        assert parse_definition(None).nodes == []

    def test_non_mapping_document(self):
        """Test a list document is rejected."""
        with pytest.raises(DefinitionError, match="expected a mapping"):
            parse_definition(["web"])


class TestLoadDefinition:
    """Test loading definition files from disk."""

    def test_load(self, services_file: Path):
        """Test loading the services example."""
        definition = load_definition(services_file)

        assert [n.name for n in definition.nodes] == ["web", "api", "db", "cache", "mesh", "net"]
        assert str(definition.to_dag().plan()) == "cache, net -> db, mesh -> api -> web"

    def test_missing_file(self, tmp_path: Path):
        """Test a missing file raises DefinitionError with the path."""
        path = tmp_path / "missing.yaml"

        with pytest.raises(DefinitionError) as exc_info:
            load_definition(path)

        assert exc_info.value.path == path
        assert isinstance(exc_info.value.original_error, OSError)

    def test_invalid_yaml(self, tmp_path: Path):
        """Test YAML syntax errors are wrapped."""
        path = tmp_path / "bad.yaml"
        path.write_text("nodes: [unclosed")

        with pytest.raises(DefinitionError, match="invalid YAML"):
            load_definition(path)

    def test_validation_error_mentions_location(self, tmp_path: Path):
        """Test pydantic errors are summarised with their location."""
        path = tmp_path / "bad.yaml"
        path.write_text("nodes:\n  - dependencies: [a]\n")

        with pytest.raises(DefinitionError, match=r"nodes\.0\.name"):
            load_definition(path)
