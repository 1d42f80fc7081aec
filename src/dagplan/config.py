"""Configuration management for dagplan."""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import yaml

from .dependency.options import SortOptions


class DependencyPolicy(str, Enum):
    """How a scoped plan treats unselected dependencies of selected nodes."""

    STRICT = "strict"  # Fail with UnhandledDependencyError
    INCLUDE = "include"  # Pull them into the plan
    EXCLUDE = "exclude"  # Leave them out of the plan


@dataclass
class PlanConfig:
    """
    Planning defaults.

    Applied by the CLI when no dependency flag is given on the command line.
    """

    dependency_policy: DependencyPolicy = DependencyPolicy.STRICT

    def __post_init__(self) -> None:
        # Accept plain strings from YAML and the environment
        self.dependency_policy = DependencyPolicy(self.dependency_policy)

    def sort_options(self) -> SortOptions:
        """
        Build the sort options matching the configured policy.

        Returns:
            SortOptions with the dependency flags set
        """
        return SortOptions(
            with_dependencies=self.dependency_policy == DependencyPolicy.INCLUDE,
            without_dependencies=self.dependency_policy == DependencyPolicy.EXCLUDE,
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "console"
    file: Path | None = None

    @property
    def json_logs(self) -> bool:
        """Whether logs are rendered as JSON."""
        return self.format == "json"


@dataclass
class DagplanConfig:
    """
    Complete configuration for dagplan.

    This combines all configuration sections.
    """

    plan: PlanConfig = field(default_factory=PlanConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, config_path: Path) -> "DagplanConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to YAML config file

        Returns:
            DagplanConfig instance

        Raises:
            ValueError: If the file is not valid YAML or not a mapping
        """
        try:
            with open(config_path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file {config_path}: {e}") from e

        if data is None:
            data = {}

        if not isinstance(data, dict):
            raise ValueError(
                f"Invalid configuration file structure in {config_path}: "
                f"expected dictionary, got {type(data).__name__}"
            )

        plan = PlanConfig(**(data.get("plan") or {}))

        logging_data = dict(data.get("logging") or {})
        if logging_data.get("file"):
            logging_data["file"] = Path(logging_data["file"])
        logging = LoggingConfig(**logging_data)

        return cls(plan=plan, logging=logging)

    def to_file(self, config_path: Path) -> None:
        """
        Save configuration to YAML file.

        Args:
            config_path: Path to save config file
        """
        data = {
            "plan": {
                k: v.value if isinstance(v, Enum) else v for k, v in self.plan.__dict__.items()
            },
            "logging": {
                k: str(v) if isinstance(v, Path) else v
                for k, v in self.logging.__dict__.items()
                if v is not None
            },
        }

        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    @classmethod
    def from_env(cls) -> "DagplanConfig":
        """
        Create configuration from environment variables.

        Environment variables:
            DAGPLAN_DEPENDENCY_POLICY: strict, include or exclude (default: strict)
            LOG_LEVEL: Logging level (default: INFO)
            LOG_FORMAT: console or json (default: console)
            LOG_FILE: Optional log file path

        Returns:
            DagplanConfig instance

        Raises:
            ValueError: If DAGPLAN_DEPENDENCY_POLICY is not a known policy
        """
        policy = os.environ.get("DAGPLAN_DEPENDENCY_POLICY", DependencyPolicy.STRICT.value)
        try:
            plan = PlanConfig(dependency_policy=DependencyPolicy(policy.lower()))
        except ValueError as e:
            allowed = ", ".join(p.value for p in DependencyPolicy)
            raise ValueError(
                f"Invalid DAGPLAN_DEPENDENCY_POLICY {policy!r}: expected one of {allowed}"
            ) from e

        log_file = os.environ.get("LOG_FILE")

        return cls(
            plan=plan,
            logging=LoggingConfig(
                level=os.environ.get("LOG_LEVEL", "INFO"),
                format=os.environ.get("LOG_FORMAT", "console"),
                file=Path(log_file) if log_file else None,
            ),
        )


def load_config(config_file: Path | None = None) -> DagplanConfig:
    """
    Load configuration from file or environment variables.

    Args:
        config_file: Optional path to YAML config file

    Returns:
        DagplanConfig instance

    Raises:
        FileNotFoundError: If config_file is specified but doesn't exist
    """
    if config_file:
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_file}")
        return DagplanConfig.from_file(config_file)
    return DagplanConfig.from_env()
