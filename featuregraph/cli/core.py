"""
cli/core.py - Project command plumbing

Every featuregraph command reads one JSON project file, builds its graph and
runs an engine operation on it. ProjectCommand owns that load step and turns
rejected input into a failed CommandResult; subclasses implement run().
"""

from __future__ import annotations
from typing import Any, Dict, Iterator, List, Optional
from dataclasses import dataclass, field
from enum import Enum
from abc import ABC, abstractmethod
from pathlib import Path
import argparse
import json
import logging

from featuregraph.bootstrap.config import FeatureGraphConfig, get_config
from featuregraph.dependencies import FeatureGraph, build_graph
from featuregraph.errors import GraphError

logger = logging.getLogger("cli")


class OutputFormat(Enum):
    """How results are printed."""
    TEXT = "text"
    JSON = "json"


@dataclass
class CLIContext:
    """Per-invocation settings shared by all commands."""

    config: FeatureGraphConfig = field(default_factory=get_config)
    output_format: OutputFormat = OutputFormat.TEXT
    verbose: bool = False

    @property
    def wants_json(self) -> bool:
        return self.output_format == OutputFormat.JSON


@dataclass
class CommandResult:
    """Outcome of one command; exit_code is what the process returns."""

    success: bool = True
    message: str = ""
    data: Any = None
    error: Optional[str] = None
    exit_code: int = 0

    @classmethod
    def failure(cls, exc: Exception) -> "CommandResult":
        """Failed result for rejected input; graph errors keep their details."""
        details = exc.to_dict() if isinstance(exc, GraphError) else None
        return cls(success=False, error=str(exc), data=details, exit_code=1)

    def to_dict(self) -> Dict[str, Any]:
        payload = {"success": self.success, "message": self.message, "data": self.data}
        if not self.success:
            payload["error"] = self.error
        return payload


# Errors caused by the project or response files rather than by the engine
INPUT_ERRORS = (GraphError, OSError, ValueError)


class ProjectCommand(ABC):
    """A subcommand operating on a project file."""

    name: str = ""
    description: str = ""
    aliases: List[str] = []

    def configure_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("project", help="Path to project JSON file")
        self.add_arguments(parser)

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        """Extra arguments after the project path."""

    def execute(self, ctx: CLIContext, args: argparse.Namespace) -> CommandResult:
        try:
            graph = load_project(args.project)
            return self.run(ctx, args, graph)
        except INPUT_ERRORS as e:
            logger.debug(f"{self.name} failed on {args.project}: {e}")
            return CommandResult.failure(e)

    @abstractmethod
    def run(self, ctx: CLIContext, args: argparse.Namespace, graph: FeatureGraph) -> CommandResult:
        """Run the operation on a loaded graph."""


class CommandRegistry:
    """Subcommands by name, with aliases resolved at registration."""

    def __init__(self):
        self._commands: List[ProjectCommand] = []
        self._lookup: Dict[str, ProjectCommand] = {}

    def register(self, command: ProjectCommand) -> None:
        for key in [command.name, *command.aliases]:
            if key in self._lookup:
                raise ValueError(f"Command name {key!r} is already registered")
            self._lookup[key] = command
        self._commands.append(command)

    def get(self, name: str) -> Optional[ProjectCommand]:
        return self._lookup.get(name)

    def names(self) -> List[str]:
        return [c.name for c in self._commands]

    def __iter__(self) -> Iterator[ProjectCommand]:
        return iter(self._commands)

    def __contains__(self, name: object) -> bool:
        return name in self._lookup


def load_project(path: str) -> FeatureGraph:
    """
    Read a project file and build its graph.

    The file is a JSON object with "features" and "dependencies" (or "edges")
    arrays.

    Raises:
        OSError: file cannot be read
        ValueError: file is not a JSON project object
        GraphError: features/edges are invalid
    """
    with open(Path(path)) as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Project file {path} must contain a JSON object")

    features = data.get("features", [])
    edges = data.get("dependencies", data.get("edges", []))
    for key, value in (("features", features), ("dependencies", edges)):
        if not isinstance(value, list):
            raise ValueError(f"Project file {path}: {key} must be an array, got {type(value).__name__}")
    logger.debug(f"Loaded project {path}: {len(features)} features, {len(edges)} dependencies")
    return build_graph(features, edges)


def _render(key: str, value: Any) -> List[str]:
    if isinstance(value, list):
        return [f"  {key}:"] + [f"    - {item}" for item in value]
    return [f"  {key}: {value}"]


def format_output(result: CommandResult, output_format: OutputFormat) -> str:
    """Render a result as pretty JSON or indented text."""
    if output_format == OutputFormat.JSON:
        return json.dumps(result.to_dict(), indent=2, default=str)

    if not result.success:
        return f"Error: {result.error}"

    lines = [result.message]
    if isinstance(result.data, dict):
        for key, value in result.data.items():
            lines.extend(_render(key, value))
    elif isinstance(result.data, list):
        lines.extend(f"  - {item}" for item in result.data)
    elif result.data is not None:
        lines.append(str(result.data))
    return "\n".join(lines)
