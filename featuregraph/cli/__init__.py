"""
cli/ - Command Line Interface

Provides command-line access to the engine:
- cycles: circular dependency report
- order: build order for a strategy
- quick-wins: unblocked features
- analyze: all of the above
- intake: filter AI-proposed dependencies
- export: GraphML export of the graph
"""

from .core import (
    CLIContext,
    OutputFormat,
    CommandResult,
    CommandRegistry,
    ProjectCommand,
    INPUT_ERRORS,
    format_output,
    load_project,
)

from .commands import (
    CyclesCommand,
    OrderCommand,
    QuickWinsCommand,
    AnalyzeCommand,
    IntakeCommand,
    ExportCommand,
    register_default_commands,
)


__all__ = [
    # Core
    "CLIContext",
    "OutputFormat",
    "CommandResult",
    "CommandRegistry",
    "ProjectCommand",
    "INPUT_ERRORS",
    "format_output",
    "load_project",
    # Commands
    "CyclesCommand",
    "OrderCommand",
    "QuickWinsCommand",
    "AnalyzeCommand",
    "IntakeCommand",
    "ExportCommand",
    "register_default_commands",
]
