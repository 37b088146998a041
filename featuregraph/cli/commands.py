"""
cli/commands.py - featuregraph subcommands

cycles, order, quick-wins, analyze, intake and export. Text output is meant
for people; --json output is the engine's to_dict() payloads.
"""

from __future__ import annotations
from typing import Any, Dict, List
import argparse

import networkx as nx

from featuregraph.core.enums import DependencyStrength, OptimizationStrategy
from featuregraph.dependencies import (
    BuildOrderResult,
    CycleReport,
    FeatureGraph,
    find_cycles,
    optimize_build_order,
    quick_wins,
)
from featuregraph.suggestions import parse_dependency_response

from .core import (
    CLIContext,
    CommandRegistry,
    CommandResult,
    ProjectCommand,
)


STRATEGY_CHOICES = [s.value for s in OptimizationStrategy]
STRENGTH_CHOICES = [s.value for s in DependencyStrength]


def _add_strategy(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--strategy", "-s", choices=STRATEGY_CHOICES, default=None,
                        help="Optimization strategy (default from config)")


def _add_limit(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--limit", "-n", type=int, default=None,
                        help="Maximum number of quick wins (default from config)")


def _strategy(ctx: CLIContext, args: argparse.Namespace) -> str:
    return args.strategy or ctx.config.engine.default_strategy


def _limit(ctx: CLIContext, args: argparse.Namespace) -> int:
    return args.limit if args.limit is not None else ctx.config.engine.quick_win_limit


def _cycle_lines(reports: List[CycleReport]) -> List[str]:
    return [
        f"{' -> '.join(r.cycle)} [{r.severity.value}] "
        f"break {r.suggested_break_edge[0]} -> {r.suggested_break_edge[1]}"
        + ("" if r.breaks_component else " (does not fully resolve)")
        for r in reports
    ]


def _plan_lines(result: BuildOrderResult) -> Dict[str, Any]:
    return {
        "build_order": " -> ".join(result.build_order),
        "parallel_groups": [
            f"level {g.level} (time {g.estimated_time}): {', '.join(g.members)}"
            for g in result.parallel_groups
        ],
        "critical_path": " -> ".join(result.critical_path),
        "total_estimated_time": result.total_estimated_time,
    }


def _win_line(graph: FeatureGraph, feature_id: str) -> str:
    feature = graph.feature(feature_id)
    return f"{feature.id} ({feature.name}, complexity {feature.complexity}, {feature.priority.value})"


class CyclesCommand(ProjectCommand):
    """Report dependency cycles."""

    name = "cycles"
    description = "Detect circular dependencies"
    aliases = ["circular"]

    def run(self, ctx, args, graph):
        reports = find_cycles(graph)
        data = [r.to_dict() for r in reports] if ctx.wants_json else _cycle_lines(reports)
        return CommandResult(
            message=f"{len(reports)} cycle(s) found" if reports else "No cycles found",
            data=data,
        )


class OrderCommand(ProjectCommand):
    """Compute a build order."""

    name = "order"
    description = "Compute the build order for a strategy"
    aliases = ["build-order"]

    def add_arguments(self, parser):
        _add_strategy(parser)

    def run(self, ctx, args, graph):
        result = optimize_build_order(graph, _strategy(ctx, args))
        data = result.to_dict() if ctx.wants_json else _plan_lines(result)
        return CommandResult(message=result.notes, data=data)


class QuickWinsCommand(ProjectCommand):
    """List quick wins."""

    name = "quick-wins"
    description = "List features that can be started immediately"
    aliases = ["wins"]

    def add_arguments(self, parser):
        _add_limit(parser)

    def run(self, ctx, args, graph):
        wins = quick_wins(graph, _limit(ctx, args))
        return CommandResult(
            message=f"{len(wins)} quick win(s)",
            data=wins if ctx.wants_json else [_win_line(graph, fid) for fid in wins],
        )


class AnalyzeCommand(ProjectCommand):
    """Cycles, build order and quick wins in one report."""

    name = "analyze"
    description = "Run cycle detection, build ordering and quick wins"
    aliases = ["report"]

    def add_arguments(self, parser):
        _add_strategy(parser)
        _add_limit(parser)

    def run(self, ctx, args, graph):
        result = optimize_build_order(graph, _strategy(ctx, args))
        wins = quick_wins(graph, _limit(ctx, args))
        reports = find_cycles(graph)

        if ctx.wants_json:
            data: Dict[str, Any] = {
                "fingerprint": graph.fingerprint(),
                "cycles": [r.to_dict() for r in reports],
                "build_order": result.to_dict(),
                "quick_wins": wins,
            }
        else:
            data = {
                "fingerprint": graph.fingerprint(),
                "cycles": _cycle_lines(reports) or ["none"],
                **_plan_lines(result),
                "quick_wins": wins,
            }
        return CommandResult(message=result.notes, data=data)


class IntakeCommand(ProjectCommand):
    """Filter an AI dependency-analysis response against a project."""

    name = "intake"
    description = "Accept AI-proposed dependencies above the confidence threshold"
    aliases = ["suggestions"]

    def add_arguments(self, parser):
        parser.add_argument("response", help="Path to the AI response text/JSON")
        parser.add_argument("--threshold", "-t", type=float, default=None,
                            help="Confidence threshold (default from config)")

    def run(self, ctx, args, graph):
        with open(args.response) as f:
            text = f.read()
        intake = parse_dependency_response(
            text,
            [feature.id for feature in graph.features],
            threshold=args.threshold,
        )

        if ctx.wants_json:
            data: Any = intake.to_dict()
        else:
            data = {
                "accepted": [
                    f"{d.from_feature_id} -> {d.to_feature_id} ({d.strength.value}, {d.confidence:.2f})"
                    for d in intake.accepted
                ],
                "rejected": [r.reason for r in intake.rejected],
            }
        return CommandResult(
            message=f"{len(intake.accepted)} accepted, {len(intake.rejected)} rejected",
            data=data,
        )


class ExportCommand(ProjectCommand):
    """Write the project graph as GraphML."""

    name = "export"
    description = "Export the dependency graph as GraphML"
    aliases = ["graphml"]

    def add_arguments(self, parser):
        parser.add_argument("output", help="Destination .graphml file")
        parser.add_argument("--strength", action="append", choices=STRENGTH_CHOICES,
                            default=None, help="Only export edges of this strength (repeatable)")

    def run(self, ctx, args, graph):
        strengths = {DependencyStrength(s) for s in args.strength} if args.strength else None
        G = graph.to_networkx(strengths)
        nx.write_graphml(G, args.output)
        return CommandResult(
            message=f"Exported {G.number_of_nodes()} features and {G.number_of_edges()} edges",
            data={"output": args.output, "fingerprint": graph.fingerprint()},
        )


def register_default_commands(registry: CommandRegistry) -> CommandRegistry:
    """Register the built-in commands."""
    for command in (
        CyclesCommand(),
        OrderCommand(),
        QuickWinsCommand(),
        AnalyzeCommand(),
        IntakeCommand(),
        ExportCommand(),
    ):
        registry.register(command)
    return registry
