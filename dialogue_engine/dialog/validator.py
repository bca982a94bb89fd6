"""Static dialogue graph validation.

Playback never depends on this module: the runner degrades to the
terminal state on any authoring error. These checks are opt-in, for
tooling and for runners constructed with ``strict=True``.
"""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from dialogue_engine.dialog.conditions import value_kind
from dialogue_engine.dialog.types import (
    SUSPENDING_TYPES,
    ChoiceNode,
    ConditionNode,
    DialogueGraph,
    DialogueNode,
)

logger = logging.getLogger(__name__)

ERROR = "ERROR"
WARNING = "WARNING"

_RELATIONAL_OPERATORS = {"gt", "lt", "gte", "lte"}


@dataclass(frozen=True, slots=True)
class Issue:
    severity: str
    code: str
    message: str
    context: dict[str, str] = field(default_factory=dict)


class GraphValidationError(ValueError):
    """Raised by ensure_valid when a graph has error-severity issues."""

    def __init__(self, issues: list[Issue]):
        self.issues = issues
        errors = [issue for issue in issues if issue.severity == ERROR]
        super().__init__(
            f"{len(errors)} dialogue graph error(s): "
            + "; ".join(format_issue(issue) for issue in errors)
        )


def format_issue(issue: Issue) -> str:
    context = " ".join(f"{key}={value}" for key, value in issue.context.items())
    suffix = f" ({context})" if context else ""
    return f"[{issue.severity}] {issue.code}: {issue.message}{suffix}"


def _successors(node: DialogueNode) -> list[str]:
    if isinstance(node, ChoiceNode):
        return [choice.target_id for choice in node.choices]
    target = getattr(node, "target_id", None)
    return [target] if target else []


def validate_graph(
    graph: DialogueGraph,
    variables: Optional[Mapping[str, object]] = None,
) -> list[Issue]:
    issues: list[Issue] = []
    known_ids = set(graph.node_ids)

    for node_id, count in Counter(graph.node_ids).items():
        if count > 1:
            issues.append(
                Issue(
                    severity=ERROR,
                    code="DUPLICATE_NODE_ID",
                    message="Duplicate node id; only the first is reachable.",
                    context={"node_id": node_id, "count": str(count)},
                )
            )

    if graph.start_node_id not in known_ids:
        issues.append(
            Issue(
                severity=ERROR,
                code="MISSING_START_NODE",
                message="Start node id does not name a node.",
                context={"start_node_id": graph.start_node_id},
            )
        )

    for node in graph.nodes:
        for target in _successors(node):
            if target not in known_ids:
                issues.append(
                    Issue(
                        severity=ERROR,
                        code="DANGLING_TARGET",
                        message="Target id does not name a node.",
                        context={"node_id": node.id, "target_id": target},
                    )
                )
        if isinstance(node, ChoiceNode) and not node.choices:
            issues.append(
                Issue(
                    severity=ERROR,
                    code="EMPTY_CHOICE",
                    message="Choice node has no options.",
                    context={"node_id": node.id},
                )
            )

    issues.extend(_unreachable_issues(graph))
    issues.extend(_silent_cycle_issues(graph))
    if variables is not None:
        issues.extend(_type_mismatch_issues(graph, variables))
    return issues


def ensure_valid(
    graph: DialogueGraph,
    variables: Optional[Mapping[str, object]] = None,
) -> list[Issue]:
    """Validate, log warnings and raise GraphValidationError on errors."""
    issues = validate_graph(graph, variables)
    for issue in issues:
        if issue.severity == WARNING:
            logger.warning(format_issue(issue))
    if any(issue.severity == ERROR for issue in issues):
        raise GraphValidationError(issues)
    return issues


def _unreachable_issues(graph: DialogueGraph) -> Iterable[Issue]:
    seen: set[str] = set()
    stack = [graph.start_node_id]
    while stack:
        node = graph.get_node(stack.pop())
        if node is None or node.id in seen:
            continue
        seen.add(node.id)
        stack.extend(_successors(node))

    for node_id in dict.fromkeys(graph.node_ids):
        if node_id not in seen:
            yield Issue(
                severity=WARNING,
                code="UNREACHABLE_NODE",
                message="Node cannot be reached from the start node.",
                context={"node_id": node_id},
            )


def _silent_cycle_issues(graph: DialogueGraph) -> Iterable[Issue]:
    # Walk each silent chain; revisiting a node on the same walk means a loop
    # that never hands control back to the caller.
    reported: set[str] = set()
    for start in graph.nodes:
        if start.type in SUSPENDING_TYPES or start.id in reported:
            continue
        path: list[str] = []
        node: Optional[DialogueNode] = graph.get_node(start.id)
        while node is not None and node.type not in SUSPENDING_TYPES:
            if node.id in path:
                cycle = path[path.index(node.id):]
                if not reported.intersection(cycle):
                    reported.update(cycle)
                    yield Issue(
                        severity=WARNING,
                        code="SILENT_CYCLE",
                        message="Cycle of non-yielding nodes never returns control.",
                        context={"cycle": " -> ".join(cycle + [node.id])},
                    )
                break
            path.append(node.id)
            successors = _successors(node)
            node = graph.get_node(successors[0]) if successors else None


def _type_mismatch_issues(
    graph: DialogueGraph,
    variables: Mapping[str, object],
) -> Iterable[Issue]:
    checks: list[tuple[str, str, str, object]] = []
    for node in graph.nodes:
        if isinstance(node, ConditionNode) and node.condition and node.variable:
            checks.append((node.id, node.variable, node.condition.operator, node.condition.value))
        elif isinstance(node, ChoiceNode):
            for choice in node.choices:
                if choice.condition:
                    checks.append(
                        (node.id, choice.condition.variable,
                         choice.condition.operator, choice.condition.value)
                    )

    for node_id, variable, operator, literal in checks:
        if operator not in _RELATIONAL_OPERATORS or variable not in variables:
            continue
        seeded = value_kind(variables[variable])
        wanted = value_kind(literal)
        if seeded != wanted:
            yield Issue(
                severity=WARNING,
                code="TYPE_MISMATCH",
                message="Relational comparison between different value types.",
                context={
                    "node_id": node_id,
                    "variable": variable,
                    "variable_type": seeded,
                    "literal_type": wanted,
                },
            )
