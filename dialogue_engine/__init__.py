"""
Dialogue Engine

A branching dialogue interpreter for narrative games.

Quick Start:
    from dialogue_engine import DialogueGraph, DialogueRunner

    graph = DialogueGraph.model_validate(data)
    runner = DialogueRunner(graph, {"gold": 5})

    step = runner.advance()
    while not step.is_terminated:
        if step.needs_choice:
            step = runner.advance(0)
        else:
            print(step.node.content)
            step = runner.advance()
"""

__version__ = "0.1.0"

from dialogue_engine.core import (
    DialogueConfig,
    DialogueEvent,
    Event,
    EventBus,
)
from dialogue_engine.dialog import (
    DialogueChoice,
    DialogueGraph,
    DialogueNode,
    DialogueParser,
    DialogueRunner,
    DialogueSession,
    DialogueState,
    GraphValidationError,
    StepKind,
    StepResult,
    validate_graph,
)
from dialogue_engine.resources import GraphStore

__all__ = [
    # Core
    "DialogueConfig",
    "DialogueEvent",
    "Event",
    "EventBus",
    # Dialog
    "DialogueChoice",
    "DialogueGraph",
    "DialogueNode",
    "DialogueParser",
    "DialogueRunner",
    "DialogueSession",
    "DialogueState",
    "GraphValidationError",
    "StepKind",
    "StepResult",
    "validate_graph",
    # Resources
    "GraphStore",
]
