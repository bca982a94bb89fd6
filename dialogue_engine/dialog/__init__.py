"""
Dialog module - branching dialogue playback.

Provides:
- Dialogue graph data types
- The step-by-step runner
- Condition evaluation
- Opt-in graph validation
- Session driver for presentation layers
- Dialogue script parsing
"""

from dialogue_engine.dialog.types import (
    Scalar,
    GameVariables,
    Comparison,
    VariableCondition,
    DialogueChoice,
    LineNode,
    ChoiceNode,
    JumpNode,
    SetVarNode,
    ConditionNode,
    DialogueNode,
    DialogueGraph,
    DialogueState,
    StepKind,
    StepResult,
)
from dialogue_engine.dialog.conditions import evaluate_condition, compare, strict_equals
from dialogue_engine.dialog.validator import (
    Issue,
    GraphValidationError,
    validate_graph,
    ensure_valid,
    format_issue,
)
from dialogue_engine.dialog.runner import DialogueRunner
from dialogue_engine.dialog.session import DialogueSession
from dialogue_engine.dialog.parser import DialogueParser, ParsedDialogue, compile_dialogue_file

__all__ = [
    # Types
    "Scalar",
    "GameVariables",
    "Comparison",
    "VariableCondition",
    "DialogueChoice",
    "LineNode",
    "ChoiceNode",
    "JumpNode",
    "SetVarNode",
    "ConditionNode",
    "DialogueNode",
    "DialogueGraph",
    "DialogueState",
    "StepKind",
    "StepResult",
    # Conditions
    "evaluate_condition",
    "compare",
    "strict_equals",
    # Validation
    "Issue",
    "GraphValidationError",
    "validate_graph",
    "ensure_valid",
    "format_issue",
    # Playback
    "DialogueRunner",
    "DialogueSession",
    # Authoring
    "DialogueParser",
    "ParsedDialogue",
    "compile_dialogue_file",
]
