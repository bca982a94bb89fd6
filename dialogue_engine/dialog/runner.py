"""
Dialogue runner - walks a dialogue graph one suspension at a time.

The runner stops at line nodes (something to show) and choice nodes
(something to decide). Jump, setVar and condition nodes are processed
silently between suspensions.

Usage:
    runner = DialogueRunner(graph, {"gold": 5})
    step = runner.advance()
    while not step.is_terminated:
        if step.needs_choice:
            step = runner.advance(pick(step.node.choices))
        else:
            show(step.node.content)
            step = runner.advance()
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from dialogue_engine.dialog.conditions import evaluate_condition
from dialogue_engine.dialog.types import (
    ChoiceNode,
    ConditionNode,
    DialogueGraph,
    DialogueNode,
    DialogueState,
    GameVariables,
    JumpNode,
    LineNode,
    Scalar,
    SetVarNode,
    StepResult,
    VariableCondition,
)
from dialogue_engine.dialog.validator import ensure_valid

logger = logging.getLogger(__name__)


class DialogueRunner:
    """
    Interpreter for one playthrough of a dialogue graph.

    Graph or input problems never raise during playback: a missing node,
    an invalid choice or a failed condition ends the run, leaving
    current_node_id as None. There is no reset; build a new runner to
    play the graph again.
    """

    def __init__(
        self,
        graph: DialogueGraph,
        initial_variables: Optional[Mapping[str, Scalar]] = None,
        *,
        strict: bool = False,
    ):
        if strict:
            ensure_valid(graph, initial_variables)

        self._graph = graph
        self._state = DialogueState(
            current_node_id=graph.start_node_id,
            variables=dict(initial_variables or {}),
            history=[],
        )
        # Node we are suspended on, waiting for the next advance()
        self._suspended: Optional[DialogueNode] = None

    @property
    def graph(self) -> DialogueGraph:
        return self._graph

    @property
    def history(self) -> list[str]:
        return list(self._state.history)

    @property
    def is_finished(self) -> bool:
        return self._state.current_node_id is None

    def get_current_node(self) -> Optional[DialogueNode]:
        """Node matching current_node_id, or None if missing or finished."""
        return self._graph.get_node(self._state.current_node_id)

    def get_variables(self) -> GameVariables:
        return dict(self._state.variables)

    def get_variable(self, name: str) -> Any:
        return self._state.variables.get(name)

    def set_variable(self, name: str, value: Any) -> None:
        self._state.variables[name] = value

    def get_state(self) -> DialogueState:
        """Snapshot of the run state; mutating it does not affect the runner."""
        return self._state.model_copy(deep=True)

    def evaluate_condition(self, condition: Optional[VariableCondition]) -> bool:
        return evaluate_condition(condition, self._state.variables)

    def advance(self, choice_index: Optional[int] = None) -> StepResult:
        """
        Resume the run and process nodes until the next suspension.

        Args:
            choice_index: Index into the choices of the choice node the
                run is suspended on. Ignored in any other state.

        Returns:
            YIELDED with a line node, AWAITING_CHOICE with a choice node,
            or TERMINATED once current_node_id is None.
        """
        if self._suspended is not None:
            node, self._suspended = self._suspended, None
            if isinstance(node, ChoiceNode):
                self._state.current_node_id = self._resolve_choice(node, choice_index)
            else:
                self._state.current_node_id = node.target_id

        while self._state.current_node_id is not None:
            node = self.get_current_node()
            if node is None:
                logger.debug(f"Node not found: {self._state.current_node_id}; ending dialogue")
                self._state.current_node_id = None
                break

            self._state.history.append(node.id)

            if isinstance(node, LineNode):
                self._suspended = node
                return StepResult.yielded(node)

            if isinstance(node, ChoiceNode):
                self._suspended = node
                return StepResult.awaiting_choice(node)

            self._state.current_node_id = self._transition(node)

        return StepResult.terminated()

    def _transition(self, node: DialogueNode) -> Optional[str]:
        """Next node id for a node that does not suspend."""
        if isinstance(node, JumpNode):
            return node.target_id

        if isinstance(node, SetVarNode):
            if node.variable and node.value is not None:
                self.set_variable(node.variable, node.value)
            return node.target_id

        if isinstance(node, ConditionNode):
            condition = None
            if node.condition is not None:
                condition = VariableCondition(
                    variable=node.variable or "",
                    operator=node.condition.operator,
                    value=node.condition.value,
                )
            if self.evaluate_condition(condition):
                return node.target_id
            logger.debug(f"Condition failed at {node.id}; ending dialogue")
            return None

        logger.debug(f"Unknown node type {getattr(node, 'type', None)!r} at {node.id}; ending dialogue")
        return None

    def _resolve_choice(self, node: ChoiceNode, choice_index: Optional[int]) -> Optional[str]:
        """Target of the chosen option, or None when no valid choice was made."""
        if (
            not isinstance(choice_index, int)
            or isinstance(choice_index, bool)
            or not 0 <= choice_index < len(node.choices)
        ):
            logger.debug(f"Invalid choice {choice_index!r} at {node.id}; ending dialogue")
            return None

        choice = node.choices[choice_index]
        if not self.evaluate_condition(choice.condition):
            logger.debug(f"Choice {choice_index} at {node.id} is gated off; ending dialogue")
            return None
        return choice.target_id
