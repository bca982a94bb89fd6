"""
Dialogue session - drives a runner on behalf of a presentation layer.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Mapping, Optional

from dialogue_engine.core.config import DialogueConfig
from dialogue_engine.core.events import DialogueEvent, EventBus
from dialogue_engine.dialog.runner import DialogueRunner
from dialogue_engine.dialog.types import (
    ChoiceNode,
    DialogueChoice,
    DialogueGraph,
    Scalar,
    StepKind,
    StepResult,
)

if TYPE_CHECKING:
    from dialogue_engine.resources.graph_store import GraphStore

logger = logging.getLogger(__name__)


class DialogueSession:
    """
    Runs one dialogue at a time and reports it over the event bus.

    Handles:
    - Resolving graphs by id through a GraphStore
    - Advancing past lines and submitting choices
    - Filtering choices by their conditions for display
    - Variable substitution in line text
    """

    def __init__(
        self,
        events: EventBus,
        store: Optional[GraphStore] = None,
        config: Optional[DialogueConfig] = None,
    ):
        self.events = events
        self.store = store
        self.config = config or DialogueConfig()

        self._runner: Optional[DialogueRunner] = None
        self._step: StepResult = StepResult.terminated()
        self._on_dialog_end: Optional[Callable[[], None]] = None

    @property
    def runner(self) -> Optional[DialogueRunner]:
        return self._runner

    @property
    def step(self) -> StepResult:
        """The most recent step result."""
        return self._step

    def is_active(self) -> bool:
        return self._runner is not None and not self._step.is_terminated

    def start(
        self,
        graph: DialogueGraph | str,
        variables: Optional[Mapping[str, Scalar]] = None,
    ) -> StepResult:
        """Start a dialogue from a graph or a graph id known to the store."""
        graph_id = graph if isinstance(graph, str) else None
        seed: dict[str, Scalar] = {}
        if graph_id is not None:
            resolved = self.store.get_graph(graph_id) if self.store else None
            if resolved is None:
                logger.warning(f"Dialogue not found: {graph_id}")
                return StepResult.terminated()
            graph = resolved
            seed.update(self.store.get_variables(graph_id))

        # Caller-supplied values override the authored defaults
        seed.update(variables or {})

        self._runner = DialogueRunner(graph, seed, strict=self.config.strict)
        self.events.publish(
            DialogueEvent.STARTED,
            graph_id=graph_id,
            start_node_id=graph.start_node_id,
        )
        return self._handle(self._runner.advance())

    def proceed(self) -> StepResult:
        """Continue after a line."""
        if not self.is_active():
            return StepResult.terminated()
        return self._handle(self._runner.advance())

    def choose(self, index: int) -> StepResult:
        """Submit a choice; an invalid or gated index ends the dialogue."""
        if not self.is_active():
            return StepResult.terminated()
        return self._handle(self._runner.advance(index))

    def visible_choices(self) -> list[tuple[int, DialogueChoice]]:
        """Choices of the current choice node whose conditions hold, with their indices."""
        if not self.is_active() or not isinstance(self._step.node, ChoiceNode):
            return []
        return [
            (index, choice)
            for index, choice in enumerate(self._step.node.choices)
            if self._runner.evaluate_condition(choice.condition)
        ]

    def format_text(self, text: str) -> str:
        """Process text variables like {player_name}."""
        if not self._runner or not self.config.text_substitution:
            return text

        result = text
        for key, value in self._runner.get_variables().items():
            result = result.replace(f"{{{key}}}", str(value))
        return result

    def on_dialog_end(self, callback: Callable[[], None]) -> None:
        """Set callback for when dialogue ends."""
        self._on_dialog_end = callback

    def _handle(self, step: StepResult) -> StepResult:
        self._step = step

        if step.kind is StepKind.YIELDED:
            self.events.publish(
                DialogueEvent.LINE_SHOWN,
                node=step.node,
                text=self.format_text(step.node.content),
            )
        elif step.kind is StepKind.AWAITING_CHOICE:
            self.events.publish(
                DialogueEvent.CHOICE_PRESENTED,
                node=step.node,
                choices=self.visible_choices(),
            )
        else:
            self._end_dialog()

        return step

    def _end_dialog(self) -> None:
        state = self._runner.get_state()
        logger.info(f"Dialogue ended after {len(state.history)} node(s)")

        self.events.publish(
            DialogueEvent.ENDED,
            history=state.history,
            variables=state.variables,
        )

        if self._on_dialog_end:
            self._on_dialog_end()
