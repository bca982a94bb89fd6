"""
Dialogue data types - nodes, choices, graphs and run state.

Graphs are immutable and can be shared by any number of runners.
Run state is mutable and belongs to exactly one runner.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Annotated, Literal, Optional, Union

from pydantic import Field, PrivateAttr

from dialogue_engine.core.model import FrozenModel, Model


Scalar = Union[bool, int, float, str]
GameVariables = dict[str, Scalar]

Operator = Literal['eq', 'ne', 'gt', 'lt', 'gte', 'lte']


class Comparison(FrozenModel):
    """Operator and literal of a condition node."""
    operator: Operator
    value: Scalar


class VariableCondition(Comparison):
    """A comparison bound to a variable name (used to gate choices)."""
    variable: str


class DialogueChoice(FrozenModel):
    """A single option inside a choice node."""
    text: str
    target_id: str = Field(alias="targetId")
    condition: Optional[VariableCondition] = None


class LineNode(FrozenModel):
    """Displays content; suspends until the caller advances."""
    id: str
    type: Literal['line'] = 'line'
    content: str = ""
    target_id: Optional[str] = Field(default=None, alias="targetId")


class ChoiceNode(FrozenModel):
    """Presents choices; suspends until the caller picks one."""
    id: str
    type: Literal['choice'] = 'choice'
    choices: tuple[DialogueChoice, ...] = ()


class JumpNode(FrozenModel):
    """Unconditional edge."""
    id: str
    type: Literal['jump'] = 'jump'
    target_id: Optional[str] = Field(default=None, alias="targetId")


class SetVarNode(FrozenModel):
    """Assigns a variable, then follows its edge."""
    id: str
    type: Literal['setVar'] = 'setVar'
    variable: Optional[str] = None
    value: Optional[Scalar] = None
    target_id: Optional[str] = Field(default=None, alias="targetId")


class ConditionNode(FrozenModel):
    """Follows its edge only if the comparison holds; otherwise the path ends."""
    id: str
    type: Literal['condition'] = 'condition'
    variable: Optional[str] = None
    condition: Optional[Comparison] = None
    target_id: Optional[str] = Field(default=None, alias="targetId")


DialogueNode = Annotated[
    Union[LineNode, ChoiceNode, JumpNode, SetVarNode, ConditionNode],
    Field(discriminator="type"),
]

# Node types the runner yields on
SUSPENDING_TYPES = frozenset({'line', 'choice'})


class DialogueGraph(FrozenModel):
    """
    An authored dialogue: ordered nodes plus the id of the first one.

    Shape is validated on construction. Structural problems (duplicate
    ids, dangling targets, missing start node) are not; see
    dialogue_engine.dialog.validator for the opt-in checks.
    """
    nodes: tuple[DialogueNode, ...] = ()
    start_node_id: str = Field(alias="startNodeId")

    _index: Optional[dict[str, DialogueNode]] = PrivateAttr(default=None)

    def get_node(self, node_id: Optional[str]) -> Optional[DialogueNode]:
        """Get a node by id. The first node wins when ids repeat."""
        if node_id is None:
            return None
        if self._index is None:
            index: dict[str, DialogueNode] = {}
            for node in self.nodes:
                index.setdefault(node.id, node)
            self._index = index
        return self._index.get(node_id)

    @property
    def node_ids(self) -> list[str]:
        return [node.id for node in self.nodes]


class DialogueState(Model):
    """
    Mutable run state of one runner.

    Attributes:
        current_node_id: Node awaiting visitation; None once the run ended
        variables: Private copy of the game variables
        history: Ids of every visited node, in order (diagnostics only)
    """
    current_node_id: Optional[str] = Field(default=None, alias="currentNodeId")
    variables: GameVariables = Field(default_factory=dict)
    history: list[str] = Field(default_factory=list)


class StepKind(Enum):
    """What a call to DialogueRunner.advance produced."""
    YIELDED = auto()
    AWAITING_CHOICE = auto()
    TERMINATED = auto()


@dataclass(frozen=True)
class StepResult:
    """Outcome of one advance: a line to show, a choice to make, or the end."""
    kind: StepKind
    node: Optional[DialogueNode] = None

    @classmethod
    def yielded(cls, node: DialogueNode) -> StepResult:
        return cls(StepKind.YIELDED, node)

    @classmethod
    def awaiting_choice(cls, node: DialogueNode) -> StepResult:
        return cls(StepKind.AWAITING_CHOICE, node)

    @classmethod
    def terminated(cls) -> StepResult:
        return cls(StepKind.TERMINATED)

    @property
    def is_terminated(self) -> bool:
        return self.kind is StepKind.TERMINATED

    @property
    def needs_choice(self) -> bool:
        return self.kind is StepKind.AWAITING_CHOICE
