import pytest
from pydantic import ValidationError

from dialogue_engine.dialog.types import (
    ChoiceNode,
    ConditionNode,
    DialogueGraph,
    JumpNode,
    LineNode,
    SetVarNode,
    StepKind,
    StepResult,
)


def test_nodes_parse_by_type(graph_data):
    graph = DialogueGraph.model_validate(graph_data)

    assert graph.start_node_id == "greet"
    assert isinstance(graph.get_node("greet"), LineNode)
    assert isinstance(graph.get_node("menu"), ChoiceNode)
    assert isinstance(graph.get_node("pay"), SetVarNode)
    assert graph.get_node("greet").target_id == "menu"
    assert graph.get_node("menu").choices[0].condition.variable == "gold"


def test_snake_case_names_accepted():
    graph = DialogueGraph(
        start_node_id="j",
        nodes=[JumpNode(id="j", target_id="c"), ConditionNode(id="c")],
    )

    assert graph.get_node("j").target_id == "c"
    assert graph.get_node("c").condition is None


def test_scalar_values_keep_their_type():
    graph = DialogueGraph.model_validate({
        "startNodeId": "a",
        "nodes": [
            {"id": "a", "type": "setVar", "variable": "flag", "value": True},
            {"id": "b", "type": "setVar", "variable": "count", "value": 3},
            {"id": "c", "type": "setVar", "variable": "ratio", "value": 0.5},
            {"id": "d", "type": "setVar", "variable": "name", "value": "Ayla"},
        ],
    })

    values = [graph.get_node(node_id).value for node_id in "abcd"]
    assert values == [True, 3, 0.5, "Ayla"]
    assert type(values[0]) is bool
    assert type(values[1]) is int


def test_unknown_type_rejected_at_parse():
    with pytest.raises(ValidationError):
        DialogueGraph.model_validate({
            "startNodeId": "a",
            "nodes": [{"id": "a", "type": "teleport"}],
        })


def test_choice_requires_target():
    with pytest.raises(ValidationError):
        ChoiceNode.model_validate({"id": "c", "choices": [{"text": "Go"}]})


def test_graph_is_immutable(linear_graph):
    with pytest.raises(ValidationError):
        linear_graph.start_node_id = "B"


def test_get_node_first_duplicate_wins():
    graph = DialogueGraph.model_validate({
        "startNodeId": "a",
        "nodes": [
            {"id": "a", "type": "line", "content": "first"},
            {"id": "a", "type": "line", "content": "second"},
        ],
    })

    assert graph.get_node("a").content == "first"
    assert graph.get_node("missing") is None
    assert graph.get_node(None) is None


def test_to_json_dict_uses_wire_names(linear_graph):
    data = linear_graph.to_json_dict()

    assert data["startNodeId"] == "A"
    assert data["nodes"][0] == {"id": "A", "type": "line", "content": "Hello.", "targetId": "B"}
    assert "targetId" not in data["nodes"][1]


def test_step_result_variants():
    node = LineNode(id="a")

    assert StepResult.yielded(node).kind is StepKind.YIELDED
    assert StepResult.awaiting_choice(node).needs_choice
    assert StepResult.terminated().is_terminated
    assert StepResult.terminated().node is None
