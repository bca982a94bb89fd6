import pytest
from types import SimpleNamespace

from dialogue_engine.dialog.runner import DialogueRunner
from dialogue_engine.dialog.types import DialogueGraph, StepKind
from dialogue_engine.dialog.validator import GraphValidationError


def make_graph(start, *nodes):
    return DialogueGraph.model_validate({"startNodeId": start, "nodes": list(nodes)})


def play(runner, choices=()):
    """Drive a runner to the end, feeding choices in order."""
    pending = list(choices)
    shown = []
    step = runner.advance()
    while not step.is_terminated:
        shown.append(step.node.id)
        if step.needs_choice:
            step = runner.advance(pending.pop(0) if pending else None)
        else:
            step = runner.advance()
    return shown


def test_initial_state(linear_graph):
    runner = DialogueRunner(linear_graph, {"gold": 3})
    state = runner.get_state()

    assert state.current_node_id == "A"
    assert state.variables == {"gold": 3}
    assert state.history == []
    assert runner.get_current_node().id == "A"
    assert not runner.is_finished


def test_linear_line_chain(linear_graph):
    runner = DialogueRunner(linear_graph)

    step = runner.advance()
    assert step.kind is StepKind.YIELDED
    assert step.node.id == "A"
    assert step.node.content == "Hello."

    step = runner.advance()
    assert step.kind is StepKind.YIELDED
    assert step.node.id == "B"

    step = runner.advance()
    assert step.is_terminated
    assert step.node is None
    assert runner.get_state().current_node_id is None
    assert runner.get_current_node() is None


def test_suspended_line_is_current_node(linear_graph):
    runner = DialogueRunner(linear_graph)
    runner.advance()

    assert runner.get_current_node().id == "A"
    assert runner.history == ["A"]


def test_terminated_run_stays_terminated(linear_graph):
    runner = DialogueRunner(linear_graph)
    play(runner)

    assert runner.advance().is_terminated
    assert runner.advance(0).is_terminated
    assert runner.history == ["A", "B"]


def test_choice_gated_option_terminates(crossroads_graph):
    runner = DialogueRunner(crossroads_graph, {"gold": 5})

    step = runner.advance()
    assert step.kind is StepKind.AWAITING_CHOICE
    assert [c.text for c in step.node.choices] == ["go north", "go south"]

    step = runner.advance(0)
    assert step.is_terminated
    assert runner.get_state().current_node_id is None
    assert runner.history == ["S"]


def test_choice_ungated_option_advances(crossroads_graph):
    runner = DialogueRunner(crossroads_graph, {"gold": 5})
    runner.advance()

    step = runner.advance(1)
    assert step.kind is StepKind.YIELDED
    assert step.node.id == "Z"


def test_choice_gate_passes_with_enough_gold(crossroads_graph):
    runner = DialogueRunner(crossroads_graph, {"gold": 10})
    runner.advance()

    assert runner.advance(0).node.id == "N"


@pytest.mark.parametrize("choice", [None, -1, 2, 99, True, "1", 1.0])
def test_invalid_choice_terminates(crossroads_graph, choice):
    runner = DialogueRunner(crossroads_graph, {"gold": 50})
    runner.advance()

    step = runner.advance(choice)
    assert step.is_terminated
    assert runner.get_state().current_node_id is None


def test_setvar_then_condition(scoring_graph):
    runner = DialogueRunner(scoring_graph)

    step = runner.advance()
    assert step.kind is StepKind.YIELDED
    assert step.node.content == "Winner"
    assert runner.history == ["A", "B", "C"]
    assert runner.get_variable("score") == 5

    assert runner.advance().is_terminated


def test_failed_condition_terminates():
    graph = make_graph(
        "gate",
        {"id": "gate", "type": "condition", "variable": "key",
         "condition": {"operator": "eq", "value": True}, "targetId": "door"},
        {"id": "door", "type": "line", "content": "It opens."},
    )
    runner = DialogueRunner(graph, {"key": False})

    assert runner.advance().is_terminated
    assert runner.history == ["gate"]


def test_condition_without_comparison_passes():
    graph = make_graph(
        "gate",
        {"id": "gate", "type": "condition", "targetId": "door"},
        {"id": "door", "type": "line", "content": "It opens."},
    )
    runner = DialogueRunner(graph)

    assert runner.advance().node.id == "door"


def test_condition_on_missing_variable_terminates():
    graph = make_graph(
        "gate",
        {"id": "gate", "type": "condition", "variable": "level",
         "condition": {"operator": "gt", "value": 1}, "targetId": "door"},
        {"id": "door", "type": "line"},
    )
    runner = DialogueRunner(graph)

    assert runner.advance().is_terminated


def test_jump_is_silent():
    graph = make_graph(
        "J",
        {"id": "J", "type": "jump", "targetId": "L"},
        {"id": "L", "type": "line", "content": "Landed."},
    )
    runner = DialogueRunner(graph)

    step = runner.advance()
    assert step.node.id == "L"
    assert runner.history == ["J", "L"]


def test_jump_without_target_terminates():
    runner = DialogueRunner(make_graph("J", {"id": "J", "type": "jump"}))

    assert runner.advance().is_terminated
    assert runner.history == ["J"]


def test_missing_start_node_fails_closed():
    runner = DialogueRunner(make_graph("nowhere", {"id": "A", "type": "line"}))

    assert runner.get_current_node() is None
    assert runner.advance().is_terminated
    assert runner.get_state().current_node_id is None
    assert runner.history == []


def test_dangling_target_terminates():
    graph = make_graph("A", {"id": "A", "type": "line", "targetId": "ghost"})
    runner = DialogueRunner(graph)

    assert runner.advance().node.id == "A"
    assert runner.advance().is_terminated
    assert runner.history == ["A"]


def test_unknown_node_type_terminates():
    odd = SimpleNamespace(id="X", type="teleport", target_id="Y")
    graph = DialogueGraph.model_construct(nodes=(odd,), start_node_id="X")
    runner = DialogueRunner(graph)

    assert runner.advance().is_terminated
    assert runner.history == ["X"]


def test_setvar_updates_only_named_variable():
    graph = make_graph(
        "A",
        {"id": "A", "type": "setVar", "variable": "mood", "value": "happy", "targetId": "B"},
        {"id": "B", "type": "line"},
    )
    seed = {"gold": 5, "name": "Ayla", "brave": True, "mood": "grim"}
    runner = DialogueRunner(graph, seed)
    runner.advance()

    variables = runner.get_variables()
    assert variables["mood"] == "happy"
    assert {k: v for k, v in variables.items() if k != "mood"} == {
        "gold": 5, "name": "Ayla", "brave": True,
    }
    # Caller's seed mapping is untouched
    assert seed["mood"] == "grim"


def test_setvar_without_value_assigns_nothing():
    graph = make_graph(
        "A",
        {"id": "A", "type": "setVar", "variable": "mood", "targetId": "B"},
        {"id": "B", "type": "line"},
    )
    runner = DialogueRunner(graph)

    assert runner.advance().node.id == "B"
    assert runner.get_variable("mood") is None


def test_history_includes_silent_nodes():
    graph = make_graph(
        "a",
        {"id": "a", "type": "jump", "targetId": "b"},
        {"id": "b", "type": "setVar", "variable": "x", "value": 1, "targetId": "c"},
        {"id": "c", "type": "line", "targetId": "d"},
        {"id": "d", "type": "choice", "choices": [{"text": "on", "targetId": "e"}]},
        {"id": "e", "type": "condition", "variable": "x",
         "condition": {"operator": "eq", "value": 1}, "targetId": "f"},
        {"id": "f", "type": "line"},
    )
    runner = DialogueRunner(graph)

    assert play(runner, [0]) == ["c", "d", "f"]
    assert runner.history == ["a", "b", "c", "d", "e", "f"]


def test_determinism(graph_data):
    graph = DialogueGraph.model_validate(graph_data)
    seed = graph_data["variables"]

    first = DialogueRunner(graph, seed)
    second = DialogueRunner(graph, seed)
    play(first, [0])
    play(second, [0])

    assert first.history == second.history
    assert first.get_variables() == second.get_variables()


def test_acyclic_graph_converges(graph_data):
    graph = DialogueGraph.model_validate(graph_data)
    runner = DialogueRunner(graph, graph_data["variables"])

    steps = 0
    step = runner.advance()
    while not step.is_terminated:
        steps += 1
        assert steps <= len(graph.nodes)
        step = runner.advance(1 if step.needs_choice else None)

    assert runner.is_finished


def test_graph_shared_between_runners(crossroads_graph):
    rich = DialogueRunner(crossroads_graph, {"gold": 100})
    poor = DialogueRunner(crossroads_graph, {"gold": 0})
    rich.advance()
    poor.advance()

    assert rich.advance(0).node.id == "N"
    assert poor.advance(0).is_terminated


def test_state_snapshot_is_defensive(linear_graph):
    runner = DialogueRunner(linear_graph, {"gold": 1})
    runner.advance()

    state = runner.get_state()
    state.variables["gold"] = 999
    state.history.append("bogus")
    state.current_node_id = None

    variables = runner.get_variables()
    variables["gold"] = 42

    assert runner.get_variable("gold") == 1
    assert runner.history == ["A"]
    assert runner.get_current_node().id == "A"


def test_set_variable_overwrites_without_type_check(linear_graph):
    runner = DialogueRunner(linear_graph, {"gold": 1})
    runner.set_variable("gold", "lots")

    assert runner.get_variable("gold") == "lots"
    assert runner.get_variable("missing") is None


def test_strict_mode_rejects_broken_graph():
    graph = make_graph("A", {"id": "A", "type": "line", "targetId": "ghost"})

    with pytest.raises(GraphValidationError) as excinfo:
        DialogueRunner(graph, strict=True)

    assert [issue.code for issue in excinfo.value.issues if issue.severity == "ERROR"] == [
        "DANGLING_TARGET"
    ]


def test_strict_mode_accepts_valid_graph(scoring_graph):
    runner = DialogueRunner(scoring_graph, strict=True)

    assert runner.advance().node.id == "C"
