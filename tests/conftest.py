import os
import sys
import pytest

# Ensure dialogue_engine can be imported without installing
sys.path.append(os.getcwd())

from dialogue_engine.dialog.types import DialogueGraph


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from dialogue_engine.core.events import EventBus
    return EventBus()


@pytest.fixture
def linear_graph():
    """A: line -> B: line -> end."""
    return DialogueGraph.model_validate({
        "startNodeId": "A",
        "nodes": [
            {"id": "A", "type": "line", "content": "Hello.", "targetId": "B"},
            {"id": "B", "type": "line", "content": "Goodbye."},
        ],
    })


@pytest.fixture
def crossroads_graph():
    """A choice gated on gold, leading to two lines."""
    return DialogueGraph.model_validate({
        "startNodeId": "S",
        "nodes": [
            {
                "id": "S",
                "type": "choice",
                "choices": [
                    {
                        "text": "go north",
                        "targetId": "N",
                        "condition": {"variable": "gold", "operator": "gte", "value": 10},
                    },
                    {"text": "go south", "targetId": "Z"},
                ],
            },
            {"id": "N", "type": "line", "content": "The north road."},
            {"id": "Z", "type": "line", "content": "The south road."},
        ],
    })


@pytest.fixture
def scoring_graph():
    """setVar(score=5) -> condition(score gte 5) -> line("Winner")."""
    return DialogueGraph.model_validate({
        "startNodeId": "A",
        "nodes": [
            {"id": "A", "type": "setVar", "variable": "score", "value": 5, "targetId": "B"},
            {
                "id": "B",
                "type": "condition",
                "variable": "score",
                "condition": {"operator": "gte", "value": 5},
                "targetId": "C",
            },
            {"id": "C", "type": "line", "content": "Winner"},
        ],
    })


@pytest.fixture
def graph_data():
    """Raw graph-file JSON with authored variables."""
    return {
        "id": "tavern",
        "startNodeId": "greet",
        "variables": {"gold": 12, "name": "Ayla"},
        "nodes": [
            {"id": "greet", "type": "line", "content": "Welcome, {name}.", "targetId": "menu"},
            {
                "id": "menu",
                "type": "choice",
                "choices": [
                    {
                        "text": "Buy a drink",
                        "targetId": "pay",
                        "condition": {"variable": "gold", "operator": "gte", "value": 5},
                    },
                    {"text": "Leave", "targetId": "bye"},
                ],
            },
            {"id": "pay", "type": "setVar", "variable": "gold", "value": 7, "targetId": "drink"},
            {"id": "drink", "type": "line", "content": "Cheers!", "targetId": "bye"},
            {"id": "bye", "type": "line", "content": "Farewell."},
        ],
    }
