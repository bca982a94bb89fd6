"""
Core module.

Exports:
- Model, FrozenModel: Pydantic bases for dialogue data
- EventBus, Event, DialogueEvent: Event system
- DialogueConfig: Loading and playback configuration
"""

from dialogue_engine.core.model import Model, FrozenModel
from dialogue_engine.core.events import EventBus, Event, EventHandler, DialogueEvent
from dialogue_engine.core.config import DialogueConfig

__all__ = [
    # Models
    "Model",
    "FrozenModel",
    # Events
    "EventBus",
    "Event",
    "EventHandler",
    "DialogueEvent",
    # Config
    "DialogueConfig",
]
