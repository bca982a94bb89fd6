"""
Model base class for data-only dialogue types.

Models are pure data containers with NO traversal logic.
All logic lives in the runner. This separation makes:
- Graphs trivially loadable from JSON
- Graphs shareable between runners
- Testing easier

Usage:
    class LineNode(Model):
        id: str
        content: str = ""
        target_id: str | None = Field(default=None, alias="targetId")
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """
    Base class for all dialogue data types.

    Uses Pydantic for:
    - Automatic validation
    - JSON serialization (camelCase aliases on the wire)
    - Type hints
    - Default values
    """

    model_config = ConfigDict(
        # Accept both target_id and targetId
        populate_by_name=True,
        # Unknown keys in authored data are ignored
        extra='ignore',
    )

    def to_json_dict(self) -> dict:
        """Dump using wire (camelCase) names, dropping unset optionals."""
        return self.model_dump(mode='json', by_alias=True, exclude_none=True)


class FrozenModel(Model):
    """Immutable model; safe to share across runners."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra='ignore',
        frozen=True,
    )
