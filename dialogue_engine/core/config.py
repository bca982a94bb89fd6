"""
Configuration for dialogue loading and playback.
"""

from __future__ import annotations

import logging
from pathlib import Path


class DialogueConfig:
    """Configuration for the dialogue engine."""

    def __init__(
        self,
        data_path: str | Path = "game/data/dialog",
        strict: bool = False,
        validate_schema: bool = True,
        text_substitution: bool = True,
        log_level: int | str = logging.INFO,
    ):
        self.data_path = Path(data_path)
        # Run the graph validator before a playthrough starts
        self.strict = strict
        # Check graph files against the bundled JSON schema on load
        self.validate_schema = validate_schema
        # Replace {name} placeholders in line text with variable values
        self.text_substitution = text_substitution
        self.log_level = log_level

    def __repr__(self) -> str:
        return (
            f"DialogueConfig(data_path={str(self.data_path)!r}, strict={self.strict}, "
            f"validate_schema={self.validate_schema}, "
            f"text_substitution={self.text_substitution})"
        )
