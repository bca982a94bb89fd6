"""
Dialogue graph store.

Handles loading and validation of authored dialogue graphs from JSON.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

import jsonschema
from pydantic import ValidationError

from dialogue_engine.core.config import DialogueConfig
from dialogue_engine.dialog.types import DialogueGraph, GameVariables

SCHEMA_PATH = Path(__file__).parent / "schemas" / "dialogue_graph.schema.json"


def load_schema(path: Path | str = SCHEMA_PATH) -> dict[str, Any]:
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


class GraphStore:
    """
    Central storage for dialogue graphs loaded from a directory.

    Each ``*.json`` file holds one graph; its id is the file's ``id``
    field, or the file stem when absent. Files that fail to parse or
    validate are logged and skipped.
    """

    def __init__(self, data_path: Path | str | None = None, config: Optional[DialogueConfig] = None):
        self.config = config or DialogueConfig()
        self._data_path = Path(data_path) if data_path is not None else self.config.data_path
        self._schema: Optional[dict[str, Any]] = None

        self.graphs: dict[str, DialogueGraph] = {}
        self.variables: dict[str, GameVariables] = {}

        self.logger = logging.getLogger(__name__)

    @property
    def schema(self) -> dict[str, Any]:
        if self._schema is None:
            self._schema = load_schema()
        return self._schema

    def load_all(self) -> None:
        """Load every graph file in the data directory."""
        if not self._data_path.exists():
            self.logger.warning(f"Dialogue directory not found: {self._data_path}")
            return

        for file_path in sorted(self._data_path.glob("*.json")):
            self.load_file(file_path)

        self.logger.info(f"Loaded {len(self.graphs)} dialogue graph(s) from {self._data_path}.")

    def load_file(self, file_path: Path | str) -> Optional[DialogueGraph]:
        """Load a single graph file; returns None if it is unusable."""
        file_path = Path(file_path)
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.error(f"Failed to load {file_path}: {e}")
            return None

        return self.add(data, default_id=file_path.stem, source=str(file_path))

    def add(self, data: Any, default_id: str = "", source: str = "<memory>") -> Optional[DialogueGraph]:
        """Validate raw graph data and register it."""
        if self.config.validate_schema:
            try:
                jsonschema.validate(instance=data, schema=self.schema)
            except jsonschema.ValidationError as e:
                self.logger.error(f"Validation error in {source}: {e.message}")
                return None

        try:
            graph = DialogueGraph.model_validate(data)
        except ValidationError as e:
            self.logger.error(f"Invalid dialogue graph in {source}: {e}")
            return None

        graph_id = data.get('id') or default_id
        if graph_id in self.graphs:
            self.logger.warning(f"Duplicate dialogue id {graph_id!r} in {source}; replacing")

        self.graphs[graph_id] = graph
        self.variables[graph_id] = dict(data.get('variables') or {})
        return graph

    def get_graph(self, graph_id: str) -> Optional[DialogueGraph]:
        return self.graphs.get(graph_id)

    def get_variables(self, graph_id: str) -> GameVariables:
        """Initial variables authored alongside a graph (a copy)."""
        return dict(self.variables.get(graph_id, {}))

    def graph_ids(self) -> list[str]:
        return list(self.graphs)
