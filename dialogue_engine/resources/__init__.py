"""
Resources module - loading authored dialogue graphs from disk.
"""

from dialogue_engine.resources.graph_store import GraphStore, SCHEMA_PATH, load_schema

__all__ = [
    "GraphStore",
    "SCHEMA_PATH",
    "load_schema",
]
