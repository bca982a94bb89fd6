"""
Tools module - command-line utilities for dialogue authors.
"""

from dialogue_engine.tools.verify import main as verify_main, verify

__all__ = [
    "verify",
    "verify_main",
]
