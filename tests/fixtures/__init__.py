"""
Test fixtures for deterministic testing.

This module provides:
- rows: raw task/shooting/meeting rows shaped like the collaborator stores return them
"""

from .rows import NOW, make_meeting, make_shooting, make_task, sources_payload

__all__ = ["NOW", "make_meeting", "make_shooting", "make_task", "sources_payload"]
