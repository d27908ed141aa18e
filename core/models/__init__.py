# ============================================================================
# MODELS MODULE
# ============================================================================
# STATUS: Model exports
# PURPOSE: Central export point for Pydantic models
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

Pydantic models shared by the dispatch engine and its callers.
"""

from core.models.task import Task, TaskAlreadyFinalizedError

__all__ = [
    "Task",
    "TaskAlreadyFinalizedError",
]
