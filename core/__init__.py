# ============================================================================
# CORE MODULE
# ============================================================================
# STATUS: Core module initialization
# PURPOSE: Export core contracts and models
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================

from core.contracts import StatusCode, StatusSnapshot
from core.models import Task, TaskAlreadyFinalizedError

__all__ = [
    # Enums
    "StatusCode",
    # Values
    "StatusSnapshot",
    # Models
    "Task",
    "TaskAlreadyFinalizedError",
]
