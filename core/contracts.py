# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# STATUS: Foundation - Status codes and status snapshot
# PURPOSE: Define the status vocabulary shared by tasks and handlers
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: StatusCode, StatusSnapshot, StatusValue
# DEPENDENCIES: enum, dataclasses
# ============================================================================
"""
Base contracts for the handler chain.

A task's status is an int or a string. The chain itself only ever writes
the codes in StatusCode; handlers are free to write anything else via
set_status().
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Union


# ============================================================================
# STATUS CODES
# ============================================================================

class StatusCode(IntEnum):
    """
    Status codes written by the dispatch engine.

    Lifecycle of Task.status:
        UNSET -> (handler set_status)* -> OK        (still UNSET at finalize)
              -> NOT_FOUND                          (walked past last handler)
              -> HANDLER_ERROR                      (handler raised)
    """
    UNSET = 0               # Sentinel, nothing has set a status yet
    OK = 200                # Filled in at finalization
    NOT_FOUND = 404         # No handler terminated the chain
    HANDLER_ERROR = 500     # A handler raised synchronously

    def is_error(self) -> bool:
        """Check if this code represents a failed dispatch."""
        return self in (StatusCode.NOT_FOUND, StatusCode.HANDLER_ERROR)


StatusValue = Union[int, str]


@dataclass(frozen=True)
class StatusSnapshot:
    """
    Point-in-time copy of a task's status and error.

    Returned by HandlerContext.get_status(); later set_status() calls do not
    change an already taken snapshot.
    """
    status: StatusValue
    error: Optional[BaseException] = None


__all__ = [
    "StatusCode",
    "StatusSnapshot",
    "StatusValue",
]
