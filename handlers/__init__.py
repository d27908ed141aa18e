# ============================================================================
# HANDLER CHAIN PACKAGE
# ============================================================================
# STATUS: Core - Handler registration and dispatch
# PURPOSE: Register handlers by priority and dispatch requests through them
# CREATED: 19 OCT 2026
# ============================================================================
"""
Handler Chain

Usage:
    from handlers import HandlerChain, HandlerSet

    chain = HandlerChain()
    chain.add_handler(lambda ctx: ctx.next() + "1")
    chain.add_handler(HandlerSet(handlers=lambda ctx: "2", once=True), 20)

    task = chain.handle_request({"action": "hello"})
    # task.status == 200, task.response == "21"

    # With async handlers:
    task = await chain.handle_request(request)
"""

from handlers.registry import (
    HandlerFunc,
    HandlerSet,
    HandlerContext,
    HandlerChainError,
    InvalidPriorityError,
    InvalidHandlerError,
    resolve,
)
from handlers.chain import HandlerChain
from __version__ import __version__

__all__ = [
    "__version__",
    "HandlerChain",
    "HandlerFunc",
    "HandlerSet",
    "HandlerContext",
    "HandlerChainError",
    "InvalidPriorityError",
    "InvalidHandlerError",
    "resolve",
]
