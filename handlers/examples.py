# ============================================================================
# EXAMPLE HANDLERS
# ============================================================================
# STATUS: Examples - Sample handler implementations
# PURPOSE: Demonstrate handler and handler set patterns
# CREATED: 19 OCT 2026
# ============================================================================
"""
Example Handlers

Sample implementations showing how to write handlers for a HandlerChain.
These can be used for testing and as templates for real handlers.

Request shape used throughout: ActionRequest(action="...", message=...).
"""

import asyncio
import logging
from typing import Any, Callable

from pydantic import BaseModel

from handlers.registry import HandlerContext, HandlerFunc, HandlerSet

logger = logging.getLogger(__name__)


class ActionRequest(BaseModel):
    """Minimal request routed by its action name."""
    action: str
    message: Any = None


# ============================================================================
# BASIC HANDLERS
# ============================================================================

def echo_handler(ctx: HandlerContext) -> Any:
    """Terminates the chain with the request's message."""
    logger.info(f"Echo handler called with action: {ctx.request.action}")
    return ctx.request.message


def fail_handler(ctx: HandlerContext) -> Any:
    """
    Handler that always raises.

    Used for testing the 500 status path.
    """
    raise RuntimeError(f"Intentional failure for action: {ctx.request.action}")


def delayed_handler(value: Any, seconds: float = 0.0) -> HandlerFunc:
    """
    Build an async handler that sleeps, then terminates with `value`.
    """
    async def _delayed(ctx: HandlerContext) -> Any:
        await asyncio.sleep(seconds)
        return value

    _delayed.__qualname__ = f"delayed_handler[{value!r}]"
    return _delayed


# ============================================================================
# ROUTING
# ============================================================================

def action_handler(action: str, func: Callable[[HandlerContext], Any]) -> HandlerFunc:
    """
    Build a handler that only answers one action.

    Requests with a different action continue down the chain.

    Example:
        chain.add_handler(action_handler("ping", lambda ctx: "pong"))
    """
    def _route(ctx: HandlerContext) -> Any:
        if ctx.request.action != action:
            return ctx.next()
        return func(ctx)

    _route.__qualname__ = f"action_handler[{action}]"
    return _route


# ============================================================================
# HANDLER SETS
# ============================================================================

def counter_set(action: str) -> HandlerSet:
    """
    Pass-through set counting requests for `action` in store["counter"].

    The counter lives in the set's store and so spans every dispatch.
    """
    def _count(ctx: HandlerContext) -> Any:
        if ctx.request.action == action:
            ctx.store["counter"] += 1
        return ctx.next()

    return HandlerSet(handlers=_count, store={"counter": 0})


def history_middleware() -> HandlerSet:
    """
    Async wrapper recording the downstream response.

    Appends "before", the downstream response, then "after" to
    store["history"] and passes the response through unchanged.
    """
    async def _wrap(ctx: HandlerContext) -> Any:
        history = ctx.store["history"]
        history.append("before")
        response = await ctx.next_async()
        history.append(response)
        history.append("after")
        return response

    return HandlerSet(handlers=_wrap, store={"history": []})


__all__ = [
    "ActionRequest",
    "echo_handler",
    "fail_handler",
    "delayed_handler",
    "action_handler",
    "counter_set",
    "history_middleware",
]
