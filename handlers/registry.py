# ============================================================================
# HANDLER TYPES
# ============================================================================
# STATUS: Core - Handler, handler set and execution context types
# PURPOSE: Describe what gets registered on a chain and what a handler sees
# CREATED: 19 OCT 2026
# ============================================================================
"""
Handler Types

A handler is any callable taking a single HandlerContext and returning a
response, either directly or as an awaitable.

Handlers are registered in groups (HandlerSet). A group shares one store
and one `once` policy, and is the unit removed by HandlerContext.remove_handler().
A bare callable is wrapped into a single-member group with a fresh store.

Example:
    def auth(ctx: HandlerContext):
        if not ctx.request.get("token"):
            ctx.set_status(401)
            return None
        return ctx.next()

    async def timing(ctx: HandlerContext):
        started = time.monotonic()
        response = await ctx.next_async()
        ctx.store["last_ms"] = (time.monotonic() - started) * 1000
        return response
"""

import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence, Union

from core.contracts import StatusSnapshot, StatusValue


# ============================================================================
# EXCEPTIONS
# ============================================================================

class HandlerChainError(Exception):
    """Base exception for handler chain errors."""
    pass


class InvalidPriorityError(HandlerChainError, ValueError):
    """Raised when a priority is not a non-negative integer."""
    def __init__(self, priority: Any):
        self.priority = priority
        super().__init__(f"Priority must be a non-negative int, got: {priority!r}")


class InvalidHandlerError(HandlerChainError, TypeError):
    """Raised when something that is not a handler is registered."""
    pass


# ============================================================================
# HANDLER TYPES
# ============================================================================

HandlerFunc = Callable[["HandlerContext"], Union[Any, Awaitable[Any]]]


async def resolve(value: Any) -> Any:
    """
    Await a value until it is no longer awaitable.

    Plain values are returned as-is, so callers can write
    `await resolve(ctx.next())` without knowing the downstream mode.
    """
    while inspect.isawaitable(value):
        value = await value
    return value


def handler_name(handler: Any) -> str:
    """Readable name of a handler for log output."""
    name = getattr(handler, "__qualname__", None) or getattr(handler, "__name__", None)
    if name:
        return name
    return type(handler).__name__


@dataclass(eq=False)
class HandlerSet:
    """
    Group of handlers sharing a store and a once policy.

    `handlers` may be given as a single callable; it is normalized to a list.
    A missing store becomes a fresh empty dict. The store is shared by every
    dispatch that reaches the group, not per request.
    """
    handlers: Union[HandlerFunc, Sequence[HandlerFunc]]
    store: Any = None
    once: bool = False

    def __post_init__(self) -> None:
        if callable(self.handlers):
            self.handlers = [self.handlers]
        elif isinstance(self.handlers, (str, bytes)) or not isinstance(self.handlers, Sequence):
            raise InvalidHandlerError(
                f"HandlerSet.handlers must be a callable or a sequence of callables, "
                f"got: {type(self.handlers).__name__}"
            )
        else:
            self.handlers = list(self.handlers)

        if not self.handlers:
            raise InvalidHandlerError("HandlerSet must contain at least one handler")

        for handler in self.handlers:
            if not callable(handler):
                raise InvalidHandlerError(f"Handler is not callable: {handler!r}")

        if self.store is None:
            self.store = {}


def coerce_handler_set(value: Union[HandlerFunc, HandlerSet, Mapping[str, Any]]) -> HandlerSet:
    """
    Normalize anything accepted by HandlerChain.add_handler() to a HandlerSet.

    Args:
        value: A HandlerSet, a mapping with HandlerSet keys, or a bare callable

    Returns:
        HandlerSet

    Raises:
        InvalidHandlerError if the value cannot be interpreted
    """
    if isinstance(value, HandlerSet):
        return value

    if isinstance(value, Mapping):
        unknown = set(value) - {"handlers", "store", "once"}
        if unknown:
            raise InvalidHandlerError(f"Unknown HandlerSet keys: {sorted(unknown)}")
        if "handlers" not in value:
            raise InvalidHandlerError("HandlerSet mapping requires a 'handlers' key")
        return HandlerSet(
            handlers=value["handlers"],
            store=value.get("store"),
            once=bool(value.get("once", False)),
        )

    if callable(value):
        return HandlerSet(handlers=[value], store={}, once=False)

    raise InvalidHandlerError(
        f"Expected a handler, HandlerSet or mapping, got: {type(value).__name__}"
    )


# ============================================================================
# EXECUTION CONTEXT
# ============================================================================

@dataclass
class HandlerContext:
    """
    Context passed to a handler for one step of a dispatch.

    next(), next_sync() and next_async() all run the rest of the chain.
    next_async() additionally guarantees an awaitable return value.
    """
    request: Any
    store: Any
    task_id: str

    _advance: Callable[[], Any] = field(repr=False)
    _set_status: Callable[[StatusValue, Optional[BaseException]], None] = field(repr=False)
    _get_status: Callable[[], StatusSnapshot] = field(repr=False)
    _retire: Callable[[], None] = field(repr=False)

    def next(self) -> Any:
        """Run the next handler and return its result (value or awaitable)."""
        return self._advance()

    def next_sync(self) -> Any:
        """
        Alias for next(), for handlers that know the rest of the chain
        is synchronous. Not checked.
        """
        return self._advance()

    def next_async(self) -> Awaitable[Any]:
        """Run the next handler; always returns an awaitable."""
        result = self._advance()
        if inspect.isawaitable(result):
            return result
        return resolve(result)

    def set_status(self, status: StatusValue, error: Optional[BaseException] = None) -> None:
        """Overwrite the task's status and error (error resets to None if omitted)."""
        self._set_status(status, error)

    def get_status(self) -> StatusSnapshot:
        """Current status and error of the task."""
        return self._get_status()

    def remove_handler(self) -> None:
        """Remove every handler of this handler's set from the chain."""
        self._retire()


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "HandlerFunc",
    "HandlerSet",
    "HandlerContext",
    "HandlerChainError",
    "InvalidPriorityError",
    "InvalidHandlerError",
    "coerce_handler_set",
    "handler_name",
    "resolve",
]
