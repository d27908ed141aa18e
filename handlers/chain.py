# ============================================================================
# HANDLER CHAIN
# ============================================================================
# STATUS: Core - Priority-ordered request dispatch
# PURPOSE: Route a request through registered handlers and record a Task
# CREATED: 19 OCT 2026
# ============================================================================
"""
Handler Chain

Callers register handlers at integer priorities and submit requests. Each
request walks the handlers in ascending priority (then registration) order.
A handler continues the walk by calling ctx.next(); returning without it
terminates the walk and its return value becomes the response.

Dispatch modes:
- All reached handlers return plain values -> handle_request() returns a
  finalized Task.
- The first handler returns an awaitable -> handle_request() returns a
  coroutine that resolves to the finalized Task. Nothing past the first
  handler's synchronous return runs until that coroutine is awaited.

Status rules:
- Walking past the last handler sets 404.
- A handler raising synchronously sets 500 with the exception as error;
  the exception does not leave handle_request().
- Nothing set by finalization -> 200.
- Exceptions raised while awaiting a handler's awaitable propagate to the
  caller awaiting the dispatch.

Design:
- Buckets are a sparse dict of priority -> handler list, flattened once per
  dispatch. Registrations made during a dispatch are not seen by it.
- Handler -> HandlerSet lookup is a side table keyed by handler identity;
  handlers stay plain callables.
"""

import inspect
from typing import Any, Awaitable, Dict, Generic, List, NamedTuple, Optional, Union, cast

from core.contracts import StatusCode, StatusSnapshot, StatusValue
from core.config import get_defaults
from core.logging import ComponentType, get_logger, log_context
from core.models.task import RequestT, Task
from handlers.registry import (
    HandlerContext,
    HandlerFunc,
    HandlerSet,
    InvalidPriorityError,
    coerce_handler_set,
    handler_name,
    resolve,
)

logger = get_logger(__name__, ComponentType.CHAIN)


class _Entry(NamedTuple):
    """One handler as captured at flatten time."""
    handler: HandlerFunc
    handler_set: HandlerSet
    priority: int


def _validate_priority(priority: Any) -> int:
    if isinstance(priority, bool) or not isinstance(priority, int) or priority < 0:
        raise InvalidPriorityError(priority)
    return priority


# ============================================================================
# DISPATCH STATE
# ============================================================================

class _Dispatch:
    """
    State of a single handle_request() call.

    Holds the flattened handler list and the Task; step(i) runs handler i.
    """

    def __init__(self, chain: "HandlerChain", entries: List[_Entry], task: Task):
        self.chain = chain
        self.entries = entries
        self.task = task

    def set_status(self, status: StatusValue, error: Optional[BaseException] = None) -> None:
        if self.task.is_finalized:
            logger.warning(
                f"Ignoring set_status({status!r}) on finalized task {self.task.task_id}"
            )
            return
        self.task.set_status(status, error)

    def get_status(self) -> StatusSnapshot:
        return self.task.status_snapshot()

    def step(self, index: int) -> Any:
        """
        Invoke the handler at `index` and return its result.

        Past the end of the list the task becomes 404 and the result is None.
        """
        if index >= len(self.entries):
            logger.debug(f"No handler terminated task {self.task.task_id}")
            self.set_status(StatusCode.NOT_FOUND)
            return None

        entry = self.entries[index]
        if entry.handler_set.once:
            self.chain.remove_handler(entry.handler)

        context = HandlerContext(
            request=self.task.request,
            store=entry.handler_set.store,
            task_id=self.task.task_id,
            _advance=lambda: self.step(index + 1),
            _set_status=self.set_status,
            _get_status=self.get_status,
            _retire=lambda: self.chain._remove_handler_set(entry.handler_set),
        )

        name = handler_name(entry.handler)
        with log_context(handler=name, priority=entry.priority):
            try:
                return entry.handler(context)
            except Exception as e:
                logger.exception(f"Handler {name} failed: {e}")
                self.set_status(StatusCode.HANDLER_ERROR, e)
                return None

    def finish(self, response: Any) -> Task:
        self.task.finalize(response)
        logger.debug(
            f"Task {self.task.task_id} finished with status {self.task.status}",
            extra={"duration_ms": self.task.duration_ms},
        )
        return self.task

    async def finish_async(self, pending: Awaitable[Any]) -> Task:
        with log_context(task_id=self.task.task_id, operation="dispatch"):
            response = await resolve(pending)
            return self.finish(response)


# ============================================================================
# CHAIN
# ============================================================================

class HandlerChain(Generic[RequestT]):
    """
    Priority-ordered handler chain.

    Example:
        chain = HandlerChain()
        chain.add_handler(lambda ctx: ctx.next() + "1").add_handler(lambda ctx: "2", 20)
        task = chain.handle_request({"action": "hello"})
        assert task.response == "21"
    """

    def __init__(self) -> None:
        self._buckets: Dict[int, List[HandlerFunc]] = {}
        self._sets: Dict[int, HandlerSet] = {}

    # ------------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------------

    def add_handler(
        self,
        handler_set: Union[HandlerFunc, HandlerSet, Dict[str, Any]],
        priority: Optional[int] = None,
    ) -> "HandlerChain[RequestT]":
        """
        Register a handler or a group of handlers.

        Args:
            handler_set: Bare callable, HandlerSet, or mapping with
                handlers/store/once keys
            priority: Execution order, smaller runs first (default 10)

        Returns:
            self, for chaining

        Raises:
            InvalidPriorityError if priority is not a non-negative int
            InvalidHandlerError if handler_set is not usable
        """
        if priority is None:
            priority = get_defaults().chain.default_priority
        priority = _validate_priority(priority)
        handler_set = coerce_handler_set(handler_set)

        for handler in handler_set.handlers:
            self._sets[id(handler)] = handler_set
        self._buckets.setdefault(priority, []).extend(handler_set.handlers)

        logger.debug(
            f"Registered {len(handler_set.handlers)} handler(s) at priority {priority}",
            extra={
                "handlers": [handler_name(h) for h in handler_set.handlers],
                "once": handler_set.once,
            },
        )
        return self

    def remove_handler(self, handler: HandlerFunc) -> bool:
        """
        Remove the first registered occurrence of exactly this handler.

        Siblings in the same HandlerSet are left in place.

        Returns:
            True if a handler was removed
        """
        for priority in sorted(self._buckets):
            bucket = self._buckets[priority]
            for idx, candidate in enumerate(bucket):
                if candidate is not handler:
                    continue
                del bucket[idx]
                if not bucket:
                    del self._buckets[priority]
                if not self._is_registered(handler):
                    self._sets.pop(id(handler), None)
                logger.debug(f"Removed handler {handler_name(handler)} from priority {priority}")
                return True
        return False

    def _remove_handler_set(self, handler_set: HandlerSet) -> None:
        for handler in handler_set.handlers:
            self.remove_handler(handler)

    def clear(self) -> None:
        """Remove every handler."""
        self._buckets.clear()
        self._sets.clear()

    # ------------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------------

    def _is_registered(self, handler: HandlerFunc) -> bool:
        return any(candidate is handler for bucket in self._buckets.values() for candidate in bucket)

    def _flatten(self) -> List[_Entry]:
        return [
            _Entry(handler, self._sets[id(handler)], priority)
            for priority in sorted(self._buckets)
            for handler in self._buckets[priority]
        ]

    def handlers(self) -> List[HandlerFunc]:
        """Registered handlers in dispatch order."""
        return [entry.handler for entry in self._flatten()]

    def priorities(self) -> List[int]:
        """Priorities that currently hold handlers, ascending."""
        return sorted(self._buckets)

    def get_handler_set(self, handler: HandlerFunc) -> Optional[HandlerSet]:
        """HandlerSet a registered handler belongs to, or None."""
        return self._sets.get(id(handler))

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())

    # ------------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------------

    def handle_request(
        self, request: RequestT
    ) -> Union[Task[RequestT, Any], Awaitable[Task[RequestT, Any]]]:
        """
        Route a request through the chain.

        The synchronous part of the walk runs here. When the first handler
        answers with an awaitable, the returned coroutine has not started:
        the awaitable is only driven, and the task only finalized, once the
        caller awaits it. Two dispatches created before either is awaited
        both see the chain as it was when they were created, and a dispatch
        that is never awaited is never finalized.

        Returns:
            Finalized Task, or an awaitable resolving to it when the first
            handler answered with an awaitable
        """
        task = Task(request=request)
        dispatch = _Dispatch(self, self._flatten(), task)

        with log_context(task_id=task.task_id, operation="dispatch"):
            logger.debug(f"Dispatching task {task.task_id} to {len(dispatch.entries)} handler(s)")
            result = dispatch.step(0)

        if inspect.isawaitable(result):
            return dispatch.finish_async(result)
        return dispatch.finish(result)

    def handle_request_sync(self, request: RequestT) -> Task[RequestT, Any]:
        """
        Alias for handle_request() for callers that know every reached
        handler is synchronous. Not checked.
        """
        return cast(Task, self.handle_request(request))


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "HandlerChain",
]
