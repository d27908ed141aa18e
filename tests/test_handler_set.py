# ============================================================================
# HANDLER TYPES TESTS
# ============================================================================
# STATUS: Tests - HandlerSet normalization and HandlerContext helpers
# PURPOSE: Verify registration inputs and next_async / resolve behavior
# CREATED: 19 OCT 2026
# ============================================================================
"""
Handler Types Tests

Run with:
    pytest tests/test_handler_set.py -v
"""

import asyncio
import inspect

import pytest

from core.contracts import StatusSnapshot
from handlers.registry import (
    HandlerContext,
    HandlerSet,
    InvalidHandlerError,
    coerce_handler_set,
    handler_name,
    resolve,
)


def make_context(advance=lambda: None, **kwargs):
    """Build a HandlerContext with inert callbacks."""
    return HandlerContext(
        request=kwargs.get("request"),
        store=kwargs.get("store", {}),
        task_id="task-001",
        _advance=advance,
        _set_status=kwargs.get("set_status", lambda status, error=None: None),
        _get_status=kwargs.get("get_status", lambda: StatusSnapshot(0)),
        _retire=kwargs.get("retire", lambda: None),
    )


# ============================================================================
# HANDLER SET
# ============================================================================

class TestHandlerSet:

    def test_single_callable_becomes_list(self):
        def handler(ctx):
            return None

        handler_set = HandlerSet(handlers=handler)

        assert handler_set.handlers == [handler]
        assert handler_set.store == {}
        assert handler_set.once is False

    def test_store_kept_when_given(self):
        store = {"counter": 0}
        handler_set = HandlerSet(handlers=[lambda ctx: None], store=store)

        assert handler_set.store is store

    def test_default_stores_are_distinct(self):
        a = HandlerSet(handlers=lambda ctx: None)
        b = HandlerSet(handlers=lambda ctx: None)

        assert a.store is not b.store

    def test_tuple_of_handlers(self):
        handler_set = HandlerSet(handlers=(lambda ctx: 1, lambda ctx: 2))

        assert len(handler_set.handlers) == 2
        assert isinstance(handler_set.handlers, list)

    def test_empty_set_rejected(self):
        with pytest.raises(InvalidHandlerError):
            HandlerSet(handlers=[])

    def test_non_callable_member_rejected(self):
        with pytest.raises(InvalidHandlerError):
            HandlerSet(handlers=[lambda ctx: None, "nope"])

    def test_string_rejected(self):
        with pytest.raises(InvalidHandlerError):
            HandlerSet(handlers="handler")

    def test_sets_compare_by_identity(self):
        def handler(ctx):
            return None

        assert HandlerSet(handlers=handler) != HandlerSet(handlers=handler)


class TestCoerceHandlerSet:

    def test_handler_set_passes_through(self):
        handler_set = HandlerSet(handlers=lambda ctx: None)

        assert coerce_handler_set(handler_set) is handler_set

    def test_bare_callable(self):
        def handler(ctx):
            return None

        handler_set = coerce_handler_set(handler)

        assert handler_set.handlers == [handler]
        assert handler_set.once is False
        assert handler_set.store == {}

    def test_mapping(self):
        handler_set = coerce_handler_set({"handlers": lambda ctx: None, "once": True})

        assert handler_set.once is True
        assert len(handler_set.handlers) == 1

    def test_mapping_with_unknown_key(self):
        with pytest.raises(InvalidHandlerError, match="Unknown"):
            coerce_handler_set({"handlers": lambda ctx: None, "priority": 1})

    def test_invalid_handler_error_is_type_error(self):
        with pytest.raises(TypeError):
            coerce_handler_set(3)


# ============================================================================
# HANDLER CONTEXT
# ============================================================================

class TestHandlerContext:

    def test_next_variants_call_advance(self):
        calls = []

        def advance():
            calls.append(1)
            return "v"

        ctx = make_context(advance)

        assert ctx.next() == "v"
        assert ctx.next_sync() == "v"
        assert asyncio.run(ctx.next_async()) == "v"
        assert len(calls) == 3

    def test_next_async_returns_awaitable_for_plain_value(self):
        ctx = make_context(lambda: 5)

        pending = ctx.next_async()

        assert inspect.isawaitable(pending)
        assert asyncio.run(pending) == 5

    def test_next_async_passes_awaitable_through(self):
        async def downstream():
            return "deep"

        coro = downstream()
        ctx = make_context(lambda: coro)

        assert ctx.next_async() is coro
        assert asyncio.run(coro) == "deep"

    def test_status_callbacks(self):
        written = []
        ctx = make_context(
            set_status=lambda status, error=None: written.append((status, error)),
            get_status=lambda: StatusSnapshot(7, None),
        )

        ctx.set_status(201)

        assert written == [(201, None)]
        assert ctx.get_status() == StatusSnapshot(7, None)

    def test_remove_handler_calls_retire(self):
        retired = []
        ctx = make_context(retire=lambda: retired.append(True))

        ctx.remove_handler()

        assert retired == [True]


class TestResolve:

    def test_plain_value(self):
        assert asyncio.run(resolve(3)) == 3

    def test_nested_awaitables(self):
        async def inner():
            return "x"

        async def outer():
            return inner()

        assert asyncio.run(resolve(outer())) == "x"


class TestHandlerName:

    def test_function_name(self):
        def my_handler(ctx):
            return None

        assert handler_name(my_handler).endswith("my_handler")

    def test_callable_object(self):
        class Router:
            def __call__(self, ctx):
                return None

        assert handler_name(Router()) == "Router"
