"""Tests for docquery.execution.bridge.

Covers the blocking bridge from plain threads and from inside a running
event loop, plus exception-group unwrapping.
"""

from __future__ import annotations

import asyncio
import contextvars
import threading

import pytest

from docquery.execution.bridge import await_unwrapped, run_sync, unwrap_exception

_request_id: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="unset")


class SearchBoom(Exception):
    pass


async def _value(value: int) -> int:
    await asyncio.sleep(0)
    return value


async def _raise(exc: BaseException) -> None:
    await asyncio.sleep(0)
    raise exc


# ---------------------------------------------------------------------------
# unwrap_exception
# ---------------------------------------------------------------------------


class TestUnwrapException:
    def test_plain_exception_unchanged(self) -> None:
        exc = SearchBoom()
        assert unwrap_exception(exc) is exc

    def test_single_member_group_unwrapped(self) -> None:
        exc = SearchBoom()
        assert unwrap_exception(ExceptionGroup("wrapped", [exc])) is exc

    def test_nested_single_member_groups_unwrapped(self) -> None:
        exc = SearchBoom()
        group = ExceptionGroup("outer", [ExceptionGroup("inner", [exc])])
        assert unwrap_exception(group) is exc

    def test_multi_member_group_kept(self) -> None:
        group = ExceptionGroup("many", [SearchBoom(), ValueError()])
        assert unwrap_exception(group) is group


class TestAwaitUnwrapped:
    @pytest.mark.asyncio
    async def test_task_group_failure_surfaces_original(self) -> None:
        exc = SearchBoom("search failed")

        async def _grouped() -> None:
            async with asyncio.TaskGroup() as group:
                group.create_task(_raise(exc))

        with pytest.raises(SearchBoom) as info:
            await await_unwrapped(_grouped())
        assert info.value is exc

    @pytest.mark.asyncio
    async def test_result_passed_through(self) -> None:
        assert await await_unwrapped(_value(7)) == 7


# ---------------------------------------------------------------------------
# run_sync
# ---------------------------------------------------------------------------


class TestRunSync:
    """Blocking execution of coroutines."""

    def test_returns_result_without_running_loop(self) -> None:
        assert run_sync(lambda: _value(3)) == 3

    def test_raises_same_exception_object(self) -> None:
        exc = SearchBoom("original")
        with pytest.raises(SearchBoom) as info:
            run_sync(lambda: _raise(exc))
        assert info.value is exc

    def test_usable_from_worker_thread(self) -> None:
        results: list[int] = []
        thread = threading.Thread(target=lambda: results.append(run_sync(lambda: _value(5))))
        thread.start()
        thread.join(timeout=5)
        assert results == [5]

    @pytest.mark.asyncio
    async def test_does_not_deadlock_inside_running_loop(self) -> None:
        assert run_sync(lambda: _value(11)) == 11

    @pytest.mark.asyncio
    async def test_exception_identity_inside_running_loop(self) -> None:
        exc = SearchBoom("inside loop")
        with pytest.raises(SearchBoom) as info:
            run_sync(lambda: _raise(exc))
        assert info.value is exc

    @pytest.mark.asyncio
    async def test_context_variables_visible_on_worker_loop(self) -> None:
        token = _request_id.set("req-42")
        try:

            async def _read() -> str:
                return _request_id.get()

            assert run_sync(_read) == "req-42"
        finally:
            _request_id.reset(token)
