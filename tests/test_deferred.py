"""Tests for Deferred settle-once semantics and callbacks."""

from __future__ import annotations

import asyncio

import pytest
from sluice import Deferred


class TestDeferredSettle:
    """Tests for resolve()/reject()."""

    async def test_resolve_then_await(self) -> None:
        d: Deferred[int] = Deferred()
        assert d.resolve(42) is True
        assert d.done()
        assert await d == 42

    async def test_reject_then_await(self) -> None:
        d: Deferred[int] = Deferred()
        d.reject(ValueError('nope'))
        with pytest.raises(ValueError, match='nope'):
            await d

    def test_settles_only_once(self) -> None:
        d: Deferred[int] = Deferred()
        assert d.resolve(1) is True
        assert d.resolve(2) is False
        assert d.reject(RuntimeError()) is False
        assert d.result() == 1
        assert d.exception() is None

    def test_pending_access_raises(self) -> None:
        d: Deferred[int] = Deferred()
        with pytest.raises(RuntimeError, match='pending'):
            d.result()
        with pytest.raises(RuntimeError, match='pending'):
            d.exception()

    def test_result_raises_rejection(self) -> None:
        d: Deferred[int] = Deferred()
        error = KeyError('k')
        d.reject(error)
        assert d.exception() is error
        with pytest.raises(KeyError):
            d.result()

    async def test_waiter_wakes_on_resolve(self) -> None:
        d: Deferred[str] = Deferred()
        waiter = asyncio.create_task(d.wait())
        await asyncio.sleep(0)
        assert not waiter.done()
        d.resolve('ok')
        assert await waiter == 'ok'

    async def test_multiple_waiters(self) -> None:
        d: Deferred[int] = Deferred()
        waiters = [asyncio.create_task(d.wait()) for _ in range(3)]
        await asyncio.sleep(0)
        d.resolve(7)
        assert await asyncio.gather(*waiters) == [7, 7, 7]

    def test_repr(self) -> None:
        d: Deferred[int] = Deferred()
        assert repr(d) == 'Deferred(pending)'
        d.resolve(3)
        assert repr(d) == 'Deferred(resolved=3)'


class TestDeferredCallbacks:
    """Tests for add_done_callback()."""

    def test_callback_runs_on_settle(self) -> None:
        d: Deferred[int] = Deferred()
        seen: list[Deferred[int]] = []
        d.add_done_callback(seen.append)
        assert seen == []
        d.resolve(1)
        assert seen == [d]

    def test_callback_runs_immediately_when_settled(self) -> None:
        d: Deferred[int] = Deferred()
        d.reject(RuntimeError('x'))
        seen: list[Deferred[int]] = []
        d.add_done_callback(seen.append)
        assert seen == [d]

    def test_callbacks_run_in_registration_order_once(self) -> None:
        d: Deferred[int] = Deferred()
        order: list[str] = []
        d.add_done_callback(lambda _: order.append('first'))
        d.add_done_callback(lambda _: order.append('second'))
        d.resolve(0)
        d.resolve(1)
        assert order == ['first', 'second']
