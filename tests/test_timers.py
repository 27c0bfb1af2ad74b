"""Tests for sleep(), timeout() and race()."""

from __future__ import annotations

import anyio
import pytest
import sluice
from sluice import Channel, race, sleep, timeout


class TestTimeout:
    """Tests for timeout()."""

    async def test_timeout_raises_after_delay(self) -> None:
        with pytest.raises(sluice.TimeoutError) as exc_info:
            await timeout(0.01, 'receive')
        assert exc_info.value.seconds == 0.01
        assert exc_info.value.operation == 'receive'
        assert str(exc_info.value) == 'receive: Timeout after 0.01s'

    async def test_sleep_returns_none(self) -> None:
        assert await sleep(0) is None


class TestRace:
    """Tests for race()."""

    async def test_requires_awaitables(self) -> None:
        with pytest.raises(ValueError, match='at least one'):
            await race()

    async def test_first_value_wins(self) -> None:
        ch = Channel()
        await ch.send(5)
        assert await race(ch.receive(), timeout(1)) == 5

    async def test_timeout_wins_on_empty_channel(self) -> None:
        ch = Channel()
        with pytest.raises(sluice.TimeoutError):
            await race(ch.receive(), timeout(0.05))
        assert ch.stats().pending_receives == 0

    async def test_no_value_lost_after_timed_out_receive(self) -> None:
        ch = Channel()
        with pytest.raises(sluice.TimeoutError):
            await race(ch.receive(), timeout(0.05))
        await ch.send('late')
        assert ch.try_receive() == 'late'

    async def test_losers_are_cancelled(self) -> None:
        cancelled = False

        async def slow() -> None:
            nonlocal cancelled
            try:
                await anyio.sleep(10)
            except anyio.get_cancelled_exc_class():
                cancelled = True
                raise

        async def fast() -> str:
            return 'done'

        assert await race(slow(), fast()) == 'done'
        assert cancelled is True

    async def test_first_exception_wins(self) -> None:
        async def fail() -> None:
            raise KeyError('first')

        with pytest.raises(KeyError):
            await race(fail(), anyio.sleep(10))

    async def test_timed_out_send_is_withdrawn(self) -> None:
        ch = Channel(0)
        with pytest.raises(sluice.TimeoutError):
            await race(ch.send(1), timeout(0.05))
        assert ch.stats().pending_sends == 0
        assert ch.try_receive() is None
