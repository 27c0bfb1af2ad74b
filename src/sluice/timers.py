"""Timer helpers for racing channel operations against the clock.

Channels never time out on their own. These helpers let callers bound a wait:

    ```python
    value = await race(ch.receive(), timeout(0.1))
    ```

``anyio.fail_after()`` / ``anyio.move_on_after()`` work just as well.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Never

import anyio

from sluice.errors import Timeout

if TYPE_CHECKING:
    from collections.abc import Awaitable

__all__ = ['race', 'sleep', 'timeout']


async def sleep(seconds: float) -> None:
    """Suspend the current task for ``seconds`` (0 = yield once)."""
    await anyio.sleep(seconds)


async def timeout(seconds: float, operation: str | None = None) -> Never:
    """Sleep for ``seconds``, then raise ``TimeoutError``.

    Meant to be raced against another awaitable.

    Raises:
        TimeoutError: Always, after the delay.
    """
    await anyio.sleep(seconds)
    raise Timeout(seconds, operation).to_exception()


async def race(*awaitables: Awaitable[Any]) -> Any:
    """Return the outcome of the first awaitable to settle.

    Spawns one task per awaitable. The first to return a value or raise wins;
    all others are cancelled. A cancelled ``Channel.receive()`` withdraws its
    registration, so racing a receive never loses a value.

    Returns:
        The winner's value.

    Raises:
        ValueError: If no awaitables are given.
        Exception: The winner's exception, if it raised.

    Example:
        ```python
        with pytest.raises(TimeoutError):
            await race(empty_channel.receive(), timeout(0.05))
        ```
    """
    if not awaitables:
        msg = 'race() requires at least one awaitable'
        raise ValueError(msg)

    settled = False
    winner_value: Any = None
    winner_exc: BaseException | None = None
    winner_event = anyio.Event()

    async def run(aw: Awaitable[Any]) -> None:
        nonlocal settled, winner_value, winner_exc

        try:
            value = await aw
        except Exception as exc:
            if not settled:
                settled = True
                winner_exc = exc
                winner_event.set()
        else:
            if not settled:
                settled = True
                winner_value = value
                winner_event.set()

    async with anyio.create_task_group() as tg:
        for aw in awaitables:
            tg.start_soon(run, aw)

        await winner_event.wait()
        tg.cancel_scope.cancel()

    if winner_exc is not None:
        raise winner_exc
    return winner_value
