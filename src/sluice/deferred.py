"""Deferred: single-assignment suspension handle settled from outside the awaiting task."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import aiologic

if TYPE_CHECKING:
    from collections.abc import Callable, Generator

__all__ = ['Deferred']


class Deferred[T]:
    """A value that will be produced later, exactly once.

    Created pending, then resolved with a value or rejected with an exception
    by whoever holds it. Any number of tasks may await it; done-callbacks run
    synchronously at the moment it settles.

    Example:
        ```python
        d = Deferred[int]()
        d.resolve(42)
        assert await d == 42
        ```
    """

    __slots__ = ('_callbacks', '_done', '_event', '_exception', '_result')

    def __init__(self) -> None:
        self._result: T | None = None
        self._exception: BaseException | None = None
        self._event: aiologic.Event = aiologic.Event()
        self._callbacks: list[Callable[[Deferred[T]], Any]] = []
        self._done = False

    def __repr__(self) -> str:
        if not self._done:
            state = 'pending'
        elif self._exception is not None:
            state = f'rejected={self._exception!r}'
        else:
            state = f'resolved={self._result!r}'
        return f'Deferred({state})'

    def done(self) -> bool:
        """Return True once resolved or rejected."""
        return self._done

    def resolve(self, value: T) -> bool:
        """Settle with a value.

        Returns:
            True if this call settled the deferred, False if it was already settled.
        """
        if self._done:
            return False
        self._result = value
        self._settle()
        return True

    def reject(self, exc: BaseException) -> bool:
        """Settle with an exception.

        Returns:
            True if this call settled the deferred, False if it was already settled.
        """
        if self._done:
            return False
        self._exception = exc
        self._settle()
        return True

    def _settle(self) -> None:
        self._done = True
        self._event.set()
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(self)

    def add_done_callback(self, callback: Callable[[Deferred[T]], Any]) -> None:
        """Run ``callback(self)`` when settled (immediately if already settled)."""
        if self._done:
            callback(self)
        else:
            self._callbacks.append(callback)

    def result(self) -> T:
        """Get the settled value without waiting.

        Raises:
            RuntimeError: If still pending.
            Exception: The rejection, if rejected.
        """
        if not self._done:
            msg = 'Deferred is still pending'
            raise RuntimeError(msg)
        if self._exception is not None:
            raise self._exception
        return self._result  # type: ignore[return-value]

    def exception(self) -> BaseException | None:
        """Get the rejection without waiting (None if resolved).

        Raises:
            RuntimeError: If still pending.
        """
        if not self._done:
            msg = 'Deferred is still pending'
            raise RuntimeError(msg)
        return self._exception

    async def wait(self) -> T:
        """Wait until settled and return the value or raise the rejection."""
        await self._event
        if self._exception is not None:
            raise self._exception
        return self._result  # type: ignore[return-value]

    def __await__(self) -> Generator[Any, None, T]:
        """Support await syntax."""
        return self.wait().__await__()
