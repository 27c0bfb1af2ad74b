"""Sinks: the inbound side of a pipe.

A sink is anything a channel can forward values into. ``Channel`` itself is a
sink; ``to(fn)`` adapts a plain function into one.
"""

from __future__ import annotations

import inspect
from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable

    from sluice.deferred import Deferred

__all__ = ['FunctionSink', 'Sink', 'to']


@runtime_checkable
class Sink[T](Protocol):
    """Protocol for accepting forwarded values.

    Type Parameters:
        T: The type of values accepted.
    """

    @abstractmethod
    def offer(self, value: T, /, *, block: bool = True) -> Deferred[None] | None:
        """Admit a value without suspending.

        Returns None when the value was accepted immediately, or a pending
        Deferred when the value was registered and waits for room. The
        Deferred is rejected if the value is later refused.

        Args:
            value: The value to admit.
            block: If False, refuse instead of registering a pending admission.

        Raises:
            ChannelClosedError: If the sink no longer accepts values.
            ChannelFullError: If the sink is full and ``block`` is False.
        """
        ...


class FunctionSink[T]:
    """Sink that calls a plain function once per value.

    There is no queueing: every offered value is handed to ``fn`` right away
    and is considered delivered once ``fn`` returns.
    """

    __slots__ = ('_fn',)

    def __init__(self, fn: Callable[[T], Any]) -> None:
        if inspect.iscoroutinefunction(fn):
            msg = 'Sink functions must be synchronous; pipe into a Channel and consume it instead'
            raise TypeError(msg)
        self._fn = fn

    def __repr__(self) -> str:
        return f'FunctionSink({self._fn!r})'

    @property
    def fn(self) -> Callable[[T], Any]:
        """The wrapped function."""
        return self._fn

    def offer(self, value: T, /, *, block: bool = True) -> None:
        result = self._fn(value)
        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            msg = f'Sink function {self._fn!r} returned an awaitable'
            raise TypeError(msg)


def to[T](fn: Callable[[T], Any]) -> FunctionSink[T]:
    """Wrap a function as a pipe sink.

    Example:
        ```python
        seen = []
        ch = Channel[int]()
        ch.pipe(sinks.to(seen.append))
        await ch.send(1)
        assert seen == [1]
        ```
    """
    return FunctionSink(fn)
