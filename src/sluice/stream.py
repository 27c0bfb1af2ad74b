"""Streaming adaptor: an async-iterator view over a channel's receive()."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sluice.errors import ChannelExhaustedError

if TYPE_CHECKING:
    from sluice.channel import Channel

__all__ = ['ChannelStream']


class ChannelStream[T]:
    """Lazy, single-pass view over a channel.

    Every step is exactly one ``receive()`` on the shared channel, so several
    streams over one channel compete for values rather than each seeing all
    of them. Nothing is pulled ahead: breaking out of ``async for`` leaves the
    remaining values in the channel.

    ``next()`` is the loud pull and raises ``ChannelExhaustedError`` once the
    channel is closed and drained; ``async for`` treats that same condition as
    the end of iteration.

    Example:
        ```python
        async for value in ch.stream():
            handle(value)
        ```
    """

    __slots__ = ('_channel',)

    def __init__(self, channel: Channel[T]) -> None:
        self._channel = channel

    def __repr__(self) -> str:
        return f'ChannelStream({self._channel!r})'

    @property
    def channel(self) -> Channel[T]:
        """The channel this view pulls from."""
        return self._channel

    async def next(self) -> T:
        """Pull one value.

        Raises:
            ChannelExhaustedError: If the channel is closed and drained.
        """
        return await self._channel.receive()

    def __aiter__(self) -> ChannelStream[T]:
        return self

    async def __anext__(self) -> T:
        try:
            return await self._channel.receive()
        except ChannelExhaustedError:
            raise StopAsyncIteration from None
