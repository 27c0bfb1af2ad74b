"""Channel: FIFO value passing with optional capacity, piping and pause/resume.

A ``Channel[T]`` hands values from producers to consumers inside one event
loop. It keeps three queues:

- the buffer of admitted values waiting for a consumer,
- pending receives (consumers that found the buffer empty),
- pending sends (producers that found a bounded buffer full).

A send first satisfies the oldest pending receive, else buffers, else waits.
While the channel is piped every admitted value is forwarded to the sink
instead. While it is paused nothing is pushed out: the sink and waiting
receivers get nothing until ``resume()``.

## Cancellation & Timeouts

Channels have no built-in timeout. Bound a wait from the outside:

    ```python
    with anyio.fail_after(5):
        value = await ch.receive()
    ```

A cancelled ``receive()`` or ``send()`` withdraws its registration, so no
value is lost or delivered to a task that stopped waiting.
"""

from __future__ import annotations

import itertools
from collections import deque
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sluice._logging import get_logger
from sluice.deferred import Deferred
from sluice.errors import (
    ChannelClosed,
    ChannelExhausted,
    ChannelFull,
    ChannelFullError,
    InvalidCapacity,
    PipeDeliveryError,
)
from sluice.sinks import Sink
from sluice.stats import ChannelStats
from sluice.stream import ChannelStream

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

__all__ = ['Channel', 'PipeLink']

_channel_ids = itertools.count(1)

_EMPTY: Any = object()


@dataclass(slots=True, frozen=True)
class PipeLink[T]:
    """A live forwarding link from a channel to a sink.

    Attributes:
        sink: Where forwarded values go. Not owned by the channel.
        on_pipe_error: Called with the exception whenever a forwarded
            delivery fails. None = failures surface to the awaiting sender,
            or are logged when nobody is awaiting.
    """

    sink: Sink[T]
    on_pipe_error: Callable[[BaseException], Any] | None = None


class Channel[T]:
    """FIFO channel between cooperative tasks.

    Args:
        capacity: Max buffered values before senders wait. None = unbounded,
            0 = rendezvous (every send waits for a receiver).

    Raises:
        InvalidCapacityError: If capacity is negative.
        TypeError: If capacity is not an int.

    Example:
        ```python
        ch = Channel[int](capacity=1)
        await ch.send(42)
        assert ch.size == 1
        assert await ch.receive() == 42
        ch.close()
        ```
    """

    __slots__ = (
        '_buffer',
        '_capacity',
        '_closed',
        '_created_at',
        '_high_watermark',
        '_link',
        '_log',
        '_paused',
        '_pipe_failures',
        '_pulls',
        '_pushes',
        '_total_received',
        '_total_sent',
    )

    def __init__(self, capacity: int | None = None) -> None:
        if capacity is not None:
            if isinstance(capacity, bool) or not isinstance(capacity, int):
                msg = f'Channel capacity must be an int or None, got {type(capacity).__name__}'
                raise TypeError(msg)
            if capacity < 0:
                raise InvalidCapacity(capacity).to_exception()

        self._capacity: int | None = capacity
        self._buffer: deque[T] = deque()
        self._pulls: deque[Deferred[T]] = deque()
        self._pushes: deque[tuple[T, Deferred[None]]] = deque()
        self._link: PipeLink[T] | None = None
        self._closed = False
        self._paused = False
        self._created_at = datetime.now(UTC)
        self._high_watermark = 0
        self._total_sent = 0
        self._total_received = 0
        self._pipe_failures = 0
        self._log = get_logger(__name__, channel=next(_channel_ids))

    def __repr__(self) -> str:
        return (
            f'Channel(size={len(self._buffer)}, capacity={self._capacity}, '
            f'closed={self._closed}, paused={self._paused}, piped={self._link is not None})'
        )

    def __len__(self) -> int:
        return len(self._buffer)

    def __aiter__(self) -> ChannelStream[T]:
        """Iterate with ``async for``; stops once the channel is closed and drained."""
        return self.stream()

    @property
    def size(self) -> int:
        """Number of buffered values."""
        return len(self._buffer)

    @property
    def capacity(self) -> int | None:
        """Configured bound (None = unbounded)."""
        return self._capacity

    @property
    def closed(self) -> bool:
        """The channel's closed state."""
        return self._closed

    @property
    def paused(self) -> bool:
        """The channel's flow-control state."""
        return self._paused

    @property
    def piped(self) -> bool:
        """True while a sink is attached."""
        return self._link is not None

    # --- Sending ---

    def offer(self, value: T, /, *, block: bool = True) -> Deferred[None] | None:
        """Admit a value without suspending (the ``Sink`` contract).

        Args:
            value: The value to admit.
            block: If False, raise instead of registering a pending send.

        Returns:
            None if the value was delivered, forwarded or buffered now.
            Otherwise a pending Deferred that resolves once the value is
            admitted (or once a waiting forwarded delivery completes).

        Raises:
            ChannelClosedError: If the channel is closed.
            ChannelFullError: If ``block`` is False and there is no room.
            PipeDeliveryError: If forwarding failed and no ``on_pipe_error``
                handler is set.
        """
        if self._closed:
            raise ChannelClosed().to_exception()

        link = self._link
        if link is not None and not self._paused:
            pending = self._forward(link, value, block=block, observed=True)
            self._total_sent += 1
            return pending

        if not self._paused and self._pulls:
            self._total_sent += 1
            self._total_received += 1
            self._pulls.popleft().resolve(value)
            return None

        if self._has_room():
            self._total_sent += 1
            self._buffer.append(value)
            self._touch_watermark()
            return None

        if not block:
            raise ChannelFull(self._capacity or 0).to_exception()

        push: Deferred[None] = Deferred()
        self._pushes.append((value, push))
        return push

    async def send(self, value: T) -> None:
        """Send a value, waiting while a bounded channel is full.

        Returns without suspending when the value can be admitted right away.

        Args:
            value: The value to send.

        Raises:
            ChannelClosedError: If the channel is closed, or closes while
                this send is waiting (the value is discarded).
            PipeDeliveryError: If the piped sink refused the value and no
                ``on_pipe_error`` handler is set.
        """
        pending = self.offer(value)
        if pending is None:
            return
        try:
            await pending
        except BaseException:
            self._withdraw_push(pending)
            raise

    def try_send(self, value: T) -> None:
        """Send a value without waiting.

        Raises:
            ChannelClosedError: If the channel is closed.
            ChannelFullError: If the channel (or, when piped, the downstream
                channel) has no room.
            PipeDeliveryError: If the piped sink refused the value and no
                ``on_pipe_error`` handler is set.
        """
        self.offer(value, block=False)

    async def send_async(self, value: Awaitable[T]) -> None:
        """Wait for ``value`` to settle, then send its result.

        A failure of ``value`` propagates unchanged and nothing is sent.
        """
        await self.send(await value)

    # --- Receiving ---

    async def receive(self) -> T:
        """Receive the oldest value, waiting while none is available.

        Returns:
            The next value.

        Raises:
            ChannelExhaustedError: If the channel is closed and drained, or
                closes while this receive is waiting.
        """
        value = _EMPTY if self._paused else self._take()
        if value is not _EMPTY:
            return value
        if self._closed and not self._buffer:
            raise ChannelExhausted().to_exception()

        pull: Deferred[T] = Deferred()
        self._pulls.append(pull)
        try:
            return await pull
        except BaseException:
            if not pull.done():
                self._pulls.remove(pull)
            elif pull.exception() is None:
                self._requeue(pull.result())
            raise

    def try_receive[D](self, default: D = None) -> T | D:  # type: ignore[assignment]
        """Receive the oldest value without waiting.

        Never raises: returns ``default`` when nothing is buffered or when the
        channel is closed and drained. Pausing does not hide buffered values
        from this call; it only holds back waiting receivers and the sink.
        """
        value = self._take()
        if value is _EMPTY:
            return default
        return value

    def stream(self) -> ChannelStream[T]:
        """Return a new lazy async view over this channel.

        Views compete for values: each value reaches exactly one pull across
        all views and direct receivers.
        """
        return ChannelStream(self)

    # --- Lifecycle ---

    def close(self) -> None:
        """Close the channel. Idempotent.

        Buffered values stay receivable. Pending sends are rejected with
        ``ChannelClosedError`` and their values discarded. Pending receives
        are rejected with ``ChannelExhaustedError`` once nothing is left to
        hand them.
        """
        if self._closed:
            return
        self._closed = True

        pushes, self._pushes = self._pushes, deque()
        for _, push in pushes:
            push.reject(ChannelClosed('channel closed while send was pending').to_exception())

        self._log.debug('channel closed', buffered=len(self._buffer), dropped_sends=len(pushes))
        self._drain()

    def pause(self) -> None:
        """Withhold outbound delivery until ``resume()``.

        Sends keep being admitted (into the buffer, under the normal capacity
        rule). Neither the sink nor a waiting ``receive()`` gets a value
        meanwhile; ``try_receive()`` still pops what is buffered.
        """
        if self._paused:
            return
        self._paused = True
        self._log.debug('channel paused', buffered=len(self._buffer))

    def resume(self) -> None:
        """Deliver, in order, everything withheld while paused."""
        if not self._paused:
            return
        self._paused = False
        self._log.debug('channel resumed', buffered=len(self._buffer))
        self._drain()

    # --- Piping ---

    def pipe(
        self,
        sink: Sink[T],
        *,
        on_pipe_error: Callable[[BaseException], Any] | None = None,
    ) -> None:
        """Forward every value to ``sink``, replacing any existing link.

        Values already buffered (and pending sends) are flushed into the sink
        immediately, oldest first, unless the channel is paused. From then on
        each sent value goes to the sink instead of the buffer; the sink's own
        admission rules apply, not this channel's capacity.

        Args:
            sink: A ``Channel`` or any ``Sink``, e.g. ``sinks.to(fn)``.
            on_pipe_error: Called with the exception whenever a forwarded
                delivery fails.

        Raises:
            TypeError: If ``sink`` does not implement ``offer()``.
            ValueError: If ``sink`` is this channel.

        Example:
            ```python
            upstream, downstream = Channel[int](), Channel[int]()
            upstream.pipe(downstream)
            await upstream.send(1)
            assert await downstream.receive() == 1
            ```
        """
        if sink is self:
            msg = 'Cannot pipe a channel into itself'
            raise ValueError(msg)
        if not isinstance(sink, Sink):
            msg = f'Pipe sink must implement offer(), got {type(sink).__name__}'
            raise TypeError(msg)

        self._link = PipeLink(sink, on_pipe_error)
        self._log.debug('pipe attached', sink=repr(sink), buffered=len(self._buffer))
        self._drain()

    def unpipe(self) -> None:
        """Detach the sink; later values are buffered for receivers again."""
        if self._link is None:
            return
        self._log.debug('pipe detached', sink=repr(self._link.sink))
        self._link = None
        self._drain()

    # --- Introspection ---

    def stats(self) -> ChannelStats:
        """Return a statistics snapshot.

        ``total_sent`` counts admitted values; ``total_received`` counts
        values handed out to receivers or to the sink.
        """
        return ChannelStats(
            size=len(self._buffer),
            capacity=self._capacity,
            closed=self._closed,
            paused=self._paused,
            piped=self._link is not None,
            pending_receives=len(self._pulls),
            pending_sends=len(self._pushes),
            high_watermark=self._high_watermark,
            total_sent=self._total_sent,
            total_received=self._total_received,
            pipe_failures=self._pipe_failures,
            created_at=self._created_at,
        )

    # --- Internals ---

    def _has_room(self) -> bool:
        return self._capacity is None or len(self._buffer) < self._capacity

    def _touch_watermark(self) -> None:
        if len(self._buffer) > self._high_watermark:
            self._high_watermark = len(self._buffer)

    def _take(self) -> Any:
        """Pop the next value, or ``_EMPTY``. Callers check the gate."""
        if self._buffer:
            value = self._buffer.popleft()
            self._total_received += 1
            self._admit_pushes()
            return value
        if self._pushes:
            # Rendezvous: hand over straight from the waiting sender
            value, push = self._pushes.popleft()
            self._total_sent += 1
            self._total_received += 1
            push.resolve(None)
            return value
        return _EMPTY

    def _admit_pushes(self) -> None:
        """Move waiting sends into free buffer slots, oldest first."""
        while self._pushes and self._has_room():
            value, push = self._pushes.popleft()
            self._buffer.append(value)
            self._total_sent += 1
            self._touch_watermark()
            push.resolve(None)

    def _withdraw_push(self, pending: Deferred[None]) -> None:
        if pending.done():
            return
        for i, (_, push) in enumerate(self._pushes):
            if push is pending:
                del self._pushes[i]
                return

    def _requeue(self, value: T) -> None:
        """Return a value taken by a receiver that was cancelled before using it.

        The oldest waiting receiver gets it if the gate is open. Otherwise it
        goes back to the front of the buffer, even past capacity: the value
        was already admitted and its sender has moved on.
        """
        if not self._paused and self._link is None and self._pulls:
            self._pulls.popleft().resolve(value)
            return
        self._buffer.appendleft(value)
        self._total_received -= 1
        self._touch_watermark()
        self._drain()

    def _drain(self) -> None:
        """Deliver whatever the current state allows, then settle closure."""
        if not self._paused:
            link = self._link
            if link is not None:
                self._flush(link)
            else:
                while self._pulls and (self._buffer or self._pushes):
                    self._pulls.popleft().resolve(self._take())
                self._admit_pushes()

        if self._closed and not self._buffer and self._pulls:
            pulls, self._pulls = self._pulls, deque()
            for pull in pulls:
                pull.reject(ChannelExhausted().to_exception())

    def _flush(self, link: PipeLink[T]) -> None:
        """Forward buffered values, then pending sends, to the sink."""
        while self._link is link and not self._paused:
            if self._buffer:
                value = self._buffer.popleft()
                self._forward(link, value, block=True, observed=False)
            elif self._pushes:
                value, push = self._pushes.popleft()
                self._total_sent += 1
                self._forward(link, value, block=True, observed=False)
                push.resolve(None)
            else:
                break

    def _forward(
        self,
        link: PipeLink[T],
        value: T,
        *,
        block: bool,
        observed: bool,
    ) -> Deferred[None] | None:
        """Hand one value to the sink.

        ``observed`` is True when a sender awaits the outcome; only then may a
        failure without handler be raised instead of logged.
        """
        try:
            pending = link.sink.offer(value, block=block)
        except Exception as exc:
            if not block and isinstance(exc, ChannelFullError):
                raise
            error = self._pipe_failed(link, exc, observed=observed)
            if error is not None:
                raise error from exc
            return None

        self._total_received += 1
        if pending is None:
            return None

        relay: Deferred[None] = Deferred()

        def settle(done: Deferred[None]) -> None:
            exc = done.exception()
            if exc is None:
                relay.resolve(None)
                return
            error = self._pipe_failed(link, exc, observed=observed)
            if error is None:
                relay.resolve(None)
            else:
                error.__cause__ = exc
                relay.reject(error)

        pending.add_done_callback(settle)
        return relay if observed else None

    def _pipe_failed(
        self,
        link: PipeLink[T],
        exc: BaseException,
        *,
        observed: bool,
    ) -> PipeDeliveryError | None:
        """Route a forwarding failure; returns the error to raise, if any."""
        self._pipe_failures += 1

        if link.on_pipe_error is not None:
            try:
                link.on_pipe_error(exc)
            except Exception:
                self._log.exception('on_pipe_error handler raised', sink=repr(link.sink))
            return None

        if observed:
            return PipeDeliveryError(str(exc) or type(exc).__name__)

        self._log.error('pipe delivery failed', sink=repr(link.sink), error=repr(exc))
        return None
