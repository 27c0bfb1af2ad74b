"""sluice: cooperative in-process channels with piping and flow control.

Provides a typed FIFO ``Channel[T]`` for passing values between async tasks:
- optional capacity with backpressure (0 = rendezvous)
- non-blocking ``try_send`` / ``try_receive``
- ``pipe()`` into another channel or a function sink, with ``on_pipe_error``
- ``pause()`` / ``resume()`` flow control
- ``stream()`` async iteration with competing-consumer semantics

Flat imports (preferred):
    from sluice import Channel, sinks, race, timeout

Example:
    ```python
    import anyio
    from sluice import Channel

    async def main():
        ch = Channel[int](capacity=8)
        await ch.send(1)
        ch.close()
        async for value in ch:
            print(value)

    anyio.run(main)
    ```
"""

from sluice import sinks
from sluice._config import RuntimeConfig, get_config, init
from sluice._logging import configure_logging, get_logger
from sluice.channel import Channel, PipeLink
from sluice.deferred import Deferred
from sluice.errors import (
    ChannelClosed,
    ChannelClosedError,
    ChannelExhausted,
    ChannelExhaustedError,
    ChannelFull,
    ChannelFullError,
    InvalidCapacity,
    InvalidCapacityError,
    PipeDeliveryError,
    PipeDeliveryFailed,
    Timeout,
    TimeoutError,
)
from sluice.sinks import FunctionSink, Sink
from sluice.stats import ChannelStats
from sluice.stream import ChannelStream
from sluice.timers import race, sleep, timeout

__all__ = [
    # Core
    'Channel',
    # Errors - struct variants
    'ChannelClosed',
    # Errors - exception variants
    'ChannelClosedError',
    'ChannelExhausted',
    'ChannelExhaustedError',
    'ChannelFull',
    'ChannelFullError',
    'ChannelStats',
    'ChannelStream',
    'Deferred',
    'FunctionSink',
    'InvalidCapacity',
    'InvalidCapacityError',
    'PipeDeliveryError',
    'PipeDeliveryFailed',
    'PipeLink',
    # Config
    'RuntimeConfig',
    'Sink',
    'Timeout',
    'TimeoutError',
    'configure_logging',
    'get_config',
    'get_logger',
    'init',
    # Timers
    'race',
    'sinks',
    'sleep',
    'timeout',
]
