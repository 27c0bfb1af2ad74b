"""Channel statistics snapshot."""

from __future__ import annotations

from datetime import datetime

import msgspec

from sluice.types import Capacity, NonNegativeInt

__all__ = ['ChannelStats']


class ChannelStats(msgspec.Struct, frozen=True, gc=False):
    """Statistics snapshot for a channel."""

    size: NonNegativeInt
    capacity: Capacity | None
    closed: bool
    paused: bool
    piped: bool
    pending_receives: NonNegativeInt
    pending_sends: NonNegativeInt
    high_watermark: NonNegativeInt
    total_sent: NonNegativeInt
    total_received: NonNegativeInt
    pipe_failures: NonNegativeInt
    created_at: datetime
