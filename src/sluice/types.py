"""Constrained type aliases for channel metadata.

The constraints are enforced by msgspec whenever a struct using them is
decoded or converted, so a stats snapshot read back from JSON cannot carry
a negative counter or capacity.

Usage:
    >>> import msgspec
    >>> from sluice.stats import ChannelStats
    >>> raw = msgspec.json.encode(channel.stats())
    >>> msgspec.json.decode(raw, type=ChannelStats)
"""

from __future__ import annotations

from typing import Annotated

import msgspec

__all__ = [
    'Capacity',
    'NonNegativeInt',
]

NonNegativeInt = Annotated[int, msgspec.Meta(ge=0)]
"""Integer greater than or equal to zero.

Valid: 0, 1, 100
Invalid: -1
"""

Capacity = Annotated[int, msgspec.Meta(ge=0)]
"""Channel buffer capacity.

Zero is a rendezvous channel: every send waits for a receiver.
Unbounded channels use ``None`` rather than a sentinel integer.
"""
