"""Channel error types: dual struct+exception for pattern matching and raise-based code."""

from __future__ import annotations

import msgspec

__all__ = [
    'ChannelClosed',
    'ChannelClosedError',
    'ChannelExhausted',
    'ChannelExhaustedError',
    'ChannelFull',
    'ChannelFullError',
    'InvalidCapacity',
    'InvalidCapacityError',
    'PipeDeliveryError',
    'PipeDeliveryFailed',
    'Timeout',
    'TimeoutError',
]


# --- Admission Errors ---


class ChannelClosed(msgspec.Struct, frozen=True, gc=False):
    """Channel has been closed - struct variant."""

    reason: str | None = None

    def to_exception(self) -> ChannelClosedError:
        """Convert to exception for raise-based code."""
        return ChannelClosedError(self.reason)


class ChannelClosedError(Exception):
    """Channel has been closed - exception variant.

    Raised by the send family on a closed channel, and carried by pending
    sends released when the channel closes.
    """

    def __init__(self, reason: str | None = None) -> None:
        self.reason = reason
        super().__init__(reason or 'Channel closed')

    def to_struct(self) -> ChannelClosed:
        """Convert to struct variant."""
        return ChannelClosed(self.reason)


class ChannelFull(msgspec.Struct, frozen=True, gc=False):
    """Channel is at capacity - struct variant."""

    capacity: int

    def to_exception(self) -> ChannelFullError:
        """Convert to exception for raise-based code."""
        return ChannelFullError(self.capacity)


class ChannelFullError(Exception):
    """Channel is at capacity - exception variant."""

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        super().__init__(f'Channel full (capacity={capacity})')

    def to_struct(self) -> ChannelFull:
        """Convert to struct variant."""
        return ChannelFull(self.capacity)


class InvalidCapacity(msgspec.Struct, frozen=True, gc=False):
    """Requested capacity is out of range - struct variant."""

    capacity: int

    def to_exception(self) -> InvalidCapacityError:
        """Convert to exception for raise-based code."""
        return InvalidCapacityError(self.capacity)


class InvalidCapacityError(ValueError):
    """Requested capacity is out of range - exception variant."""

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        super().__init__(f'Channel capacity must be >= 0, got {capacity}')

    def to_struct(self) -> InvalidCapacity:
        """Convert to struct variant."""
        return InvalidCapacity(self.capacity)


# --- Consumption Errors ---


class ChannelExhausted(msgspec.Struct, frozen=True, gc=False):
    """Channel is closed and drained - struct variant."""

    def to_exception(self) -> ChannelExhaustedError:
        """Convert to exception for raise-based code."""
        return ChannelExhaustedError()


class ChannelExhaustedError(Exception):
    """Channel is closed and drained - exception variant.

    Terminal: no value will ever be produced again.
    """

    def __init__(self) -> None:
        super().__init__('Channel exhausted')

    def to_struct(self) -> ChannelExhausted:
        """Convert to struct variant."""
        return ChannelExhausted()


# --- Pipe Errors ---


class PipeDeliveryFailed(msgspec.Struct, frozen=True, gc=False):
    """Forwarding a value to a pipe sink failed - struct variant."""

    message: str

    def to_exception(self) -> PipeDeliveryError:
        """Convert to exception for raise-based code."""
        return PipeDeliveryError(self.message)


class PipeDeliveryError(Exception):
    """Forwarding a value to a pipe sink failed - exception variant.

    The sink's own exception is available as ``__cause__``.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f'Pipe delivery failed: {message}')

    def to_struct(self) -> PipeDeliveryFailed:
        """Convert to struct variant."""
        return PipeDeliveryFailed(self.message)


# --- Timer Errors ---


class Timeout(msgspec.Struct, frozen=True, gc=False):
    """Operation timed out - struct variant."""

    seconds: float
    operation: str | None = None

    def to_exception(self) -> TimeoutError:
        """Convert to exception for raise-based code."""
        return TimeoutError(self.seconds, self.operation)


class TimeoutError(Exception):  # noqa: A001 - intentionally shadows builtin
    """Operation timed out - exception variant."""

    def __init__(self, seconds: float, operation: str | None = None) -> None:
        self.seconds = seconds
        self.operation = operation
        msg = f'Timeout after {seconds}s'
        if operation:
            msg = f'{operation}: {msg}'
        super().__init__(msg)

    def to_struct(self) -> Timeout:
        """Convert to struct variant."""
        return Timeout(self.seconds, self.operation)
