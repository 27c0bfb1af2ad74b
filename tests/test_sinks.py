"""Tests for the Sink protocol and function sinks."""

from __future__ import annotations

from unittest.mock import Mock

import pytest
from sluice import Channel, FunctionSink, Sink, sinks


class TestSinkProtocol:
    """Tests for runtime Sink checks."""

    def test_channel_is_a_sink(self) -> None:
        assert isinstance(Channel(), Sink)

    def test_function_sink_is_a_sink(self) -> None:
        assert isinstance(sinks.to(print), Sink)

    def test_plain_callable_is_not_a_sink(self) -> None:
        assert not isinstance(print, Sink)

    async def test_custom_sink_can_be_piped(self) -> None:
        class Collector:
            def __init__(self) -> None:
                self.items: list[int] = []

            def offer(self, value: int, /, *, block: bool = True) -> None:
                self.items.append(value)

        collector = Collector()
        ch = Channel()
        ch.pipe(collector)
        await ch.send(1)
        await ch.send(2)
        assert collector.items == [1, 2]


class TestFunctionSink:
    """Tests for sinks.to()."""

    def test_to_wraps_function(self) -> None:
        fn = Mock(return_value=None)
        sink = sinks.to(fn)
        assert isinstance(sink, FunctionSink)
        assert sink.fn is fn

    def test_offer_calls_function(self) -> None:
        fn = Mock(return_value=None)
        assert sinks.to(fn).offer('x') is None
        fn.assert_called_once_with('x')

    def test_return_value_is_ignored(self) -> None:
        assert sinks.to(lambda v: v * 2).offer(3) is None

    def test_coroutine_function_rejected(self) -> None:
        async def handler(value: int) -> None:
            pass

        with pytest.raises(TypeError, match='synchronous'):
            sinks.to(handler)

    def test_returned_awaitable_rejected(self) -> None:
        async def handler(value: int) -> None:
            pass

        sink = sinks.to(lambda v: handler(v))
        with pytest.raises(TypeError, match='awaitable'):
            sink.offer(1)

    async def test_returned_awaitable_routes_to_pipe_handler(self) -> None:
        async def handler(value: int) -> None:
            pass

        on_error = Mock()
        ch = Channel()
        ch.pipe(sinks.to(lambda v: handler(v)), on_pipe_error=on_error)
        await ch.send(1)
        on_error.assert_called_once()
        assert isinstance(on_error.call_args.args[0], TypeError)

    def test_function_exception_propagates_from_offer(self) -> None:
        sink = sinks.to(Mock(side_effect=RuntimeError('boom')))
        with pytest.raises(RuntimeError, match='boom'):
            sink.offer(1)
