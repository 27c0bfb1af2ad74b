"""Pytest configuration and shared fixtures for sluice tests."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import pytest
import structlog
from hypothesis import HealthCheck, settings
from sluice._logging import add_log_hook, clear_log_hooks, configure_logging

if TYPE_CHECKING:
    from collections.abc import Generator

settings.register_profile(
    'sluice',
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)
settings.load_profile('sluice')


@pytest.fixture
def log_events() -> Generator[list[dict[str, Any]]]:
    """Configure DEBUG logging and capture every log entry dict.

    Restores structlog defaults and the root logger afterwards.
    """
    events: list[dict[str, Any]] = []
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level

    configure_logging(level='DEBUG', json_output=True)
    add_log_hook(events.append)
    yield events

    clear_log_hooks()
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)
