"""Structured logging for sluice.

Channel events go through structlog and end up as ordinary stdlib records,
so one ``ProcessorFormatter`` renders both sluice's entries and any foreign
stdlib logging as JSON or as console lines.

Every channel logs under ``sluice.channel`` with a ``channel`` number bound
to it, so interleaved entries from several channels can be told apart:

    {"event": "pipe delivery failed", "channel": 3, "sink": "...", "level": "error", ...}

Log hooks receive a copy of every entry. A hook that raises does not stop the
entry; its error is added to the entry under ``hook_errors``.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from collections.abc import Callable

    LogHook = Callable[[dict[str, Any]], None]

__all__ = [
    'add_log_hook',
    'clear_log_hooks',
    'configure_logging',
    'get_logger',
    'remove_log_hook',
]

_hooks: list[LogHook] = []


def _run_hooks(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    failures = []
    for hook in tuple(_hooks):
        try:
            hook(dict(event_dict))
        except Exception as exc:
            failures.append(f'{getattr(hook, "__qualname__", hook)}: {exc!r}')
    if failures:
        event_dict['hook_errors'] = failures
    return event_dict


def _enrich() -> list[Any]:
    """Processors that add context, shared by sluice and foreign records."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt='iso', utc=True),
    ]


def _render(json_output: bool) -> list[Any]:
    if json_output:
        return [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def configure_logging(level: str = 'INFO', *, json_output: bool = True) -> None:
    """Route sluice's structlog entries and stdlib logging through one stderr handler.

    Replaces the root logger's handlers. Safe to call again to switch level
    or format; existing channels pick up the new setup on their next entry.

    Args:
        level: Logging level name ("DEBUG", "INFO", ...). Unknown names mean INFO.
        json_output: Emit JSON lines (True) or console output (False).
    """
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_enrich(),
            _run_hooks,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=[*_enrich(), structlog.stdlib.ExtraAdder(), _run_hooks],
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *_render(json_output)],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.getLevelNamesMapping().get(level.upper(), logging.INFO))


def get_logger(name: str | None = None, **context: Any) -> Any:
    """Get a structlog logger over the stdlib logger ``name``.

    The logger resolves the structlog configuration on every entry, so it
    follows later ``configure_logging()`` calls. Until then entries go to
    plain stdlib logging, where only warnings and errors show by default.

    Args:
        name: Stdlib logger name. None = root logger.
        **context: Key/value pairs bound to every entry.
    """
    return structlog.wrap_logger(logging.getLogger(name), **context)


def add_log_hook(hook: LogHook) -> None:
    """Call ``hook`` with a copy of each entry once logging is configured."""
    _hooks.append(hook)


def remove_log_hook(hook: LogHook) -> None:
    """Unregister ``hook``; unknown hooks are ignored."""
    if hook in _hooks:
        _hooks.remove(hook)


def clear_log_hooks() -> None:
    """Unregister every hook."""
    _hooks.clear()
