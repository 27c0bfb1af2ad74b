"""Runtime configuration: RuntimeConfig and initialization."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from sluice._logging import configure_logging

__all__ = [
    'RuntimeConfig',
    'get_config',
    'init',
]

_LOG_FORMATS = ('json', 'console')


@dataclass(frozen=True)
class RuntimeConfig:
    """Configuration for sluice.

    Attributes:
        log_level: Logging level (e.g., "DEBUG", "INFO"). None = leave logging untouched.
        json_logs: Render logs as JSON (True) or colored console lines (False).
    """

    log_level: str | None = None
    json_logs: bool = True


# Global runtime configuration (set by init())
_config: RuntimeConfig | None = None


def _detect_log_level() -> str | None:
    """Read the SLUICE_LOG_LEVEL environment variable (None if unset or empty)."""
    level = os.environ.get('SLUICE_LOG_LEVEL', '').strip()
    return level.upper() or None


def _detect_json_logs() -> bool:
    """Read the SLUICE_LOG_FORMAT environment variable.

    Priority:
    1. "json" -> True, "console" -> False (case-insensitive)
    2. Unknown values log a warning and fall back to JSON
    3. Default to JSON
    """
    fmt = os.environ.get('SLUICE_LOG_FORMAT', '').lower()
    if not fmt:
        return True
    if fmt not in _LOG_FORMATS:
        logging.warning("Unknown SLUICE_LOG_FORMAT value '%s', defaulting to json", fmt)
        return True
    return fmt == 'json'


def init(
    log_level: str | None = None,
    json_logs: bool | None = None,
) -> RuntimeConfig:
    """Initialize sluice with the specified configuration.

    Unset arguments are resolved from the environment.

    Args:
        log_level: Logging level ("DEBUG", "INFO", etc.). None = SLUICE_LOG_LEVEL or silent.
        json_logs: JSON (True) or console (False) output. None = SLUICE_LOG_FORMAT or JSON.

    Returns:
        The RuntimeConfig that was set.

    Example:
        ```python
        import sluice

        sluice.init(log_level='DEBUG', json_logs=False)
        ```
    """
    global _config  # noqa: PLW0603

    resolved_level = log_level.upper() if log_level is not None else _detect_log_level()
    resolved_json = json_logs if json_logs is not None else _detect_json_logs()

    _config = RuntimeConfig(log_level=resolved_level, json_logs=resolved_json)

    if resolved_level is not None:
        configure_logging(resolved_level, json_output=resolved_json)

    return _config


def get_config() -> RuntimeConfig:
    """Get the current runtime configuration.

    Raises:
        RuntimeError: If init() has not been called.
    """
    if _config is None:
        msg = 'sluice not initialized. Call sluice.init() first.'
        raise RuntimeError(msg)
    return _config
