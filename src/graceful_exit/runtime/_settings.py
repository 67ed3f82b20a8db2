"""Runtime settings resolution and validation.

Purpose
-------
Normalise the keyword arguments of :func:`graceful_exit.setup` and apply the
``GRACEFUL_EXIT_*`` environment overrides before anything is wired, so
configuration mistakes surface at startup rather than at shutdown.

Contents
--------
* Environment variable names.
* :class:`RuntimeSettings` – frozen, validated configuration.
* :func:`build_runtime_settings` – coercion entry point.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping

from graceful_exit.application.ports import ProcessPort
from graceful_exit.application.use_cases import DEFAULT_TIMEOUT_MS
from graceful_exit.domain import CleanupCallback, coerce_code

TIMEOUT_ENV_VAR = "GRACEFUL_EXIT_TIMEOUT_MS"
LOG_PATH_ENV_VAR = "GRACEFUL_EXIT_LOG_PATH"
DEBUG_LABEL_ENV_VAR = "GRACEFUL_EXIT_DEBUG_LABEL"


@dataclass(slots=True, frozen=True)
class RuntimeSettings:
    """Validated configuration consumed by :func:`build_runtime`."""

    callbacks: tuple[CleanupCallback, ...] = ()
    log_path: Path | None = None
    debug_label: str | None = None
    logger: Any = None
    diagnostic_logger: Any = None
    custom_codes: Mapping[int, str] = field(default_factory=dict)
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    process: ProcessPort | None = None
    install_triggers: bool = True


def build_runtime_settings(
    *,
    callbacks: CleanupCallback | Iterable[CleanupCallback] | None = None,
    log_path: str | Path | None = None,
    debug_label: str | None = None,
    logger: Any = None,
    diagnostic_logger: Any = None,
    custom_codes: Mapping[Any, str] | None = None,
    timeout_ms: int | str = DEFAULT_TIMEOUT_MS,
    process: ProcessPort | None = None,
    install_triggers: bool = True,
) -> RuntimeSettings:
    """Return :class:`RuntimeSettings` with environment overrides applied.

    ``GRACEFUL_EXIT_TIMEOUT_MS``, ``GRACEFUL_EXIT_LOG_PATH`` and
    ``GRACEFUL_EXIT_DEBUG_LABEL`` take precedence over the arguments.

    Raises
    ------
    ValueError
        For negative or non-integer timeouts, blank labels, or non-integer
        custom codes.
    TypeError
        When a callback is not callable.

    Examples
    --------
    >>> settings = build_runtime_settings(timeout_ms="250", custom_codes={"666": "beast"})
    >>> settings.timeout_ms, dict(settings.custom_codes)
    (250, {666: 'beast'})
    """

    timeout_value = os.getenv(TIMEOUT_ENV_VAR, timeout_ms)
    path_value = os.getenv(LOG_PATH_ENV_VAR) or log_path
    label_value = os.getenv(DEBUG_LABEL_ENV_VAR, debug_label)

    return RuntimeSettings(
        callbacks=_coerce_callbacks(callbacks),
        log_path=Path(path_value).expanduser() if path_value else None,
        debug_label=_coerce_label(label_value),
        logger=logger,
        diagnostic_logger=diagnostic_logger,
        custom_codes=_coerce_custom_codes(custom_codes),
        timeout_ms=_coerce_timeout(timeout_value),
        process=process,
        install_triggers=install_triggers,
    )


def _coerce_callbacks(callbacks: CleanupCallback | Iterable[CleanupCallback] | None) -> tuple[CleanupCallback, ...]:
    if callbacks is None:
        return ()
    if callable(callbacks):
        return (callbacks,)
    resolved = tuple(callbacks)
    for candidate in resolved:
        if not callable(candidate):
            raise TypeError(f"cleanup callbacks must be callable, got {candidate!r}")
    return resolved


def _coerce_timeout(value: int | str) -> int:
    if isinstance(value, bool):
        raise ValueError("timeout_ms must be an integer number of milliseconds")
    try:
        timeout = int(str(value).strip()) if isinstance(value, str) else int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"timeout_ms must be an integer number of milliseconds, got {value!r}") from exc
    if timeout < 0:
        raise ValueError("timeout_ms must be zero or positive")
    return timeout


def _coerce_label(value: str | None) -> str | None:
    if value is None:
        return None
    if not value.strip():
        raise ValueError("debug_label must not be empty")
    return value.strip()


def _coerce_custom_codes(custom: Mapping[Any, str] | None) -> dict[int, str]:
    if not custom:
        return {}
    return {coerce_code(code): str(text) for code, text in custom.items()}


__all__ = [
    "DEBUG_LABEL_ENV_VAR",
    "LOG_PATH_ENV_VAR",
    "RuntimeSettings",
    "TIMEOUT_ENV_VAR",
    "build_runtime_settings",
]
