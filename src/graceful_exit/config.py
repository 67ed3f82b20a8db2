"""Optional ``.env`` loading for the CLI and host applications.

Purpose
-------
Let operators keep ``GRACEFUL_EXIT_*`` settings in a project-local ``.env``
file. Real environment variables always win over file entries.

Contents
--------
* :data:`DOTENV_ENV_VAR` – toggle variable consulted when no CLI flag is given.
* :func:`should_use_dotenv` – flag/env precedence.
* :func:`enable_dotenv` – locate and load the nearest ``.env`` once.
"""

from __future__ import annotations

import logging
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

LOGGER = logging.getLogger(__name__)

DOTENV_ENV_VAR = "GRACEFUL_EXIT_USE_DOTENV"

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off", ""})

_LOADED_PATH: Path | None = None


def should_use_dotenv(*, explicit: bool | None = None, env_value: str | None = None) -> bool:
    """Decide whether ``.env`` should be loaded.

    An explicit CLI flag wins; otherwise the toggle variable decides.

    Examples
    --------
    >>> should_use_dotenv(explicit=False, env_value="1")
    False
    >>> should_use_dotenv(env_value="yes")
    True
    >>> should_use_dotenv()
    False
    """

    if explicit is not None:
        return explicit
    if env_value is None:
        return False
    normalised = env_value.strip().lower()
    if normalised in _TRUTHY:
        return True
    if normalised not in _FALSY:
        LOGGER.warning("Ignoring unrecognised %s value %r", DOTENV_ENV_VAR, env_value)
    return False


def enable_dotenv() -> Path | None:
    """Load the nearest ``.env`` walking up from the working directory.

    Returns the resolved path of the loaded file, or ``None`` when none exists.
    Existing environment variables are never overridden.
    """

    global _LOADED_PATH
    found = find_dotenv(usecwd=True)
    if not found:
        LOGGER.debug("No .env file found above %s", Path.cwd())
        return None
    candidate = Path(found).resolve()
    if _LOADED_PATH == candidate:
        return candidate
    load_dotenv(candidate, override=False)
    _LOADED_PATH = candidate
    LOGGER.debug("Loaded environment from %s", candidate)
    return candidate


def _reset_dotenv_state_for_testing() -> None:
    """Forget the cached ``.env`` path so tests can load again."""

    global _LOADED_PATH
    _LOADED_PATH = None


__all__ = ["DOTENV_ENV_VAR", "enable_dotenv", "should_use_dotenv"]
