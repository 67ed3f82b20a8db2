"""Operating-system process adapter."""

from __future__ import annotations

import logging
import os
import sys
from typing import NoReturn

from graceful_exit.application.ports import ProcessPort


class SystemProcess(ProcessPort):
    """Expose :func:`os.getpid` and exit through :func:`os._exit`.

    The exit may be requested from the deadline timer thread, a worker
    thread's excepthook, or an event-loop callback, so raising
    :class:`SystemExit` is not an option. Standard streams and logging
    handlers are flushed first.
    """

    @property
    def pid(self) -> int:
        return os.getpid()

    def exit(self, code: int) -> NoReturn:
        for stream in (sys.stdout, sys.stderr):
            try:
                stream.flush()
            except (AttributeError, OSError, ValueError):
                pass
        logging.shutdown()
        os._exit(int(code))


__all__ = ["SystemProcess"]
