# app/core/logging.py
from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_HANDLER_NAME = "backoffice-stream"


def configure_logging(level: str | int = "INFO") -> None:
    """
    Attach a single stream handler to the "app" logger.
    Safe to call more than once (reloads, tests).
    """
    root = logging.getLogger("app")
    root.setLevel(level)

    for h in root.handlers:
        if h.get_name() == _HANDLER_NAME:
            h.setLevel(level)
            return

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler.setLevel(level)
    root.addHandler(handler)
