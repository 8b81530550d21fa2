"""Caller-location prefix for log lines."""

from __future__ import annotations

import os
import sys
import threading


def caller_prefix(skip: int = 0) -> str:
    """Return ``"reqid-<thread> <file> <line> : "`` for a calling frame.

    ``skip=0`` names the function that called ``caller_prefix``; each extra
    level walks one frame further up the stack.
    """
    reqid = f"reqid-{threading.get_ident()} "
    try:
        frame = sys._getframe(skip + 1)
    except ValueError:
        return reqid + " ??? "
    return f"{reqid}{os.path.basename(frame.f_code.co_filename)} {frame.f_lineno} : "
