"""Logging setup and method-call tracing."""

from __future__ import annotations

import contextvars
import functools
import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)

_depth: contextvars.ContextVar[int] = contextvars.ContextVar("taxi_log_depth", default=0)


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )
    logging.getLogger("taxi").setLevel(level)


def _short(value: object, limit: int = 80) -> str:
    if isinstance(value, (bytes, bytearray)):
        return f"<{len(value)} bytes>"
    text = repr(value)
    return text if len(text) <= limit else text[: limit - 3] + "..."


def log_method_calls(method):
    """Trace a coroutine method at DEBUG level.

    Emits a Start event before the call and an End or Err event afterwards,
    indented by the current call depth. Errors are re-raised untouched.
    """
    logger = logging.getLogger(method.__module__)

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        if not logger.isEnabledFor(logging.DEBUG):
            return await method(self, *args, **kwargs)

        depth = _depth.get()
        token = _depth.set(depth + 1)
        indent = "  " * depth
        target = type(self).__name__
        logger.debug("%s[Start] %s.%s(%s)", indent, target, method.__name__,
                     ", ".join(_short(a) for a in args))
        try:
            result = await method(self, *args, **kwargs)
        except Exception as e:
            logger.debug("%s[Err] %s.%s: %s", indent, target, method.__name__, e)
            raise
        finally:
            _depth.reset(token)
        logger.debug("%s[End] %s.%s -> %s", indent, target, method.__name__, _short(result))
        return result

    return wrapper
