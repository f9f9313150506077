"""Small helpers shared by the capture pipeline."""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
import re
import time
from typing import Any, Awaitable, Callable, Union

from taxi.exceptions import ScriptError, WaitTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_WAIT_INTERVAL_MS = 500

Condition = Callable[[], Union[Any, Awaitable[Any]]]


async def sleep(delay_ms: int) -> None:
    if delay_ms > 0:
        await asyncio.sleep(delay_ms / 1000)


async def wait_until(
    condition: Condition,
    timeout_ms: int,
    interval_ms: int = DEFAULT_WAIT_INTERVAL_MS,
    message: str | None = None,
    abort_on_timeout: bool = True,
) -> bool:
    """Poll ``condition`` every ``interval_ms`` until it is truthy.

    Returns True once the condition holds. When ``timeout_ms`` elapses first,
    raises WaitTimeoutError if ``abort_on_timeout`` is set, else returns False.
    The condition may be a plain callable or return an awaitable.
    """
    deadline = time.monotonic() + timeout_ms / 1000
    while True:
        result = condition()
        if inspect.isawaitable(result):
            result = await result
        if result:
            return True
        if time.monotonic() >= deadline:
            if abort_on_timeout:
                raise WaitTimeoutError(message or "Timeout waiting for an event.")
            logger.debug("wait_until gave up after %dms", timeout_ms)
            return False
        await sleep(interval_ms)


def decode_json_object(script_name: str, value: Any) -> dict:
    """Decode a script result that is either a JSON string or an object."""
    if isinstance(value, (str, bytes)):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise ScriptError(script_name, f"result is not valid JSON: {e}") from e
    if not isinstance(value, dict):
        raise ScriptError(script_name, f"expected a JSON object, got {type(value).__name__}")
    return value


def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s\s+", " ", text.strip())


def filename_safe(text: str) -> str:
    """Turn free text into a string usable as a single path component."""
    return re.sub(r"[^A-Za-z0-9_.\-]+", "-", collapse_whitespace(text)).strip("-.") or "_"
