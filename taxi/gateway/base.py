"""The two browser capabilities the screenshot pipeline depends on.

A gateway runs a script in the page and takes a raw screenshot. The pipeline
is written once against the awaitable ``Gateway`` protocol; blocking drivers
implement ``BlockingGateway`` and are lifted with ``ImmediateGateway``, whose
coroutines complete without ever suspending.
"""

from __future__ import annotations

import inspect
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Gateway(Protocol):
    async def execute(self, script: str, args: list[Any] | None = None) -> Any:
        """Run ``script`` in the page with ``args`` and return its JSON result."""
        ...

    async def take_raw_screenshot(self) -> bytes:
        """Return the browser's native screenshot as PNG bytes."""
        ...


@runtime_checkable
class BlockingGateway(Protocol):
    def execute(self, script: str, args: list[Any] | None = None) -> Any:
        ...

    def take_raw_screenshot(self) -> bytes:
        ...


class ImmediateGateway:
    """Awaitable view of a blocking gateway; every call resolves immediately."""

    def __init__(self, gateway: BlockingGateway):
        self.wrapped = gateway

    async def execute(self, script: str, args: list[Any] | None = None) -> Any:
        return self.wrapped.execute(script, args or [])

    async def take_raw_screenshot(self) -> bytes:
        return self.wrapped.take_raw_screenshot()


def as_gateway(gateway: Gateway | BlockingGateway) -> Gateway:
    """Return ``gateway`` as an awaitable Gateway, wrapping blocking ones."""
    if inspect.iscoroutinefunction(getattr(gateway, "execute", None)):
        return gateway  # type: ignore[return-value]
    return ImmediateGateway(gateway)  # type: ignore[arg-type]
