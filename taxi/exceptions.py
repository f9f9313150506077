"""Error types raised by the screenshot and comparison pipeline.

Gateway failures (selenium / playwright errors) are never wrapped; they reach
the caller unmodified. Everything raised by taxi itself derives from TaxiError.
"""

from __future__ import annotations

from typing import Any, Optional


class TaxiError(Exception):
    """Base exception for all errors raised by taxi."""

    pass


class ConfigurationError(TaxiError):
    """Raised when settings make a capture impossible.

    Typical causes are a ``max_image_resolution`` smaller than the document
    width, viewport padding that leaves no capturable area, or an unknown
    comparison tool name. Raised before the browser document is touched.
    """

    pass


class InvalidAreaError(TaxiError, ValueError):
    """Raised when a capture area has a negative width or height."""

    pass


class ScriptError(TaxiError):
    """Raised when a browser script returns data that breaks its contract."""

    def __init__(self, script_name: str, message: str):
        super().__init__(f"{script_name}: {message}")
        self.script_name = script_name


class ImageDecodeError(TaxiError):
    """Raised when a captured or stored buffer cannot be decoded as an image."""

    pass


class ComparisonFailure(TaxiError, AssertionError):
    """Raised when a screenshot differs from its approved baseline.

    Subclasses ``AssertionError`` so test runners report it as a failed
    assertion rather than an infrastructure error.
    """

    def __init__(self, title: str, result: Optional[Any] = None):
        super().__init__(f"Screenshots are different for {title}")
        self.title = title
        self.result = result


class WaitTimeoutError(TaxiError, TimeoutError):
    """Raised by ``wait_until`` when the condition did not hold in time."""

    pass
