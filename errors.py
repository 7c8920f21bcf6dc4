"""
Exception hierarchy for the stitcher.

Everything raised on purpose derives from StitchError so callers can
catch one class around a whole save_stitch() call.
"""


class StitchError(Exception):
    """Base exception for all stitching failures."""


class InvalidViewport(StitchError):
    """The page reported a zero, negative, or unreadable viewport height."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Invalid viewport height: {value!r}")
        self.value = value


class CaptureFailure(StitchError):
    """The browser could not produce an image for one slice."""

    def __init__(self, index: int, reason: str = "") -> None:
        message = f"Failed to capture slice {index}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.index = index


class RenderTimeout(StitchError):
    """In-page rendering did not produce a result before the wait ceiling."""

    def __init__(self, timeout: float) -> None:
        super().__init__(
            f"Could not generate screenshot blob within {timeout:g} seconds"
        )
        self.timeout = timeout
