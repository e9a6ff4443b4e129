"""
TRW Errors

Two classes of failure exist: configuration errors, raised while matchers and
rewriters are being built, and misuse of a buffer handle after its ownership
has moved. Applying a built rewriter to any content never raises.

Author: TRW maintainers | 2026-10-18
"""

from typing import Optional


class TRWError(Exception):
    """Base class for all TRW errors."""
    pass


class ConfigurationError(TRWError, ValueError):
    """Raised when a matcher, rewriter or pipeline cannot be built."""
    pass


class RulesError(ConfigurationError):
    """Raised when a rules document is malformed."""

    def __init__(self, message: str, index: Optional[int] = None):
        self.index = index
        if index is not None:
            message = f"rule #{index + 1}: {message}"
        super().__init__(message)


class BufferReleasedError(TRWError, RuntimeError):
    """Raised when a buffer handle is used after its ownership was transferred."""
    pass
