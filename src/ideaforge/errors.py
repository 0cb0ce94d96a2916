"""Exception types raised across the interview and generation stages."""

from __future__ import annotations

from typing import Optional


class IdeaForgeError(Exception):
    """Base class for all IdeaForge errors."""


class GatewayError(IdeaForgeError):
    """The language model gateway was unreachable or returned a failure."""


class MalformedOutputError(GatewayError):
    """The gateway answered, but no usable structured result could be parsed."""


class GenerationError(IdeaForgeError):
    """A document generation stage failed and the run was aborted."""

    def __init__(self, step: str, message: Optional[str] = None):
        self.step = step
        super().__init__(message or f"Generation failed at the {step} stage")


class FormValidationError(IdeaForgeError):
    """Submitted answers do not satisfy the pending form."""


class SessionStateError(IdeaForgeError):
    """The requested operation is not allowed in the session's current state."""


class SessionBusyError(SessionStateError):
    """Another trigger is already in flight for this manager."""
