"""
Base exceptions for user-facing errors.

All expected errors that should be displayed to the user
as clean messages (without stack traces) must inherit from SsiUserError.

Directive-level failures are NOT errors in this sense: they degrade to
an empty string or the error placeholder and never leave the expander.
"""

from __future__ import annotations


class SsiUserError(Exception):
    """
    Base class for all user-facing errors in the SSI engine.

    These errors indicate problems that the user can fix:
    configuration issues, unreadable documents, bad CLI arguments, etc.
    """
    pass


class ForbiddenError(SsiUserError):
    """
    The top-level document cannot be stat'ed, read or opened.

    Maps to a 403 outcome at the host boundary.
    """

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        msg = f"Forbidden: {path}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


__all__ = ["SsiUserError", "ForbiddenError"]
