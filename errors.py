"""
errors.py
=========
Exception taxonomy for the mystery engine.

Hint exhaustion is deliberately absent: running out of hints is an expected,
recoverable condition and is signalled by ``request_hint()`` returning None.
"""

from __future__ import annotations


class MysteryError(Exception):
    """Base class for every error raised by the engine."""


class InitializationError(MysteryError):
    """No case could be supplied for a new session."""


class NoActiveSessionError(MysteryError):
    """An action was requested for a session that is unknown or already closed."""

    def __init__(self, session_id: str, reason: str = "no active game session") -> None:
        super().__init__(f"{reason}: {session_id}")
        self.session_id = session_id
        self.reason     = reason


class OracleError(MysteryError):
    """
    The narrative oracle failed or produced output the engine cannot use.

    Attributes:
        raw: The raw oracle text (if any) for diagnostics. Never shown to players.
    """

    def __init__(self, message: str, raw: str = "") -> None:
        super().__init__(message)
        self.raw = raw
