"""Exceptions raised by the settlement engine."""

from __future__ import annotations

from typing import Any, Optional


class SettlementError(Exception):
    """Base class for all engine errors.

    ``user_message`` carries a short text that an orchestration layer can
    surface to an organiser without exposing internal identifiers.
    """

    def __init__(self, message: str, user_message: Optional[str] = None) -> None:
        super().__init__(message)
        self.user_message = user_message or message


class ConfigurationError(SettlementError, ValueError):
    """Raised when a rule table or round configuration is invalid."""


class FixtureNotFinished(SettlementError):
    """Raised when scoring is attempted before a fixture has a final result."""

    def __init__(self, fixture_id: Any) -> None:
        super().__init__(
            f"Fixture {fixture_id!r} is not finished and cannot be scored",
            "This fixture has no final result yet.",
        )
        self.fixture_id = fixture_id


class InvalidPrediction(SettlementError, ValueError):
    """Raised when a guess does not have the shape its fixture requires."""

    def __init__(self, entry_id: Any, fixture_id: Any, reason: str) -> None:
        super().__init__(
            f"Invalid prediction by entry {entry_id!r} for fixture {fixture_id!r}: {reason}",
            f"Invalid prediction: {reason}",
        )
        self.entry_id = entry_id
        self.fixture_id = fixture_id
        self.reason = reason


class InvalidFixture(SettlementError, ValueError):
    """Raised when a finished fixture carries no usable result."""

    def __init__(self, fixture_id: Any, reason: str) -> None:
        super().__init__(
            f"Fixture {fixture_id!r} has an invalid result: {reason}",
            f"Invalid fixture result: {reason}",
        )
        self.fixture_id = fixture_id
        self.reason = reason


class UnreconciledSettlement(SettlementError):
    """Raised when payouts, fees and rollover do not add up to the gross pool."""

    def __init__(self, gross_pool: int, accounted: int) -> None:
        super().__init__(
            f"Settlement does not reconcile: gross pool {gross_pool}, accounted {accounted}",
            "Prize settlement failed a consistency check.",
        )
        self.gross_pool = gross_pool
        self.accounted = accounted


__all__ = [
    "ConfigurationError",
    "FixtureNotFinished",
    "InvalidFixture",
    "InvalidPrediction",
    "SettlementError",
    "UnreconciledSettlement",
]
