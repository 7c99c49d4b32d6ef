"""Value objects shared by every component of the engine.

The engine never reads from or writes to storage; callers build these objects
from whatever backend they use and persist the results themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Hashable, Optional


class FixtureKind(str, Enum):
    """Shape of the result a fixture carries."""

    SCORE = "score"
    CHOICE = "choice"


class OutcomeTag(str, Enum):
    """Human-readable classification of a scored prediction."""

    EXACT = "exact"
    CORRECT_DIFFERENCE = "correct_difference"
    CORRECT_OUTCOME = "correct_outcome"
    WRONG = "wrong"


class EntryStatus(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Fixture:
    """One scored event: a match or a quiz question.

    Attributes
    ----------
    id : Hashable
        Identifier unique within the caller's storage.
    kind : FixtureKind
        ``SCORE`` for home/away score pairs, ``CHOICE`` for quiz questions.
    finished : bool
        ``True`` once the result is final. Only finished fixtures are scored.
    home_score, away_score : Optional[int]
        Final score for ``SCORE`` fixtures.
    correct_option : Optional[str]
        Correct answer for ``CHOICE`` fixtures.
    home_team, away_team : Optional[str]
        Team names, needed only for group standings.
    group : Optional[str]
        Group label for group-stage matches.
    """

    id: Hashable
    kind: FixtureKind = FixtureKind.SCORE
    finished: bool = False
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    correct_option: Optional[str] = None
    home_team: Optional[str] = None
    away_team: Optional[str] = None
    group: Optional[str] = None


@dataclass(frozen=True)
class Prediction:
    """One entry's guess for one fixture.

    ``points`` and ``tag`` stay ``None`` until the fixture is scored.
    """

    fixture_id: Hashable
    entry_id: Hashable
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    selected_option: Optional[str] = None
    points: Optional[int] = None
    tag: Optional[OutcomeTag] = None


@dataclass(frozen=True)
class Entry:
    """A purchased participation slot (ticket) owned by one participant."""

    id: Hashable
    participant_id: Hashable
    number: int = 1
    status: EntryStatus = EntryStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == EntryStatus.ACTIVE


def sort_key(value: Any) -> tuple:
    """Return a total-order key for identifiers of mixed types."""

    if isinstance(value, bool):
        return (1, str(value))
    if isinstance(value, (int, float)):
        return (0, value)
    return (1, str(value))


__all__ = [
    "Entry",
    "EntryStatus",
    "Fixture",
    "FixtureKind",
    "OutcomeTag",
    "Prediction",
    "sort_key",
]
