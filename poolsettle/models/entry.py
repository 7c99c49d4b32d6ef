"""Entries (tickets) and the predictions they hold."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, func, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from ..values import Entry as EntryValue
from ..values import EntryStatus, OutcomeTag
from ..values import Prediction as PredictionValue
from .base import ID_TYPE, Base

if TYPE_CHECKING:
    from .fixture import Fixture
    from .round import Round


class Entry(Base):
    """One purchased participation slot of a participant in a round."""

    __tablename__ = "entries"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, index=True, autoincrement=True)
    """Primary key."""

    round_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("rounds.id", ondelete="CASCADE"), nullable=False, index=True
    )
    """Round the entry was bought for."""

    participant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    """External user identifier; user accounts live outside this schema."""

    entry_number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    """Sequential per participant and round, starting at 1."""

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    """``active``, ``pending`` (awaiting payment approval) or ``cancelled``."""

    total_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    """Last aggregated total, refreshed after every scoring run."""

    exact_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    """Exact predictions counted in ``total_points``."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    round: Mapped["Round"] = relationship(back_populates="entries")
    predictions: Mapped[list["Prediction"]] = relationship(
        back_populates="entry", cascade="all, delete-orphan"
    )

    __table_args__ = (
        UniqueConstraint(
            "round_id", "participant_id", "entry_number", name="uq_entry_per_participant"
        ),
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<Entry(id={self.id}, round_id={self.round_id}, participant={self.participant_id}, "
            f"number={self.entry_number}, total={self.total_points})>"
        )

    def to_value(self) -> EntryValue:
        return EntryValue(
            id=self.id,
            participant_id=self.participant_id,
            number=self.entry_number,
            status=EntryStatus(self.status),
        )

    @classmethod
    def next_number(cls, session: Session, round_id: int, participant_id: str) -> int:
        """Entry number the participant's next entry in ``round_id`` gets."""

        current = session.scalar(
            select(func.max(cls.entry_number)).where(
                cls.round_id == round_id, cls.participant_id == participant_id
            )
        )
        return (current or 0) + 1


class Prediction(Base):
    """An entry's guess for one fixture, with its computed points."""

    __tablename__ = "predictions"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, index=True, autoincrement=True)
    fixture_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("fixtures.id", ondelete="CASCADE"), nullable=False, index=True
    )
    entry_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("entries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    home_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    away_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    selected_option: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    points: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    outcome_tag: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    scored_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    fixture: Mapped["Fixture"] = relationship(back_populates="predictions")
    entry: Mapped["Entry"] = relationship(back_populates="predictions")

    __table_args__ = (
        UniqueConstraint("fixture_id", "entry_id", name="uq_prediction_per_entry"),
    )

    def to_value(self) -> PredictionValue:
        return PredictionValue(
            fixture_id=self.fixture_id,
            entry_id=self.entry_id,
            home_score=self.home_score,
            away_score=self.away_score,
            selected_option=self.selected_option,
            points=self.points,
            tag=OutcomeTag(self.outcome_tag) if self.outcome_tag else None,
        )

    def apply_score(self, value: PredictionValue) -> None:
        """Overwrite points and tag with a freshly scored value."""

        self.points = value.points
        self.outcome_tag = value.tag.value if value.tag is not None else None
        self.scored_at = datetime.now(timezone.utc)
