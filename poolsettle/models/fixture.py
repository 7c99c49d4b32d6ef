from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..values import Fixture as FixtureValue
from ..values import FixtureKind
from .base import ID_TYPE, Base

if TYPE_CHECKING:
    from .entry import Prediction
    from .round import Round


class Fixture(Base):
    """A match or quiz question belonging to a round."""

    __tablename__ = "fixtures"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, index=True, autoincrement=True)
    round_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("rounds.id", ondelete="CASCADE"), nullable=False, index=True
    )
    kind: Mapped[str] = mapped_column(String(10), nullable=False, default="score")
    stage: Mapped[Optional[str]] = mapped_column(
        String(50), nullable=True
    )  # e.g. "group", "quarterfinal"
    group_name: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    home_team: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    away_team: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    home_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    away_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    correct_option: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_finished: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    round: Mapped["Round"] = relationship(back_populates="fixtures")
    predictions: Mapped[list["Prediction"]] = relationship(
        back_populates="fixture", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return (
            f"<Fixture(id={self.id}, {self.home_team} {self.home_score}-"
            f"{self.away_score} {self.away_team}, finished={self.is_finished})>"
        )

    def to_value(self) -> FixtureValue:
        """Engine value object for this row."""

        return FixtureValue(
            id=self.id,
            kind=FixtureKind(self.kind),
            finished=bool(self.is_finished),
            home_score=self.home_score,
            away_score=self.away_score,
            correct_option=self.correct_option,
            home_team=self.home_team,
            away_team=self.away_team,
            group=self.group_name,
        )

    def record_result(
        self,
        *,
        home_score: Optional[int] = None,
        away_score: Optional[int] = None,
        correct_option: Optional[str] = None,
    ) -> None:
        """Store the final (or corrected) result and mark the fixture finished."""

        if self.kind == FixtureKind.CHOICE.value:
            if not correct_option:
                raise ValueError("A question result needs the correct option")
            self.correct_option = correct_option
        else:
            if home_score is None or away_score is None:
                raise ValueError("A match result needs both scores")
            self.home_score = home_score
            self.away_score = away_score
        self.is_finished = True
