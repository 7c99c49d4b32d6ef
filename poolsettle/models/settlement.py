from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from ..db.utils import dt_iso
from ..settlement import AccumulationTrigger, PrizeOutcome
from .base import ID_TYPE, Base

if TYPE_CHECKING:
    from .round import Round


class RoundSettlement(Base):
    """Persisted prize outcome of a settled round."""

    __tablename__ = "round_settlements"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, index=True, autoincrement=True)
    round_id: Mapped[int] = mapped_column(
        ID_TYPE,
        ForeignKey("rounds.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    gross_pool: Mapped[int] = mapped_column(Integer, nullable=False)
    admin_fee: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    remainder: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    net_pool: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    amount_per_winner: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    accumulated: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    trigger: Mapped[str] = mapped_column(String(30), nullable=False, default="none")
    winner_entry_ids: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    participant_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    settled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    round: Mapped["Round"] = relationship(back_populates="settlement")

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<RoundSettlement(round_id={self.round_id}, gross={self.gross_pool}, "
            f"accumulated={self.accumulated}, winners={self.winner_entry_ids})>"
        )

    @classmethod
    def get_for_round(cls, session: Session, round_id: int) -> Optional["RoundSettlement"]:
        return session.scalar(select(cls).where(cls.round_id == round_id))

    def apply(self, outcome: PrizeOutcome, participant_count: int) -> None:
        """Copy every field of ``outcome`` onto this row."""

        self.gross_pool = outcome.gross_pool
        self.admin_fee = outcome.admin_fee
        self.remainder = outcome.remainder
        self.net_pool = outcome.net_pool
        self.amount_per_winner = outcome.amount_per_winner
        self.accumulated = outcome.accumulated
        self.trigger = outcome.trigger.value
        self.winner_entry_ids = list(outcome.winners)
        self.participant_count = participant_count
        self.settled_at = datetime.now(timezone.utc)

    def to_outcome(self) -> PrizeOutcome:
        return PrizeOutcome(
            gross_pool=self.gross_pool,
            admin_fee=self.admin_fee,
            remainder=self.remainder,
            net_pool=self.net_pool,
            winners=tuple(self.winner_entry_ids or ()),
            amount_per_winner=self.amount_per_winner,
            accumulated=self.accumulated,
            trigger=AccumulationTrigger(self.trigger),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "round_id": self.round_id,
            "gross_pool": self.gross_pool,
            "admin_fee": self.admin_fee,
            "remainder": self.remainder,
            "net_pool": self.net_pool,
            "amount_per_winner": self.amount_per_winner,
            "accumulated": self.accumulated,
            "trigger": self.trigger,
            "winner_entry_ids": list(self.winner_entry_ids or []),
            "participant_count": self.participant_count,
            "settled_at": dt_iso(self.settled_at),
        }
