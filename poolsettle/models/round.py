"""Rounds (cycles) and their prize configuration."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, func, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from ..db.utils import decimal_str, dt_iso
from ..rules import RoundConfig
from .base import ID_TYPE, Base

if TYPE_CHECKING:
    from .entry import Entry
    from .fixture import Fixture
    from .settlement import RoundSettlement


ROUND_STATUSES = ("open", "locked", "settled", "archived")
PRODUCTS = ("score_pool", "quiz", "exact_score")


class Round(Base):
    """A bounded set of fixtures with one prize configuration."""

    __tablename__ = "rounds"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, index=True, autoincrement=True)
    """Primary key."""

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    """Display name shown to participants."""

    product: Mapped[str] = mapped_column(String(20), nullable=False, default="score_pool")
    """Product variant: ``score_pool``, ``quiz`` or ``exact_score``."""

    round_number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    """Sequence number within the pool."""

    entry_fee: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    """Price of one entry in the smallest currency unit."""

    admin_fee_percent: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=Decimal("0")
    )
    """Administrative fee charged on a payout, in percent."""

    previous_accumulated: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    """Rollover received from the previous round."""

    allow_draws: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    """Whether a drawn featured match can still pay out (``exact_score`` only)."""

    featured_team: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    """Club whose result gates the payout in ``exact_score`` rounds."""

    winning_points: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    """Score an entry must reach to win a ``quiz`` round."""

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="open")
    """Lifecycle state: open, locked, settled or archived."""

    ruleset_version: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    """Version of the rule set the round was scored with."""

    previous_round_id: Mapped[Optional[int]] = mapped_column(
        ID_TYPE, ForeignKey("rounds.id", ondelete="SET NULL"), nullable=True
    )
    """Round whose rollover this round received."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    fixtures: Mapped[list["Fixture"]] = relationship(
        back_populates="round", cascade="all, delete-orphan", order_by="Fixture.id"
    )
    entries: Mapped[list["Entry"]] = relationship(
        back_populates="round", cascade="all, delete-orphan", order_by="Entry.id"
    )
    settlement: Mapped[Optional["RoundSettlement"]] = relationship(
        back_populates="round", cascade="all, delete-orphan", uselist=False
    )
    previous_round: Mapped[Optional["Round"]] = relationship(remote_side="Round.id")

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<Round(id={self.id}, name='{self.name}', product={self.product}, "
            f"status={self.status})>"
        )

    def to_config(self) -> RoundConfig:
        """Prize configuration handed to :func:`poolsettle.settlement.settle`."""

        return RoundConfig(
            entry_fee=self.entry_fee,
            admin_fee_percent=self.admin_fee_percent,
            previous_accumulated=self.previous_accumulated,
            allow_draws=self.allow_draws,
        )

    def advance_status(self, new_status: str) -> None:
        """Move the round forward in its lifecycle.

        Raises
        ------
        ValueError
            If ``new_status`` is unknown or would move the round backwards.
        """

        if new_status not in ROUND_STATUSES:
            raise ValueError(f"Unknown round status '{new_status}'")
        if ROUND_STATUSES.index(new_status) < ROUND_STATUSES.index(self.status):
            raise ValueError(
                f"Round {self.id} cannot move from '{self.status}' to '{new_status}'"
            )
        self.status = new_status

    def active_entry_count(self, session: Session) -> int:
        """Paid entries contributing to the pool, read from the database."""

        from .entry import Entry

        stmt = (
            select(func.count(Entry.id))
            .where(Entry.round_id == self.id)
            .where(Entry.status == "active")
        )
        return int(session.scalar(stmt) or 0)

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "product": self.product,
            "round_number": self.round_number,
            "entry_fee": self.entry_fee,
            "admin_fee_percent": decimal_str(self.admin_fee_percent),
            "previous_accumulated": self.previous_accumulated,
            "allow_draws": self.allow_draws,
            "featured_team": self.featured_team,
            "winning_points": self.winning_points,
            "status": self.status,
            "ruleset_version": self.ruleset_version,
            "previous_round_id": self.previous_round_id,
            "created_at": dt_iso(self.created_at),
        }

    @classmethod
    def latest_for_product(cls, session: Session, product: str) -> Optional["Round"]:
        """Most recent round of ``product`` by round number."""

        stmt = (
            select(cls)
            .where(cls.product == product)
            .order_by(cls.round_number.desc(), cls.id.desc())
        )
        return session.scalars(stmt).first()
