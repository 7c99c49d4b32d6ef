"""Prize pool settlement: payout split or rollover to the next round.

All amounts are integers in the smallest currency unit. The administrative fee
is charged only when a round actually pays out; an accumulated round carries
its whole gross pool forward.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Hashable, Sequence

from .errors import ConfigurationError, UnreconciledSettlement
from .rules import RoundConfig

logger = logging.getLogger(__name__)


class AccumulationTrigger(str, Enum):
    """Caller-supplied reason to roll the pool over instead of paying out."""

    NONE = "none"
    NO_WINNERS = "no_winners"
    OUTCOME_DISALLOWED = "outcome_disallowed"


@dataclass(frozen=True)
class PrizeOutcome:
    """Settlement result of one round.

    Attributes
    ----------
    gross_pool : int
        ``entry_fee * participant_count + previous_accumulated``.
    admin_fee : int
        Fee computed from the percentage, before the rounding remainder.
        Zero when the pool accumulates.
    remainder : int
        Minor units left over by the integer split, kept by the house.
    net_pool : int
        ``gross_pool - admin_fee``; zero when the pool accumulates.
    winners : tuple
        Winning entry ids; empty when the pool accumulates.
    amount_per_winner : int
        Payout of each winning entry.
    accumulated : int
        Amount rolled over to the next round (the full gross pool or 0).
    trigger : AccumulationTrigger
        ``NONE`` for a payout, otherwise why the pool accumulated.
    """

    gross_pool: int
    admin_fee: int
    remainder: int
    net_pool: int
    winners: tuple[Hashable, ...]
    amount_per_winner: int
    accumulated: int
    trigger: AccumulationTrigger

    @property
    def is_accumulated(self) -> bool:
        return self.trigger != AccumulationTrigger.NONE

    @property
    def admin_fee_total(self) -> int:
        """Everything the house keeps: the fee plus the rounding remainder."""

        return self.admin_fee + self.remainder

    @property
    def carried_forward(self) -> int:
        return self.accumulated

    def payouts(self) -> dict[Hashable, int]:
        return {winner: self.amount_per_winner for winner in self.winners}

    def to_mapping(self) -> dict[str, Any]:
        return {
            "gross_pool": self.gross_pool,
            "admin_fee": self.admin_fee,
            "remainder": self.remainder,
            "net_pool": self.net_pool,
            "winners": list(self.winners),
            "amount_per_winner": self.amount_per_winner,
            "accumulated": self.accumulated,
            "trigger": self.trigger.value,
        }


def gross_pool(config: RoundConfig, participant_count: int) -> int:
    """Entry fees collected this round plus what previous rounds rolled over."""

    if isinstance(participant_count, bool) or not isinstance(participant_count, int):
        raise ConfigurationError(
            f"participant_count must be an integer, got {participant_count!r}"
        )
    if participant_count < 0:
        raise ConfigurationError("participant_count must not be negative")
    return config.entry_fee * participant_count + config.previous_accumulated


def admin_fee(pool: int, percent: Decimal) -> int:
    """Fee on ``pool`` rounded half-up to the smallest currency unit."""

    fee = (Decimal(pool) * percent / Decimal(100)).quantize(
        Decimal(1), rounding=ROUND_HALF_UP
    )
    return int(fee)


def _check_conservation(outcome: PrizeOutcome) -> None:
    if outcome.is_accumulated:
        accounted = outcome.accumulated
    else:
        accounted = (
            outcome.amount_per_winner * len(outcome.winners)
            + outcome.admin_fee
            + outcome.remainder
        )
    if accounted != outcome.gross_pool:
        raise UnreconciledSettlement(outcome.gross_pool, accounted)


def settle(
    config: RoundConfig,
    winners: Sequence[Hashable],
    participant_count: int,
    trigger: AccumulationTrigger = AccumulationTrigger.NONE,
) -> PrizeOutcome:
    """Settle one round.

    Parameters
    ----------
    config : RoundConfig
        Prize configuration of the round.
    winners : Sequence[Hashable]
        Winning entry ids, as decided by the product's winner rule.
    participant_count : int
        Number of paid entries contributing ``entry_fee`` to the pool.
    trigger : AccumulationTrigger, default: ``NONE``
        Product-specific decision to roll the pool over (e.g. the featured
        club lost). The engine does not interpret it beyond "accumulate".

    Returns
    -------
    PrizeOutcome
        Either a payout split or a full rollover of the gross pool.

    Raises
    ------
    ConfigurationError
        On a negative participant count, duplicate winners or more winners
        than participants.
    UnreconciledSettlement
        If the computed amounts do not add up to the gross pool.
    """

    gross = gross_pool(config, participant_count)
    winner_ids = tuple(winners)
    if len(set(winner_ids)) != len(winner_ids):
        raise ConfigurationError("winners must not contain duplicate entry ids")
    if len(winner_ids) > participant_count:
        raise ConfigurationError(
            f"{len(winner_ids)} winners cannot exceed {participant_count} participants"
        )

    if trigger != AccumulationTrigger.NONE or not winner_ids:
        reason = trigger if trigger != AccumulationTrigger.NONE else AccumulationTrigger.NO_WINNERS
        outcome = PrizeOutcome(
            gross_pool=gross,
            admin_fee=0,
            remainder=0,
            net_pool=0,
            winners=(),
            amount_per_winner=0,
            accumulated=gross,
            trigger=reason,
        )
        logger.info("Pool of %d accumulates (%s)", gross, reason.value)
    else:
        fee = admin_fee(gross, config.admin_fee_percent)
        net = gross - fee
        per_winner, remainder = divmod(net, len(winner_ids))
        outcome = PrizeOutcome(
            gross_pool=gross,
            admin_fee=fee,
            remainder=remainder,
            net_pool=net,
            winners=winner_ids,
            amount_per_winner=per_winner,
            accumulated=0,
            trigger=AccumulationTrigger.NONE,
        )
        logger.info(
            "Pool of %d pays %d to each of %d winners (fee %d, remainder %d)",
            gross,
            per_winner,
            len(winner_ids),
            fee,
            remainder,
        )

    _check_conservation(outcome)
    return outcome


def next_round_config(
    config: RoundConfig, outcome: PrizeOutcome, **overrides: Any
) -> RoundConfig:
    """Configuration for the following round, carrying any rollover forward.

    ``overrides`` replace fields such as ``entry_fee`` for the new round;
    ``previous_accumulated`` always comes from ``outcome``.
    """

    overrides.pop("previous_accumulated", None)
    return dataclasses.replace(
        config, previous_accumulated=outcome.carried_forward, **overrides
    )


__all__ = [
    "AccumulationTrigger",
    "PrizeOutcome",
    "admin_fee",
    "gross_pool",
    "next_round_config",
    "settle",
]
