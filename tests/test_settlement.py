from __future__ import annotations

import itertools
import unittest
from decimal import Decimal
from unittest import mock

from poolsettle.errors import ConfigurationError, UnreconciledSettlement
from poolsettle.rules import RoundConfig
from poolsettle.settlement import (
    AccumulationTrigger,
    admin_fee,
    gross_pool,
    PrizeOutcome,
    _check_conservation,
    next_round_config,
    settle,
)


class PayoutTests(unittest.TestCase):
    def test_two_winners_split_net_pool(self) -> None:
        config = RoundConfig(entry_fee=10, admin_fee_percent=20)
        outcome = settle(config, ["e1", "e2"], participant_count=5)

        self.assertEqual(outcome.gross_pool, 50)
        self.assertEqual(outcome.admin_fee, 10)
        self.assertEqual(outcome.net_pool, 40)
        self.assertEqual(outcome.amount_per_winner, 20)
        self.assertEqual(outcome.remainder, 0)
        self.assertEqual(outcome.accumulated, 0)
        self.assertFalse(outcome.is_accumulated)
        self.assertEqual(outcome.payouts(), {"e1": 20, "e2": 20})

    def test_no_winners_accumulates_full_gross(self) -> None:
        config = RoundConfig(entry_fee=10, admin_fee_percent=20)
        outcome = settle(config, [], participant_count=5)

        self.assertEqual(outcome.accumulated, 50)
        self.assertEqual(outcome.admin_fee, 0)
        self.assertEqual(outcome.trigger, AccumulationTrigger.NO_WINNERS)
        self.assertEqual(outcome.payouts(), {})
        self.assertEqual(outcome.carried_forward, 50)

    def test_remainder_goes_to_the_house(self) -> None:
        config = RoundConfig(entry_fee=10, admin_fee_percent=0)
        outcome = settle(config, [1, 2, 3], participant_count=10)
        self.assertEqual(outcome.amount_per_winner, 33)
        self.assertEqual(outcome.remainder, 1)
        self.assertEqual(outcome.admin_fee_total, 1)

    def test_previous_accumulation_joins_the_pool(self) -> None:
        config = RoundConfig(entry_fee=10, admin_fee_percent=10, previous_accumulated=50)
        outcome = settle(config, ["w"], participant_count=5)
        self.assertEqual(outcome.gross_pool, 100)
        self.assertEqual(outcome.admin_fee, 10)
        self.assertEqual(outcome.amount_per_winner, 90)

    def test_admin_fee_rounds_half_up(self) -> None:
        self.assertEqual(admin_fee(25, Decimal("10")), 3)
        self.assertEqual(admin_fee(24, Decimal("10")), 2)
        self.assertEqual(admin_fee(1005, Decimal("12.5")), 126)

    def test_conservation_holds_for_many_configs(self) -> None:
        for fee, percent, previous, participants, winners in itertools.product(
            (0, 7, 100), ("0", "12.5", "33", "100"), (0, 13), (1, 3, 11), (1, 2, 3)
        ):
            if winners > participants:
                continue
            config = RoundConfig(
                entry_fee=fee, admin_fee_percent=Decimal(percent), previous_accumulated=previous
            )
            outcome = settle(config, list(range(winners)), participants)
            with self.subTest(fee=fee, percent=percent, previous=previous, n=participants, w=winners):
                self.assertEqual(
                    outcome.amount_per_winner * winners + outcome.admin_fee + outcome.remainder,
                    fee * participants + previous,
                )


class AccumulationTests(unittest.TestCase):
    def test_trigger_accumulates_even_with_winners(self) -> None:
        config = RoundConfig(entry_fee=20, admin_fee_percent=15, previous_accumulated=40)
        outcome = settle(
            config, ["e1"], participant_count=4, trigger=AccumulationTrigger.OUTCOME_DISALLOWED
        )
        self.assertEqual(outcome.accumulated, outcome.gross_pool)
        self.assertEqual(outcome.accumulated, 120)
        self.assertEqual(outcome.trigger, AccumulationTrigger.OUTCOME_DISALLOWED)
        self.assertEqual(outcome.winners, ())
        self.assertEqual(outcome.admin_fee, 0)

    def test_next_round_carries_rollover(self) -> None:
        config = RoundConfig(entry_fee=10, admin_fee_percent=20)
        rolled = settle(config, [], participant_count=5)
        following = next_round_config(config, rolled)
        self.assertEqual(following.previous_accumulated, 50)

        paid = settle(following, ["e9"], participant_count=2)
        self.assertEqual(paid.gross_pool, 70)
        after_payout = next_round_config(following, paid, entry_fee=15)
        self.assertEqual(after_payout.previous_accumulated, 0)
        self.assertEqual(after_payout.entry_fee, 15)

    def test_outcome_mapping(self) -> None:
        outcome = settle(RoundConfig(entry_fee=5, admin_fee_percent=0), [], 2)
        self.assertEqual(
            outcome.to_mapping(),
            {
                "gross_pool": 10,
                "admin_fee": 0,
                "remainder": 0,
                "net_pool": 0,
                "winners": [],
                "amount_per_winner": 0,
                "accumulated": 10,
                "trigger": "no_winners",
            },
        )


class ConservationCheckTests(unittest.TestCase):
    def test_payout_that_loses_money_is_rejected(self) -> None:
        outcome = PrizeOutcome(
            gross_pool=50,
            admin_fee=10,
            remainder=0,
            net_pool=40,
            winners=("e1", "e2"),
            amount_per_winner=19,
            accumulated=0,
            trigger=AccumulationTrigger.NONE,
        )
        with self.assertRaises(UnreconciledSettlement) as ctx:
            _check_conservation(outcome)
        self.assertEqual(ctx.exception.gross_pool, 50)
        self.assertEqual(ctx.exception.accounted, 48)

    def test_partial_rollover_is_rejected(self) -> None:
        outcome = PrizeOutcome(
            gross_pool=50,
            admin_fee=0,
            remainder=0,
            net_pool=0,
            winners=(),
            amount_per_winner=0,
            accumulated=40,
            trigger=AccumulationTrigger.NO_WINNERS,
        )
        with self.assertRaises(UnreconciledSettlement):
            _check_conservation(outcome)

    def test_settle_raises_when_split_does_not_reconcile(self) -> None:
        config = RoundConfig(entry_fee=10, admin_fee_percent=20)
        with mock.patch(
            "poolsettle.settlement.divmod", create=True, return_value=(21, 0)
        ):
            with self.assertRaises(UnreconciledSettlement):
                settle(config, ["e1", "e2"], participant_count=5)


class InvalidInputTests(unittest.TestCase):
    def setUp(self) -> None:
        self.config = RoundConfig(entry_fee=10, admin_fee_percent=5)

    def test_negative_participant_count(self) -> None:
        with self.assertRaises(ConfigurationError):
            settle(self.config, [], -1)
        with self.assertRaises(ConfigurationError):
            gross_pool(self.config, 2.5)

    def test_duplicate_winners(self) -> None:
        with self.assertRaises(ConfigurationError):
            settle(self.config, ["a", "a"], 3)

    def test_more_winners_than_participants(self) -> None:
        with self.assertRaises(ConfigurationError):
            settle(self.config, ["a", "b", "c"], 2)


if __name__ == "__main__":
    unittest.main()
