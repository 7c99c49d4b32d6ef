from __future__ import annotations

import json
import os
import tempfile
import unittest
from decimal import Decimal
from pathlib import Path
from unittest import mock

from poolsettle.config import DEFAULT_RULESET, RULESET_ENV_VAR, load_ruleset
from poolsettle.errors import ConfigurationError
from poolsettle.rules import DrawRules, RoundConfig, RuleSet, ScoringRules


class ScoringRulesTests(unittest.TestCase):
    def test_valid_tables(self) -> None:
        rules = ScoringRules(exact=5, correct_difference=3, correct_outcome=1)
        self.assertEqual(rules.wrong, 0)
        self.assertEqual(rules.choice, 1)

    def test_invalid_tables_rejected(self) -> None:
        bad = [
            dict(exact=1, correct_outcome=1),
            dict(exact=3, correct_outcome=-1),
            dict(exact=5, correct_outcome=1, correct_difference=5),
            dict(exact=5, correct_outcome=2, correct_difference=1),
            dict(exact=5, correct_outcome=1, choice=0),
            dict(exact=True, correct_outcome=0),
            dict(exact="5", correct_outcome=1),
        ]
        for kwargs in bad:
            with self.subTest(**{k: repr(v) for k, v in kwargs.items()}):
                with self.assertRaises(ConfigurationError):
                    ScoringRules(**kwargs)


class RoundConfigTests(unittest.TestCase):
    def test_percent_is_normalised_to_decimal(self) -> None:
        config = RoundConfig(entry_fee=10, admin_fee_percent=12.5)
        self.assertEqual(config.admin_fee_percent, Decimal("12.5"))

    def test_invalid_values_rejected(self) -> None:
        for kwargs in (
            dict(entry_fee=-1, admin_fee_percent=0),
            dict(entry_fee=10, admin_fee_percent=101),
            dict(entry_fee=10, admin_fee_percent=-0.5),
            dict(entry_fee=10, admin_fee_percent="abc"),
            dict(entry_fee=10, admin_fee_percent=0, previous_accumulated=-5),
            dict(entry_fee=9.99, admin_fee_percent=0),
        ):
            with self.subTest(**{k: repr(v) for k, v in kwargs.items()}):
                with self.assertRaises(ConfigurationError):
                    RoundConfig(**kwargs)

    def test_from_mapping(self) -> None:
        config = RoundConfig.from_mapping({"entry_fee": 500, "admin_fee_percent": "10"})
        self.assertEqual(config.entry_fee, 500)
        self.assertEqual(config.previous_accumulated, 0)
        self.assertTrue(config.allow_draws)
        with self.assertRaises(ConfigurationError):
            RoundConfig.from_mapping({"admin_fee_percent": 10})


class RuleSetTests(unittest.TestCase):
    def test_mapping_round_trip(self) -> None:
        ruleset = RuleSet(
            version="knockout-2026",
            scoring=ScoringRules(exact=3, correct_outcome=1),
            draw=DrawRules(balance=False),
            qualifiers_per_group=1,
        )
        self.assertEqual(RuleSet.from_mapping(ruleset.to_mapping()), ruleset)

    def test_missing_parts_rejected(self) -> None:
        with self.assertRaises(ConfigurationError):
            RuleSet.from_mapping({"version": "v1"})
        with self.assertRaises(ConfigurationError):
            RuleSet.from_mapping({"version": "v1", "scoring": {"exact": 3}})
        with self.assertRaises(ConfigurationError):
            RuleSet.from_mapping({"version": " ", "scoring": {"exact": 3, "correct_outcome": 1}})
        with self.assertRaises(ConfigurationError):
            RuleSet(version="v1", scoring=ScoringRules(exact=3, correct_outcome=1), qualifiers_per_group=0)


class LoadRulesetTests(unittest.TestCase):
    def test_default_when_unset(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True), mock.patch(
            "poolsettle.config.load_dotenv"
        ):
            self.assertIs(load_ruleset(), DEFAULT_RULESET)

    def test_reads_file_from_environment(self) -> None:
        payload = {
            "version": "quiz-v2",
            "scoring": {"exact": 4, "correct_outcome": 1, "choice": 2},
            "qualifiers_per_group": 3,
        }
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "rules.json"
            path.write_text(json.dumps(payload), encoding="utf-8")
            with mock.patch.dict(os.environ, {RULESET_ENV_VAR: str(path)}), mock.patch(
                "poolsettle.config.load_dotenv"
            ):
                ruleset = load_ruleset()
        self.assertEqual(ruleset.version, "quiz-v2")
        self.assertEqual(ruleset.scoring.choice, 2)
        self.assertEqual(ruleset.qualifiers_per_group, 3)
        self.assertEqual(ruleset.draw, DrawRules())

    def test_bad_file_raises_configuration_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            broken = Path(tmpdir) / "broken.json"
            broken.write_text("{not json", encoding="utf-8")
            listed = Path(tmpdir) / "list.json"
            listed.write_text("[]", encoding="utf-8")
            for path in (broken, listed, Path(tmpdir) / "missing.json"):
                with self.subTest(path=path.name):
                    with self.assertRaises(ConfigurationError):
                        load_ruleset(path)


if __name__ == "__main__":
    unittest.main()
