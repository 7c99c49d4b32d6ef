from __future__ import annotations

import unittest

from poolsettle.bracket import (
    QualifiedTeam,
    compute_standings,
    draw,
    generate_matchups,
    has_group_structure,
    qualify,
)
from poolsettle.rules import DrawRules
from poolsettle.values import Fixture

GROUPS = {
    "Lions": "A", "Hawks": "A", "Bears": "A", "Wolves": "A",
    "Sharks": "B", "Eagles": "B", "Tigers": "B", "Foxes": "B",
}


def result(fixture_id, home, away, home_score=None, away_score=None) -> Fixture:
    return Fixture(
        id=fixture_id,
        finished=home_score is not None,
        home_score=home_score,
        away_score=away_score,
        home_team=home,
        away_team=away,
        group=GROUPS[home],
    )


FIXTURES = [
    result(1, "Lions", "Hawks", 2, 0),
    result(2, "Bears", "Wolves", 1, 1),
    result(3, "Lions", "Bears", 0, 1),
    result(4, "Hawks", "Wolves", 1, 1),
    result(5, "Sharks", "Eagles", 3, 2),
    result(6, "Tigers", "Foxes", 0, 0),
    result(7, "Sharks", "Tigers", 1, 2),
    result(8, "Eagles", "Foxes"),
]


class StandingsTests(unittest.TestCase):
    def test_points_and_order(self) -> None:
        tables = compute_standings(FIXTURES, GROUPS)
        self.assertEqual(list(tables), ["A", "B"])

        group_a = tables["A"]
        self.assertEqual([row.team for row in group_a], ["Bears", "Lions", "Wolves", "Hawks"])
        bears = group_a[0]
        self.assertEqual((bears.played, bears.wins, bears.draws, bears.losses), (2, 1, 1, 0))
        self.assertEqual(bears.points, 4)
        self.assertEqual(bears.goal_difference, 1)
        self.assertEqual([row.position for row in group_a], [1, 2, 3, 4])

    def test_unfinished_fixture_teams_are_listed(self) -> None:
        tables = compute_standings(FIXTURES, GROUPS)
        group_b = {row.team: row for row in tables["B"]}
        self.assertEqual(group_b["Eagles"].played, 1)
        self.assertEqual(group_b["Foxes"].played, 1)
        self.assertEqual(
            [row.team for row in tables["B"]], ["Tigers", "Sharks", "Foxes", "Eagles"]
        )

    def test_deterministic_regardless_of_input_order(self) -> None:
        forward = compute_standings(FIXTURES, GROUPS)
        again = compute_standings(FIXTURES, GROUPS)
        backward = compute_standings(list(reversed(FIXTURES)), GROUPS)
        self.assertEqual(forward, again)
        self.assertEqual(forward, backward)

    def test_callable_group_lookup_and_unknown_teams(self) -> None:
        fixtures = [result(1, "Lions", "Hawks", 1, 0)]
        fixtures.append(
            Fixture(id=2, finished=True, home_score=1, away_score=0, home_team="Lions", away_team="Guests")
        )
        tables = compute_standings(fixtures, lambda team: GROUPS.get(team))
        self.assertEqual([row.team for row in tables["A"]], ["Lions", "Hawks"])
        self.assertEqual(tables["A"][0].played, 2)

    def test_qualify_takes_top_teams_per_group(self) -> None:
        qualified = qualify(compute_standings(FIXTURES, GROUPS), per_group=2)
        self.assertEqual(
            qualified,
            [
                QualifiedTeam("Bears", "A", 1),
                QualifiedTeam("Lions", "A", 2),
                QualifiedTeam("Tigers", "B", 1),
                QualifiedTeam("Sharks", "B", 2),
            ],
        )
        with self.assertRaises(ValueError):
            qualify({}, per_group=0)


class DrawTests(unittest.TestCase):
    def setUp(self) -> None:
        self.qualified = [
            QualifiedTeam(team, group, position)
            for group, teams in {
                "A": ["A1", "A2"],
                "B": ["B1", "B2"],
                "C": ["C1", "C2"],
                "D": ["D1", "D2"],
            }.items()
            for position, team in enumerate(teams, start=1)
        ]

    def test_cross_group_pairs_firsts_with_seconds_of_other_groups(self) -> None:
        for seed in range(25):
            report = draw(self.qualified, seed=seed)
            self.assertEqual(len(report.matchups), 4)
            self.assertEqual(report.same_group_pairings, 0)
            self.assertEqual(report.unpaired, ())
            for matchup in report.matchups:
                self.assertEqual(matchup.home.position, 1)
                self.assertEqual(matchup.away.position, 2)
                self.assertNotEqual(matchup.home.group, matchup.away.group)

    def test_same_seed_same_bracket(self) -> None:
        first = generate_matchups(self.qualified, seed=11)
        second = generate_matchups(list(reversed(self.qualified)), seed=11)
        self.assertEqual(first, second)

    def test_unseeded_draws_vary(self) -> None:
        flat = [QualifiedTeam(f"T{number}") for number in range(1, 11)]
        for teams in (self.qualified, flat):
            brackets = {
                tuple((m.home.team, m.away.team) for m in draw(teams).matchups)
                for _ in range(20)
            }
            self.assertGreater(len(brackets), 1)

    def test_every_team_drawn_once(self) -> None:
        report = draw(self.qualified, DrawRules(balance=False), seed=3)
        teams = [t.team for m in report.matchups for t in (m.home, m.away)]
        self.assertEqual(sorted(teams), sorted(t.team for t in self.qualified))

    def test_same_group_fallback_is_reported(self) -> None:
        qualified = [QualifiedTeam("A1", "A", 1), QualifiedTeam("A2", "A", 2)]
        with self.assertLogs("poolsettle.bracket.draw", level="WARNING"):
            report = draw(qualified, seed=1)
        self.assertEqual(len(report.matchups), 1)
        self.assertEqual(report.same_group_pairings, 1)
        self.assertTrue(report.matchups[0].same_group)

    def test_second_pass_avoids_same_group_when_possible(self) -> None:
        qualified = [
            QualifiedTeam("A3", "A", 3),
            QualifiedTeam("A4", "A", 4),
            QualifiedTeam("B3", "B", 3),
            QualifiedTeam("B4", "B", 4),
        ]
        for seed in range(25):
            report = draw(qualified, seed=seed)
            self.assertEqual(report.same_group_pairings, 0)
            for matchup in report.matchups:
                self.assertFalse(matchup.same_group)

    def test_flat_list_without_groups(self) -> None:
        flat = [QualifiedTeam(name) for name in ("w", "x", "y", "z", "v")]
        self.assertFalse(has_group_structure(flat))
        report = draw(flat, seed=5)
        self.assertEqual(len(report.matchups), 2)
        self.assertEqual(len(report.unpaired), 1)
        self.assertEqual(report, draw(flat, seed=5))

    def test_insufficient_teams(self) -> None:
        with self.assertLogs("poolsettle.bracket.draw", level="WARNING"):
            report = draw([QualifiedTeam("solo", "A", 1)])
        self.assertTrue(report.insufficient_teams)
        self.assertEqual(report.matchups, ())
        self.assertEqual(generate_matchups([]), [])


if __name__ == "__main__":
    unittest.main()
