from __future__ import annotations

import random
import unittest

from poolsettle.aggregation import EntryTotal
from poolsettle.ranking import (
    Standing,
    collapse_best_entries,
    entries_reaching,
    lowest_award,
    most_exact_award,
    podium_bands,
    rank,
    top_with_ties,
)


def totals_for(values: dict) -> dict:
    """Entry totals where every entry belongs to the participant of the same name."""

    return {
        entry_id: EntryTotal(entry_id, total=total, exact_count=exact)
        for entry_id, (total, exact) in values.items()
    }


def owner_is_entry(entry_id):
    return entry_id


class PodiumTests(unittest.TestCase):
    def test_tied_podium_bands(self) -> None:
        totals = totals_for({"A": (30, 2), "B": (30, 1), "C": (20, 0), "D": (10, 0)})
        ranked = rank(totals, owner_is_entry)

        self.assertEqual(len(ranked.podium), 3)
        self.assertEqual(ranked.band(1).value, 30)
        self.assertEqual(ranked.band(1).participant_ids, ("A", "B"))
        self.assertEqual(ranked.band(2).participant_ids, ("C",))
        self.assertEqual(ranked.band(2).value, 20)
        self.assertEqual(ranked.band(3).participant_ids, ("D",))
        self.assertEqual(ranked.band(3).value, 10)
        self.assertIsNone(ranked.band(4))
        self.assertEqual([s.rank for s in ranked.standings], [1, 1, 2, 3])

    def test_podium_bands_hold_one_value_and_strictly_decrease(self) -> None:
        rng = random.Random(42)
        for _ in range(50):
            values = {f"p{i}": (rng.randint(0, 6), 0) for i in range(rng.randint(0, 9))}
            bands = podium_bands(rank(totals_for(values), owner_is_entry).standings)
            self.assertLessEqual(len(bands), 3)
            for band in bands:
                self.assertEqual({m.total for m in band.members}, {band.value})
            band_values = [band.value for band in bands]
            self.assertEqual(band_values, sorted(set(band_values), reverse=True))

    def test_fewer_distinct_totals_than_podium_places(self) -> None:
        ranked = rank(totals_for({"A": (7, 0), "B": (7, 0)}), owner_is_entry)
        self.assertEqual(len(ranked.podium), 1)
        self.assertEqual(ranked.band(1).participant_ids, ("A", "B"))


class AwardTests(unittest.TestCase):
    def test_lowest_award_empty_when_everyone_tied(self) -> None:
        ranked = rank(totals_for({"A": (15, 0), "B": (15, 1), "C": (15, 0)}), owner_is_entry)
        self.assertIsNone(ranked.lowest)

    def test_lowest_award_collects_all_tied_at_bottom(self) -> None:
        ranked = rank(totals_for({"A": (9, 0), "B": (2, 0), "C": (2, 0)}), owner_is_entry)
        self.assertEqual(ranked.lowest.value, 2)
        self.assertEqual(ranked.lowest.participant_ids, ("B", "C"))

    def test_most_exact_award(self) -> None:
        ranked = rank(totals_for({"A": (9, 1), "B": (8, 3), "C": (4, 3)}), owner_is_entry)
        self.assertEqual(ranked.most_exact.value, 3)
        self.assertEqual(ranked.most_exact.participant_ids, ("B", "C"))

    def test_most_exact_award_empty_without_exact_predictions(self) -> None:
        standings = [Standing("A", "A", 4, 0), Standing("B", "B", 2, 0)]
        self.assertIsNone(most_exact_award(standings))
        self.assertIsNone(most_exact_award([]))
        self.assertIsNone(lowest_award([]))

    def test_empty_input(self) -> None:
        ranked = rank({}, owner_is_entry)
        self.assertEqual(ranked.standings, ())
        self.assertEqual(ranked.podium, ())
        self.assertIsNone(ranked.most_exact)
        self.assertIsNone(ranked.lowest)
        self.assertEqual(len(ranked), 0)


class BestEntryTests(unittest.TestCase):
    def setUp(self) -> None:
        self.totals = {
            1: EntryTotal(1, total=12, exact_count=1),
            2: EntryTotal(2, total=18, exact_count=2),
            3: EntryTotal(3, total=18, exact_count=0),
            4: EntryTotal(4, total=5),
        }
        self.owners = {1: "alice", 2: "alice", 3: "bob", 4: "bob"}

    def test_participant_ranked_by_best_entry_not_sum(self) -> None:
        ranked = rank(self.totals, self.owners)
        by_participant = {s.participant_id: s for s in ranked.standings}
        self.assertEqual(by_participant["alice"].entry_id, 2)
        self.assertEqual(by_participant["alice"].total, 18)
        self.assertEqual(by_participant["bob"].entry_id, 3)
        self.assertEqual(by_participant["bob"].total, 18)
        self.assertEqual(ranked.band(1).participant_ids, ("alice", "bob"))

    def test_tie_between_own_entries_prefers_lowest_number(self) -> None:
        totals = {10: EntryTotal(10, total=8), 11: EntryTotal(11, total=8)}
        owners = {10: "carol", 11: "carol"}
        numbers = {10: 2, 11: 1}
        best = collapse_best_entries(totals, owners, numbers)
        self.assertEqual(len(best), 1)
        self.assertEqual(best[0].entry_id, 11)

    def test_entries_without_owner_are_skipped(self) -> None:
        best = collapse_best_entries(self.totals, {1: "alice"})
        self.assertEqual([s.entry_id for s in best], [1])

    def test_callable_lookups(self) -> None:
        ranked = rank(self.totals, lambda entry_id: self.owners[entry_id])
        self.assertEqual(len(ranked), 2)


class CutoffTests(unittest.TestCase):
    def test_top_with_ties_extends_past_limit(self) -> None:
        standings = rank(
            totals_for({"A": (9, 0), "B": (7, 0), "C": (7, 0), "D": (3, 0)}),
            owner_is_entry,
        ).standings
        top = top_with_ties(standings, 2)
        self.assertEqual([s.participant_id for s in top], ["A", "B", "C"])
        self.assertEqual(top_with_ties(standings, 0), [])
        self.assertEqual(len(top_with_ties(standings, 10)), 4)
        with self.assertRaises(ValueError):
            top_with_ties(standings, -1)

    def test_entries_reaching_threshold(self) -> None:
        totals = totals_for({"q3": (10, 0), "q1": (12, 0), "q2": (9, 0)})
        self.assertEqual(entries_reaching(totals, 10), ["q1", "q3"])
        self.assertEqual(entries_reaching(totals, 13), [])


if __name__ == "__main__":
    unittest.main()
