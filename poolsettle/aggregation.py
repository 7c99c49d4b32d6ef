"""Accumulate per-fixture points into per-entry totals."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Hashable, Iterable, Mapping, Optional

from .errors import InvalidPrediction
from .values import Entry, Fixture, OutcomeTag, Prediction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntryTotal:
    """Running total of one entry within a scope.

    Attributes
    ----------
    entry_id : Hashable
        Entry the total belongs to.
    total : int
        Sum of points over predictions of finished fixtures.
    exact_count : int
        Number of ``EXACT`` tags among those predictions.
    counted : int
        Number of predictions that contributed to ``total``.
    """

    entry_id: Hashable
    total: int = 0
    exact_count: int = 0
    counted: int = 0


@dataclass(frozen=True)
class RoundScope:
    """Fixtures (and optionally entries) a total is computed over.

    A scope is usually one round. An overall table is a scope over the
    fixtures of every round.
    """

    fixtures: Mapping[Hashable, Fixture]
    entries: Optional[Mapping[Hashable, Entry]] = None

    @classmethod
    def of(
        cls, fixtures: Iterable[Fixture], entries: Optional[Iterable[Entry]] = None
    ) -> "RoundScope":
        """Build a scope from plain iterables, keyed by id."""

        return cls(
            fixtures={fixture.id: fixture for fixture in fixtures},
            entries=None if entries is None else {entry.id: entry for entry in entries},
        )

    def is_finished(self, fixture_id: Hashable) -> bool:
        fixture = self.fixtures.get(fixture_id)
        return fixture is not None and fixture.finished

    def counts_entry(self, entry_id: Hashable) -> bool:
        if self.entries is None:
            return True
        entry = self.entries.get(entry_id)
        return entry is not None and entry.is_active


def aggregate(
    predictions: Iterable[Prediction], scope: RoundScope
) -> dict[Hashable, EntryTotal]:
    """Sum prediction points per entry over the finished fixtures of ``scope``.

    Predictions for unfinished fixtures contribute nothing and never block the
    rest of the aggregation. Predictions of a finished fixture that has not
    been scored yet are skipped the same way until the fixture is scored.
    When ``scope.entries`` is supplied every active entry appears in the
    result (with zero totals when it has no scored predictions yet) and
    predictions of pending or cancelled entries are ignored. The result does
    not depend on the order of ``predictions``.

    Raises
    ------
    InvalidPrediction
        If an entry holds two predictions for the same fixture.
    """

    totals: dict[Hashable, list[int]] = {}
    if scope.entries is not None:
        for entry in scope.entries.values():
            if entry.is_active:
                totals[entry.id] = [0, 0, 0]

    seen: set[tuple[Hashable, Hashable]] = set()
    pending = 0
    for prediction in predictions:
        key = (prediction.entry_id, prediction.fixture_id)
        if key in seen:
            raise InvalidPrediction(
                prediction.entry_id, prediction.fixture_id, "duplicate prediction"
            )
        seen.add(key)

        if not scope.counts_entry(prediction.entry_id):
            continue
        if not scope.is_finished(prediction.fixture_id):
            continue
        if prediction.points is None:
            # Result recorded, scoring run still pending.
            pending += 1
            continue

        bucket = totals.setdefault(prediction.entry_id, [0, 0, 0])
        bucket[0] += prediction.points
        if prediction.tag == OutcomeTag.EXACT:
            bucket[1] += 1
        bucket[2] += 1

    if pending:
        logger.debug("Skipped %d predictions awaiting scoring", pending)
    logger.debug(
        "Aggregated %d entries over %d fixtures", len(totals), len(scope.fixtures)
    )
    return {
        entry_id: EntryTotal(
            entry_id=entry_id, total=total, exact_count=exact, counted=counted
        )
        for entry_id, (total, exact, counted) in totals.items()
    }


__all__ = ["EntryTotal", "RoundScope", "aggregate"]
