"""Leaderboards, podium bands and secondary awards built from entry totals.

Every leaderboard first collapses entries to participants: a participant who
bought several entries is represented by the single best one, never by the sum.
Rank bands are built from *distinct* total values, so a podium is "the top three
score levels", each of which may hold several tied participants.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Hashable, Iterable, Mapping, Optional, Sequence, Union

from .aggregation import EntryTotal
from .values import sort_key

ParticipantOf = Union[Mapping[Hashable, Hashable], Callable[[Hashable], Hashable]]
EntryNumberOf = Union[Mapping[Hashable, int], Callable[[Hashable], int]]

PODIUM_SIZE = 3


@dataclass(frozen=True)
class Standing:
    """A participant's position on a leaderboard.

    Attributes
    ----------
    participant_id : Hashable
        Participant being ranked.
    entry_id : Hashable
        The participant's best entry in scope.
    total : int
        Total points of that entry.
    exact_count : int
        Exact predictions of that entry.
    rank : int
        Dense rank: participants with equal totals share a rank and the next
        distinct total gets the next integer.
    """

    participant_id: Hashable
    entry_id: Hashable
    total: int
    exact_count: int
    rank: int = 0


@dataclass(frozen=True)
class AwardBand:
    """A set of participants sharing one award value."""

    value: int
    members: tuple[Standing, ...]

    @property
    def participant_ids(self) -> tuple[Hashable, ...]:
        return tuple(member.participant_id for member in self.members)


@dataclass(frozen=True)
class RankedList:
    """Full leaderboard with its podium and secondary awards."""

    standings: tuple[Standing, ...] = ()
    podium: tuple[AwardBand, ...] = ()
    most_exact: Optional[AwardBand] = None
    lowest: Optional[AwardBand] = None

    def __len__(self) -> int:
        return len(self.standings)

    def band(self, place: int) -> Optional[AwardBand]:
        """Return the podium band for ``place`` (1-based) if it exists."""

        if 1 <= place <= len(self.podium):
            return self.podium[place - 1]
        return None


def _resolver(source, default=None):
    if source is None:
        return lambda key: default
    if callable(source):
        return source
    return source.get


def collapse_best_entries(
    entry_totals: Mapping[Hashable, EntryTotal],
    participant_of: ParticipantOf,
    entry_number_of: Optional[EntryNumberOf] = None,
) -> list[Standing]:
    """Select the best entry of each participant.

    Ties between a participant's entries go to the lowest entry number, then
    to the lowest entry id, so the choice never depends on input order.
    Entries without a known participant are skipped.

    Returns
    -------
    list[Standing]
        One unranked standing per participant, in no particular order.
    """

    owner = _resolver(participant_of)
    number = _resolver(entry_number_of, 0)

    best: dict[Hashable, tuple[tuple, EntryTotal]] = {}
    for entry_id, total in entry_totals.items():
        participant = owner(entry_id)
        if participant is None:
            continue
        entry_number = number(entry_id)
        key = (-total.total, entry_number if entry_number is not None else 0, sort_key(entry_id))
        current = best.get(participant)
        if current is None or key < current[0]:
            best[participant] = (key, total)

    return [
        Standing(
            participant_id=participant,
            entry_id=total.entry_id,
            total=total.total,
            exact_count=total.exact_count,
        )
        for participant, (_, total) in best.items()
    ]


def _order(standings: Iterable[Standing]) -> list[Standing]:
    return sorted(
        standings, key=lambda s: (-s.total, sort_key(s.participant_id))
    )


def _dense_ranks(ordered: Sequence[Standing]) -> list[Standing]:
    ranked: list[Standing] = []
    rank = 0
    previous: Optional[int] = None
    for standing in ordered:
        if standing.total != previous:
            rank += 1
            previous = standing.total
        ranked.append(
            Standing(
                participant_id=standing.participant_id,
                entry_id=standing.entry_id,
                total=standing.total,
                exact_count=standing.exact_count,
                rank=rank,
            )
        )
    return ranked


def podium_bands(
    standings: Sequence[Standing], size: int = PODIUM_SIZE
) -> tuple[AwardBand, ...]:
    """Group the top ``size`` distinct totals into bands, highest first."""

    bands: list[AwardBand] = []
    for standing in _order(standings):
        if bands and bands[-1].value == standing.total:
            bands[-1] = AwardBand(bands[-1].value, bands[-1].members + (standing,))
            continue
        if len(bands) == size:
            break
        bands.append(AwardBand(standing.total, (standing,)))
    return tuple(bands)


def most_exact_award(standings: Sequence[Standing]) -> Optional[AwardBand]:
    """Participants sharing the highest exact-prediction count.

    Returns ``None`` when nobody has an exact prediction.
    """

    if not standings:
        return None
    best = max(standing.exact_count for standing in standings)
    if best == 0:
        return None
    members = tuple(s for s in _order(standings) if s.exact_count == best)
    return AwardBand(best, members)


def lowest_award(standings: Sequence[Standing]) -> Optional[AwardBand]:
    """Participants sharing the lowest total.

    Returns ``None`` when every participant has the same total: there is no
    "lowest scorer" in a flat field.
    """

    if not standings:
        return None
    lowest = min(standing.total for standing in standings)
    highest = max(standing.total for standing in standings)
    if lowest == highest:
        return None
    members = tuple(s for s in _order(standings) if s.total == lowest)
    return AwardBand(lowest, members)


def rank(
    entry_totals: Mapping[Hashable, EntryTotal],
    participant_of: ParticipantOf,
    entry_number_of: Optional[EntryNumberOf] = None,
) -> RankedList:
    """Build the participant leaderboard for one scope.

    Parameters
    ----------
    entry_totals : Mapping[Hashable, EntryTotal]
        Output of :func:`poolsettle.aggregation.aggregate`.
    participant_of : Mapping or callable
        Resolves an entry id to its owning participant id.
    entry_number_of : Mapping or callable, optional
        Resolves an entry id to its sequential number, used to break ties
        between a participant's own entries.

    Returns
    -------
    RankedList
        Empty when ``entry_totals`` is empty.
    """

    collapsed = collapse_best_entries(entry_totals, participant_of, entry_number_of)
    if not collapsed:
        return RankedList()
    standings = tuple(_dense_ranks(_order(collapsed)))
    return RankedList(
        standings=standings,
        podium=podium_bands(standings),
        most_exact=most_exact_award(standings),
        lowest=lowest_award(standings),
    )


def top_with_ties(standings: Sequence[Standing], limit: int) -> list[Standing]:
    """Return the first ``limit`` standings plus anyone tied at the cutoff."""

    if limit < 0:
        raise ValueError("limit must be non-negative")
    if limit == 0:
        return []

    winners: list[Standing] = []
    cutoff: Optional[int] = None
    for standing in _order(standings):
        if len(winners) < limit:
            winners.append(standing)
            cutoff = standing.total
            continue
        if standing.total == cutoff:
            winners.append(standing)
            continue
        break
    return winners


def entries_reaching(
    entry_totals: Mapping[Hashable, EntryTotal], min_points: int
) -> list[Hashable]:
    """Entry ids whose total reaches ``min_points``, sorted by id.

    Threshold products (a quiz paying out only to perfect cards) use this
    instead of the podium to find winners.
    """

    return sorted(
        (entry_id for entry_id, total in entry_totals.items() if total.total >= min_points),
        key=sort_key,
    )


__all__ = [
    "AwardBand",
    "RankedList",
    "Standing",
    "collapse_best_entries",
    "entries_reaching",
    "lowest_award",
    "most_exact_award",
    "podium_bands",
    "rank",
    "top_with_ties",
]
