"""Knockout pairing of qualified teams."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from ..rules import DrawRules
from .standings import QualifiedTeam

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Matchup:
    """A knockout pairing; ``home`` hosts the fixture."""

    home: QualifiedTeam
    away: QualifiedTeam

    @property
    def same_group(self) -> bool:
        return self.home.group is not None and self.home.group == self.away.group


@dataclass(frozen=True)
class DrawReport:
    """Matchups plus the conditions an organiser may need to act on.

    Attributes
    ----------
    matchups : tuple[Matchup, ...]
        Generated pairings in fixture order.
    unpaired : tuple[QualifiedTeam, ...]
        Teams left without an opponent (odd counts).
    same_group_pairings : int
        Pairings that had to put two teams of one group together because no
        alternative remained. Same-group avoidance is best effort.
    insufficient_teams : bool
        ``True`` when fewer than two teams were supplied.
    """

    matchups: tuple[Matchup, ...] = ()
    unpaired: tuple[QualifiedTeam, ...] = ()
    same_group_pairings: int = 0
    insufficient_teams: bool = False


@dataclass
class _DrawState:
    rules: DrawRules
    rng: random.Random
    matchups: list[Matchup] = field(default_factory=list)
    used: set = field(default_factory=set)
    same_group: int = 0

    def pair(self, home: QualifiedTeam, away: QualifiedTeam) -> None:
        matchup = Matchup(home=home, away=away)
        if matchup.same_group:
            self.same_group += 1
            logger.warning(
                "No alternative opponent left: %s and %s (group %s) drawn together",
                home.team,
                away.team,
                home.group,
            )
        self.matchups.append(matchup)
        self.used.add(home.key)
        self.used.add(away.key)

    def swap_in(self, home: QualifiedTeam, away: QualifiedTeam) -> bool:
        """Trade opponents with an earlier matchup so neither pairing shares a group."""

        for index, existing in enumerate(self.matchups):
            if existing.away.group == home.group or existing.home.group == away.group:
                continue
            self.matchups[index] = Matchup(home=existing.home, away=away)
            self.matchups.append(Matchup(home=home, away=existing.away))
            self.used.add(home.key)
            self.used.add(away.key)
            return True
        return False

    def unused(self, teams: Iterable[QualifiedTeam]) -> list[QualifiedTeam]:
        return [team for team in teams if team.key not in self.used]

    def shuffled(self, teams: Sequence[QualifiedTeam]) -> list[QualifiedTeam]:
        copy = list(teams)
        self.rng.shuffle(copy)
        return copy


def has_group_structure(teams: Iterable[QualifiedTeam]) -> bool:
    return any(
        team.group is not None and team.position is not None and team.position > 0
        for team in teams
    )


def _pair_sequentially(
    state: _DrawState, teams: list[QualifiedTeam], *, avoid_same_group: bool
) -> list[QualifiedTeam]:
    """Pair neighbours, swapping in a later team to avoid a same-group pair.

    Returns the team left over when the count is odd.
    """

    for i in range(0, len(teams) - 1, 2):
        home = teams[i]
        if avoid_same_group and teams[i + 1].group == home.group:
            for j in range(i + 2, len(teams)):
                if teams[j].group != home.group:
                    teams[i + 1], teams[j] = teams[j], teams[i + 1]
                    break
        state.pair(home, teams[i + 1])
    return teams[-1:] if len(teams) % 2 else []


def _cross_group_pass(
    state: _DrawState, firsts: list[QualifiedTeam], seconds: list[QualifiedTeam]
) -> None:
    if state.rules.balance:
        firsts = state.shuffled(firsts)
        seconds = state.shuffled(seconds)

    for first in firsts:
        candidates = state.unused(seconds)
        if not candidates:
            break
        opponent: Optional[QualifiedTeam] = candidates[0]
        if state.rules.avoid_same_group:
            opponent = next((s for s in candidates if s.group != first.group), None)
            if opponent is None:
                if state.swap_in(first, candidates[0]):
                    continue
                opponent = candidates[0]
        state.pair(first, opponent)


def draw(
    qualified: Sequence[QualifiedTeam],
    rules: Optional[DrawRules] = None,
    *,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> DrawReport:
    """Draw knockout pairings and report anything the organiser should see.

    Parameters
    ----------
    qualified : Sequence[QualifiedTeam]
        Teams that advanced, annotated with group and finishing position.
    rules : Optional[DrawRules], default: None
        Pairing rules; all enabled when omitted.
    seed : Optional[int], default: None
        Seed for a private :class:`random.Random`. The same seed and input
        always yield the same bracket. When both ``seed`` and ``rng`` are
        omitted every call draws from a fresh generator.
    rng : Optional[random.Random], default: None
        Generator to use instead of creating one.

    Returns
    -------
    DrawReport
        Empty matchups with ``insufficient_teams`` set when fewer than two
        teams are supplied.

    Notes
    -----
    With a group structure, first-placed teams meet second-placed teams of a
    different group, trading opponents with an earlier pairing when only a
    same-group opponent is left; every remaining team is
    shuffled and paired by a second greedy pass that swaps in a later team to
    avoid a same-group pair. Without any group or position data the teams are
    shuffled and paired in order with no avoidance at all.
    """

    rules = rules or DrawRules()
    teams = sorted(qualified, key=lambda team: team.key)
    if len(teams) < 2:
        logger.warning("Cannot draw a knockout round with %d qualified team(s)", len(teams))
        return DrawReport(unpaired=tuple(teams), insufficient_teams=True)

    state = _DrawState(rules=rules, rng=rng or random.Random(seed))

    if not has_group_structure(teams):
        leftover = _pair_sequentially(state, state.shuffled(teams), avoid_same_group=False)
    else:
        firsts = [team for team in teams if team.position == 1]
        seconds = [team for team in teams if team.position == 2]
        others = [team for team in teams if team.position not in (1, 2)]

        if rules.cross_group and firsts and seconds:
            _cross_group_pass(state, firsts, seconds)

        remaining = state.shuffled(state.unused(firsts + seconds + others))
        leftover = _pair_sequentially(
            state, remaining, avoid_same_group=rules.avoid_same_group
        )

    logger.info(
        "Drew %d matchups from %d teams (%d same-group)",
        len(state.matchups),
        len(teams),
        state.same_group,
    )
    return DrawReport(
        matchups=tuple(state.matchups),
        unpaired=tuple(leftover),
        same_group_pairings=state.same_group,
    )


def generate_matchups(
    qualified: Sequence[QualifiedTeam],
    rules: Optional[DrawRules] = None,
    *,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> list[Matchup]:
    """Return only the pairings of :func:`draw`."""

    return list(draw(qualified, rules, seed=seed, rng=rng).matchups)


__all__ = [
    "DrawReport",
    "Matchup",
    "draw",
    "generate_matchups",
    "has_group_structure",
]
