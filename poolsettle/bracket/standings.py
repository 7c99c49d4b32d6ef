"""Group-stage standings derived from finished fixtures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Hashable, Iterable, Mapping, Optional, Union

from ..values import Fixture, FixtureKind, sort_key

GroupOf = Union[Mapping[str, Hashable], Callable[[str], Optional[Hashable]]]

POINTS_PER_WIN = 3
POINTS_PER_DRAW = 1


@dataclass(frozen=True)
class GroupStanding:
    """One row of a group table. Derived, never stored."""

    team: str
    group: Hashable
    position: int
    played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    points: int = 0

    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against


@dataclass(frozen=True)
class QualifiedTeam:
    """A team advancing from the group stage.

    ``group`` and ``position`` are ``None`` for flat lists without a group
    structure.
    """

    team: str
    group: Optional[Hashable] = None
    position: Optional[int] = None

    @property
    def key(self) -> tuple:
        return (sort_key(self.group), self.position or 0, self.team)


class _Row:
    __slots__ = ("team", "group", "played", "wins", "draws", "losses", "gf", "ga")

    def __init__(self, team: str, group: Hashable) -> None:
        self.team = team
        self.group = group
        self.played = self.wins = self.draws = self.losses = self.gf = self.ga = 0

    def record(self, scored: int, conceded: int) -> None:
        self.played += 1
        self.gf += scored
        self.ga += conceded
        if scored > conceded:
            self.wins += 1
        elif scored < conceded:
            self.losses += 1
        else:
            self.draws += 1

    @property
    def points(self) -> int:
        return self.wins * POINTS_PER_WIN + self.draws * POINTS_PER_DRAW


def _group_resolver(group_of: GroupOf) -> Callable[[str], Optional[Hashable]]:
    if callable(group_of):
        return group_of
    return group_of.get


def compute_standings(
    fixtures: Iterable[Fixture], group_of: GroupOf
) -> dict[Hashable, list[GroupStanding]]:
    """Build ordered group tables.

    Parameters
    ----------
    fixtures : Iterable[Fixture]
        Group-stage fixtures. Only finished score fixtures add results; teams
        appearing solely in unfinished fixtures are listed with zero rows.
    group_of : Mapping or callable
        Resolves a team name to its group. Teams without a group are skipped.

    Returns
    -------
    dict
        Group id to standings ordered by points, goal difference and goals
        scored (all descending). Fixtures are processed in fixture-id order, so
        remaining ties keep the order in which teams first appear there and the
        result does not depend on the order of ``fixtures``.
    """

    resolve = _group_resolver(group_of)
    rows: dict[str, _Row] = {}

    def row_for(team: Optional[str]) -> Optional[_Row]:
        if not team:
            return None
        if team not in rows:
            group = resolve(team)
            if group is None:
                return None
            rows[team] = _Row(team, group)
        return rows[team]

    for fixture in sorted(fixtures, key=lambda f: sort_key(f.id)):
        home = row_for(fixture.home_team)
        away = row_for(fixture.away_team)
        if fixture.kind != FixtureKind.SCORE or not fixture.finished:
            continue
        if fixture.home_score is None or fixture.away_score is None:
            continue
        if home is not None:
            home.record(fixture.home_score, fixture.away_score)
        if away is not None:
            away.record(fixture.away_score, fixture.home_score)

    grouped: dict[Hashable, list[_Row]] = {}
    for row in rows.values():
        grouped.setdefault(row.group, []).append(row)

    tables: dict[Hashable, list[GroupStanding]] = {}
    for group in sorted(grouped, key=sort_key):
        ordered = sorted(
            grouped[group],
            key=lambda r: (-r.points, -(r.gf - r.ga), -r.gf),
        )
        tables[group] = [
            GroupStanding(
                team=row.team,
                group=group,
                position=index,
                played=row.played,
                wins=row.wins,
                draws=row.draws,
                losses=row.losses,
                goals_for=row.gf,
                goals_against=row.ga,
                points=row.points,
            )
            for index, row in enumerate(ordered, start=1)
        ]
    return tables


def qualify(
    standings: Mapping[Hashable, list[GroupStanding]], per_group: int = 2
) -> list[QualifiedTeam]:
    """Top ``per_group`` teams of every group, group by group."""

    if per_group < 1:
        raise ValueError("per_group must be at least 1")
    qualified: list[QualifiedTeam] = []
    for group in sorted(standings, key=sort_key):
        for standing in standings[group][:per_group]:
            qualified.append(
                QualifiedTeam(team=standing.team, group=group, position=standing.position)
            )
    return qualified


__all__ = ["GroupStanding", "QualifiedTeam", "compute_standings", "qualify"]
