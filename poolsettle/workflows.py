"""Reference orchestration layer: load rows, call the pure engine, persist results.

The engine modules never touch a session. These helpers show how a storage
backend drives them; callers own the transaction and must serialise settlement
per round.
"""

import logging
from typing import Iterable, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from .aggregation import EntryTotal, RoundScope, aggregate
from .bracket import DrawReport, compute_standings, draw, qualify
from .models import Entry, Fixture, Prediction, Round, RoundSettlement
from .ranking import RankedList, entries_reaching, rank
from .rules import RuleSet, ScoringRules
from .scoring import AlgorithmRegistry, score_predictions
from .settlement import AccumulationTrigger, settle
from .values import EntryStatus, FixtureKind, OutcomeTag

logger = logging.getLogger(__name__)


def _round_fixtures(session: Session, round_: Round) -> list[Fixture]:
    stmt = select(Fixture).where(Fixture.round_id == round_.id).order_by(Fixture.id)
    return list(session.scalars(stmt).all())


def _round_entries(session: Session, round_: Round) -> list[Entry]:
    stmt = select(Entry).where(Entry.round_id == round_.id).order_by(Entry.id)
    return list(session.scalars(stmt).all())


def _round_predictions(session: Session, round_: Round) -> list[Prediction]:
    stmt = (
        select(Prediction)
        .join(Fixture, Prediction.fixture_id == Fixture.id)
        .where(Fixture.round_id == round_.id)
    )
    return list(session.scalars(stmt).all())


def _fixture_predictions(session: Session, fixture: Fixture) -> list[Prediction]:
    stmt = (
        select(Prediction)
        .where(Prediction.fixture_id == fixture.id)
        .order_by(Prediction.id)
    )
    return list(session.scalars(stmt).all())


def rescore_fixture(
    session: Session,
    fixture: Fixture,
    rules: ScoringRules,
    *,
    registry: Optional[AlgorithmRegistry] = None,
) -> list[Prediction]:
    """Score every prediction of ``fixture`` and refresh the affected totals.

    Safe to call again after an administrator corrects the result: points are
    overwritten, never added.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    fixture : Fixture
        Finished fixture whose predictions should be (re)scored.
    rules : ScoringRules
        Point table of the round's product.
    registry : Optional[AlgorithmRegistry], default: None
        Custom scorer registry; the default one is used when omitted.

    Returns
    -------
    list[Prediction]
        The updated prediction rows.

    Raises
    ------
    FixtureNotFinished
        If the fixture has no final result yet.
    InvalidPrediction
        If a stored guess is malformed. No row is modified in that case.
    """

    rows = _fixture_predictions(session, fixture)
    scored = score_predictions(
        [row.to_value() for row in rows], fixture.to_value(), rules, registry=registry
    )
    for row, value in zip(rows, scored):
        row.apply_score(value)
    session.flush()

    refresh_entry_totals(session, session.get(Round, fixture.round_id))
    logger.info("Rescored %d predictions for fixture %s", len(rows), fixture.id)
    return rows


def refresh_entry_totals(session: Session, round_: Round) -> dict:
    """Recompute and store ``total_points``/``exact_count`` for a round's entries."""

    entries = _round_entries(session, round_)
    scope = RoundScope.of(
        (fixture.to_value() for fixture in _round_fixtures(session, round_)),
        (entry.to_value() for entry in entries),
    )
    totals = aggregate(
        (row.to_value() for row in _round_predictions(session, round_)), scope
    )
    for entry in entries:
        total = totals.get(entry.id, EntryTotal(entry.id))
        entry.total_points = total.total
        entry.exact_count = total.exact_count
    session.flush()
    return totals


def round_leaderboard(session: Session, round_: Round) -> RankedList:
    """Participant leaderboard of one round (best entry per participant)."""

    totals = refresh_entry_totals(session, round_)
    entries = {entry.id: entry for entry in _round_entries(session, round_)}
    return rank(
        totals,
        participant_of=lambda entry_id: entries[entry_id].participant_id,
        entry_number_of=lambda entry_id: entries[entry_id].entry_number,
    )


def overall_leaderboard(session: Session, rounds: Sequence[Round]) -> RankedList:
    """Leaderboard across several rounds, ranking each participant by the
    best single entry over the combined fixtures."""

    fixtures = [
        fixture.to_value()
        for round_ in rounds
        for fixture in _round_fixtures(session, round_)
    ]
    entries = [entry for round_ in rounds for entry in _round_entries(session, round_)]
    predictions = [
        row.to_value() for round_ in rounds for row in _round_predictions(session, round_)
    ]
    totals = aggregate(
        predictions, RoundScope.of(fixtures, (entry.to_value() for entry in entries))
    )
    by_id = {entry.id: entry for entry in entries}
    return rank(
        totals,
        participant_of=lambda entry_id: by_id[entry_id].participant_id,
        entry_number_of=lambda entry_id: by_id[entry_id].entry_number,
    )


def featured_club_trigger(round_: Round, fixture: Fixture) -> AccumulationTrigger:
    """Product rule of exact-score rounds: only a featured-club result pays.

    The pool accumulates when the featured club lost, or drew while the round
    does not reward draws.
    """

    if not fixture.is_finished or fixture.home_score is None or fixture.away_score is None:
        raise ValueError(f"Fixture {fixture.id} has no final result")
    if round_.featured_team is None:
        return AccumulationTrigger.NONE
    if round_.featured_team not in (fixture.home_team, fixture.away_team):
        raise ValueError(
            f"Featured team '{round_.featured_team}' does not play fixture {fixture.id}"
        )

    if fixture.home_score == fixture.away_score:
        return (
            AccumulationTrigger.NONE
            if round_.allow_draws
            else AccumulationTrigger.OUTCOME_DISALLOWED
        )

    if round_.featured_team == fixture.home_team:
        club_won = fixture.home_score > fixture.away_score
    else:
        club_won = fixture.away_score > fixture.home_score
    return AccumulationTrigger.NONE if club_won else AccumulationTrigger.OUTCOME_DISALLOWED


def exact_score_winners(session: Session, round_: Round, fixture: Fixture) -> list[int]:
    """Active entries whose prediction for ``fixture`` was exact."""

    active = {
        entry.id
        for entry in _round_entries(session, round_)
        if entry.status == EntryStatus.ACTIVE.value
    }
    return sorted(
        row.entry_id
        for row in _fixture_predictions(session, fixture)
        if row.entry_id in active and row.outcome_tag == OutcomeTag.EXACT.value
    )


def settle_round(
    session: Session,
    round_: Round,
    winners: Iterable[int],
    trigger: AccumulationTrigger = AccumulationTrigger.NONE,
) -> RoundSettlement:
    """Settle ``round_`` and upsert its :class:`RoundSettlement` row.

    Settling the same round again with the same inputs rewrites the row with
    identical amounts. The round moves to ``settled``.
    """

    participant_count = round_.active_entry_count(session)
    outcome = settle(round_.to_config(), list(winners), participant_count, trigger)

    row = RoundSettlement.get_for_round(session, round_.id)
    if row is None:
        row = RoundSettlement(round_id=round_.id, gross_pool=outcome.gross_pool)
        session.add(row)
    row.apply(outcome, participant_count)
    round_.advance_status("settled")
    session.flush()
    return row


def settle_exact_score_round(session: Session, round_: Round, fixture: Fixture) -> RoundSettlement:
    """Settle a single-club round: exact guesses win unless the club result blocks it."""

    return settle_round(
        session,
        round_,
        exact_score_winners(session, round_, fixture),
        featured_club_trigger(round_, fixture),
    )


def settle_quiz_round(session: Session, round_: Round) -> RoundSettlement:
    """Settle a quiz round: entries reaching ``winning_points`` share the pool."""

    if round_.winning_points is None:
        raise ValueError(f"Quiz round {round_.id} has no winning_points configured")
    totals = refresh_entry_totals(session, round_)
    return settle_round(session, round_, entries_reaching(totals, round_.winning_points))


def settle_podium_round(session: Session, round_: Round) -> RoundSettlement:
    """Settle a score-pool round: the best entries of the first podium band share the pool."""

    leaderboard = round_leaderboard(session, round_)
    first = leaderboard.band(1)
    winners = [member.entry_id for member in first.members] if first else []
    return settle_round(session, round_, winners)


def open_next_round(
    session: Session,
    settled_round: Round,
    name: str,
    *,
    entry_fee: Optional[int] = None,
) -> Round:
    """Create the round that follows ``settled_round``, carrying any rollover."""

    settlement = RoundSettlement.get_for_round(session, settled_round.id)
    if settlement is None:
        raise ValueError(f"Round {settled_round.id} has not been settled")

    next_round = Round(
        name=name,
        product=settled_round.product,
        round_number=settled_round.round_number + 1,
        entry_fee=settled_round.entry_fee if entry_fee is None else entry_fee,
        admin_fee_percent=settled_round.admin_fee_percent,
        previous_accumulated=settlement.to_outcome().carried_forward,
        allow_draws=settled_round.allow_draws,
        featured_team=settled_round.featured_team,
        winning_points=settled_round.winning_points,
        ruleset_version=settled_round.ruleset_version,
        previous_round_id=settled_round.id,
    )
    session.add(next_round)
    session.flush()
    return next_round


def draw_knockout_round(
    session: Session,
    group_round: Round,
    knockout_round: Round,
    ruleset: RuleSet,
    *,
    stage: str = "knockout",
    seed: Optional[int] = None,
) -> DrawReport:
    """Draw the knockout fixtures of ``knockout_round`` from ``group_round`` standings.

    Group membership is read from the ``group_name`` of the group fixtures.
    Generated matchups are persisted as new unfinished fixtures; an
    insufficient draw persists nothing and is reported through the returned
    :class:`DrawReport`.
    """

    group_fixtures = [
        fixture
        for fixture in _round_fixtures(session, group_round)
        if fixture.kind == FixtureKind.SCORE.value and fixture.group_name
    ]
    group_of: dict[str, str] = {}
    for fixture in group_fixtures:
        for team in (fixture.home_team, fixture.away_team):
            if team:
                group_of.setdefault(team, fixture.group_name)

    standings = compute_standings((f.to_value() for f in group_fixtures), group_of)
    qualified = qualify(standings, per_group=ruleset.qualifiers_per_group)
    report = draw(qualified, ruleset.draw, seed=seed)

    for matchup in report.matchups:
        session.add(
            Fixture(
                round_id=knockout_round.id,
                kind=FixtureKind.SCORE.value,
                stage=stage,
                home_team=matchup.home.team,
                away_team=matchup.away.team,
            )
        )
    session.flush()
    return report


__all__ = [
    "draw_knockout_round",
    "exact_score_winners",
    "featured_club_trigger",
    "open_next_round",
    "overall_leaderboard",
    "refresh_entry_totals",
    "rescore_fixture",
    "round_leaderboard",
    "settle_exact_score_round",
    "settle_podium_round",
    "settle_quiz_round",
    "settle_round",
]
