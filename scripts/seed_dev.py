"""Seed the development database with a small settled pool and a group stage."""

from __future__ import annotations

import logging
from decimal import Decimal

from poolsettle.config import load_ruleset
from poolsettle.db.engine import get_sessionmaker, make_engine
from poolsettle.models import Base, Entry, Fixture, Prediction, Round
from poolsettle.workflows import (
    draw_knockout_round,
    open_next_round,
    rescore_fixture,
    settle_podium_round,
)

GROUP_RESULTS = [
    ("A", "Lions", "Hawks", 2, 0),
    ("A", "Bears", "Wolves", 1, 1),
    ("A", "Lions", "Bears", 0, 1),
    ("B", "Sharks", "Eagles", 3, 2),
    ("B", "Tigers", "Foxes", 0, 0),
    ("B", "Sharks", "Tigers", 1, 2),
]

GUESSES = {
    "alice": [(2, 0), (1, 1), (1, 1), (3, 2), (1, 0), (0, 1)],
    "bob": [(1, 0), (0, 0), (0, 2), (2, 1), (0, 0), (1, 1)],
    "carol": [(0, 1), (2, 2), (0, 1), (1, 0), (2, 2), (1, 3)],
}


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    ruleset = load_ruleset()
    engine = make_engine()

    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    Session = get_sessionmaker(engine)

    with Session.begin() as session:
        group_round = Round(
            name="Group stage",
            product="score_pool",
            entry_fee=1000,
            admin_fee_percent=Decimal("10"),
            ruleset_version=ruleset.version,
        )
        session.add(group_round)
        session.flush()

        fixtures = []
        for group, home, away, _, _ in GROUP_RESULTS:
            fixture = Fixture(
                round_id=group_round.id,
                stage="group",
                group_name=group,
                home_team=home,
                away_team=away,
            )
            session.add(fixture)
            fixtures.append(fixture)
        session.flush()

        for participant, guesses in GUESSES.items():
            entry = Entry(round_id=group_round.id, participant_id=participant)
            session.add(entry)
            session.flush()
            for fixture, (home, away) in zip(fixtures, guesses):
                session.add(
                    Prediction(
                        fixture_id=fixture.id,
                        entry_id=entry.id,
                        home_score=home,
                        away_score=away,
                    )
                )
        session.flush()

        for fixture, (_, _, _, home, away) in zip(fixtures, GROUP_RESULTS):
            fixture.record_result(home_score=home, away_score=away)
            rescore_fixture(session, fixture, ruleset.scoring)

        settlement = settle_podium_round(session, group_round)
        knockout = open_next_round(session, group_round, "Knockout stage")
        report = draw_knockout_round(session, group_round, knockout, ruleset, seed=2024)

        print("Settlement:", settlement.to_json())
        for matchup in report.matchups:
            print(f"Knockout: {matchup.home.team} vs {matchup.away.team}")

    print("Development database seeded.")


if __name__ == "__main__":
    main()
