"""Pure settlement engine for prediction pools and tournaments.

The top-level names cover the engine; persistence helpers live in
:mod:`poolsettle.models` and :mod:`poolsettle.workflows`.
"""

from .aggregation import EntryTotal, RoundScope, aggregate
from .bracket import (
    DrawReport,
    GroupStanding,
    Matchup,
    QualifiedTeam,
    compute_standings,
    draw,
    generate_matchups,
    qualify,
)
from .errors import (
    ConfigurationError,
    FixtureNotFinished,
    InvalidFixture,
    InvalidPrediction,
    SettlementError,
    UnreconciledSettlement,
)
from .ranking import AwardBand, RankedList, Standing, entries_reaching, rank, top_with_ties
from .rules import DrawRules, RoundConfig, RuleSet, ScoringRules
from .scoring import evaluate, score_prediction, score_predictions
from .settlement import AccumulationTrigger, PrizeOutcome, next_round_config, settle
from .values import Entry, EntryStatus, Fixture, FixtureKind, OutcomeTag, Prediction

__version__ = "0.1.0"

__all__ = [
    "AccumulationTrigger",
    "AwardBand",
    "ConfigurationError",
    "DrawReport",
    "DrawRules",
    "Entry",
    "EntryStatus",
    "EntryTotal",
    "Fixture",
    "FixtureKind",
    "FixtureNotFinished",
    "GroupStanding",
    "InvalidFixture",
    "InvalidPrediction",
    "Matchup",
    "OutcomeTag",
    "Prediction",
    "PrizeOutcome",
    "QualifiedTeam",
    "RankedList",
    "RoundConfig",
    "RoundScope",
    "RuleSet",
    "ScoringRules",
    "SettlementError",
    "Standing",
    "UnreconciledSettlement",
    "aggregate",
    "compute_standings",
    "draw",
    "entries_reaching",
    "evaluate",
    "generate_matchups",
    "next_round_config",
    "qualify",
    "rank",
    "score_prediction",
    "score_predictions",
    "settle",
    "top_with_ties",
]
