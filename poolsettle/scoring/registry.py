"""Scoring algorithms keyed by fixture kind."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ..errors import InvalidFixture, InvalidPrediction
from ..rules import ScoringRules
from ..values import Fixture, FixtureKind, OutcomeTag, Prediction


@dataclass(frozen=True)
class ScoreEvaluation:
    """Result of scoring one prediction.

    Attributes
    ----------
    points : int
        Points awarded according to the injected rule table.
    tag : OutcomeTag
        Outcome tier the prediction fell into.
    """

    points: int
    tag: OutcomeTag


@dataclass(frozen=True)
class ScoringAlgorithm:
    """Definition of a scoring algorithm.

    Attributes
    ----------
    key : str
        Registry key, matching the :class:`FixtureKind` value it scores.
    scorer : Callable[[Prediction, Fixture, ScoringRules], ScoreEvaluation]
        Pure callable mapping a (prediction, result) pair to points and tag.
        The fixture is guaranteed to be finished when the scorer is called.
    description : Optional[str]
        Human-readable summary of the algorithm's behaviour.
    """

    key: str
    scorer: Callable[[Prediction, Fixture, ScoringRules], ScoreEvaluation]
    description: Optional[str] = None

    def evaluate(
        self, prediction: Prediction, fixture: Fixture, rules: ScoringRules
    ) -> ScoreEvaluation:
        return self.scorer(prediction, fixture, rules)


class AlgorithmRegistry:
    """Mutable registry mapping algorithm keys to definitions."""

    def __init__(self) -> None:
        self._algorithms: Dict[str, ScoringAlgorithm] = {}

    def register(self, algorithm: ScoringAlgorithm, *, replace: bool = False) -> None:
        """Register a scoring algorithm under its key.

        Parameters
        ----------
        algorithm : ScoringAlgorithm
            Algorithm to add to the registry.
        replace : bool, default: False
            When ``True`` an existing registration with the same key is
            overwritten. Otherwise a duplicate raises :class:`ValueError`.
        """
        if not replace and algorithm.key in self._algorithms:
            raise ValueError(f"Algorithm '{algorithm.key}' is already registered")
        self._algorithms[algorithm.key] = algorithm

    def get(self, key: str) -> ScoringAlgorithm:
        """Return the algorithm registered under ``key``."""
        try:
            return self._algorithms[key]
        except KeyError as exc:
            raise KeyError(f"Unknown scoring algorithm '{key}'") from exc

    def available_algorithms(self) -> Dict[str, ScoringAlgorithm]:
        """Return a copy of the registered algorithms keyed by identifier."""
        return dict(self._algorithms)


def _is_score(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _result_category(home: int, away: int) -> str:
    if home > away:
        return "home"
    if home < away:
        return "away"
    return "draw"


def _score_pair(
    prediction: Prediction, fixture: Fixture, rules: ScoringRules
) -> ScoreEvaluation:
    """Exact score, then optional goal-difference tier, then result category."""

    if not (_is_score(fixture.home_score) and _is_score(fixture.away_score)):
        raise InvalidFixture(fixture.id, "finished match needs both scores")
    if prediction.home_score is None or prediction.away_score is None:
        raise InvalidPrediction(
            prediction.entry_id, fixture.id, "both home and away scores are required"
        )
    if not (_is_score(prediction.home_score) and _is_score(prediction.away_score)):
        raise InvalidPrediction(
            prediction.entry_id, fixture.id, "scores must be non-negative integers"
        )

    pred_home, pred_away = prediction.home_score, prediction.away_score
    actual_home, actual_away = fixture.home_score, fixture.away_score

    if pred_home == actual_home and pred_away == actual_away:
        return ScoreEvaluation(rules.exact, OutcomeTag.EXACT)

    if _result_category(pred_home, pred_away) != _result_category(actual_home, actual_away):
        return ScoreEvaluation(rules.wrong, OutcomeTag.WRONG)

    if (
        rules.correct_difference is not None
        and pred_home - pred_away == actual_home - actual_away
    ):
        return ScoreEvaluation(rules.correct_difference, OutcomeTag.CORRECT_DIFFERENCE)
    return ScoreEvaluation(rules.correct_outcome, OutcomeTag.CORRECT_OUTCOME)


def _single_choice(
    prediction: Prediction, fixture: Fixture, rules: ScoringRules
) -> ScoreEvaluation:
    """Binary scoring: the selected option either is the correct one or not."""

    if not fixture.correct_option:
        raise InvalidFixture(fixture.id, "finished question needs a correct option")
    if not isinstance(prediction.selected_option, str) or not prediction.selected_option:
        raise InvalidPrediction(
            prediction.entry_id, fixture.id, "an option must be selected"
        )
    if prediction.selected_option == fixture.correct_option:
        return ScoreEvaluation(rules.choice, OutcomeTag.EXACT)
    return ScoreEvaluation(rules.wrong, OutcomeTag.WRONG)


DEFAULT_SCORING_REGISTRY = AlgorithmRegistry()
DEFAULT_SCORING_REGISTRY.register(
    ScoringAlgorithm(
        key=FixtureKind.SCORE.value,
        scorer=_score_pair,
        description=(
            "Exact score earns the top tier; the same result category earns the "
            "outcome tier (or the goal-difference tier when enabled); anything "
            "else earns nothing."
        ),
    )
)
DEFAULT_SCORING_REGISTRY.register(
    ScoringAlgorithm(
        key=FixtureKind.CHOICE.value,
        scorer=_single_choice,
        description="Full points when the selected option is correct, else 0.",
    )
)

__all__ = [
    "AlgorithmRegistry",
    "DEFAULT_SCORING_REGISTRY",
    "ScoreEvaluation",
    "ScoringAlgorithm",
]
