"""Pure evaluation of predictions against finished fixtures."""

from __future__ import annotations

import dataclasses
import logging
from typing import Iterable, Optional

from ..errors import FixtureNotFinished, InvalidPrediction
from ..rules import ScoringRules
from ..values import Fixture, FixtureKind, Prediction
from .registry import AlgorithmRegistry, DEFAULT_SCORING_REGISTRY, ScoreEvaluation

logger = logging.getLogger(__name__)


def evaluate(
    prediction: Prediction,
    fixture: Fixture,
    rules: ScoringRules,
    *,
    registry: Optional[AlgorithmRegistry] = None,
) -> ScoreEvaluation:
    """Score ``prediction`` against the final result of ``fixture``.

    Parameters
    ----------
    prediction : Prediction
        Guess to score. Any previously stored ``points``/``tag`` are ignored.
    fixture : Fixture
        Fixture carrying the actual result. Must be finished.
    rules : ScoringRules
        Point values for each outcome tier.
    registry : Optional[AlgorithmRegistry], default: None
        Registry to resolve the scorer from. Typically omitted, in which case
        :data:`DEFAULT_SCORING_REGISTRY` is used.

    Returns
    -------
    ScoreEvaluation
        Points and outcome tag. Calling this twice with the same inputs
        always yields the same value.

    Raises
    ------
    FixtureNotFinished
        If ``fixture`` has no final result yet.
    InvalidPrediction
        If the guess does not match the fixture or is malformed.
    InvalidFixture
        If the finished fixture carries no usable result.
    """

    if prediction.fixture_id != fixture.id:
        raise InvalidPrediction(
            prediction.entry_id,
            fixture.id,
            f"prediction belongs to fixture {prediction.fixture_id!r}",
        )
    if not fixture.finished:
        raise FixtureNotFinished(fixture.id)

    kind = fixture.kind.value if isinstance(fixture.kind, FixtureKind) else str(fixture.kind)
    algorithm = (registry or DEFAULT_SCORING_REGISTRY).get(kind)
    return algorithm.evaluate(prediction, fixture, rules)


def score_prediction(
    prediction: Prediction,
    fixture: Fixture,
    rules: ScoringRules,
    *,
    registry: Optional[AlgorithmRegistry] = None,
) -> Prediction:
    """Return a copy of ``prediction`` with ``points`` and ``tag`` overwritten."""

    evaluation = evaluate(prediction, fixture, rules, registry=registry)
    return dataclasses.replace(prediction, points=evaluation.points, tag=evaluation.tag)


def score_predictions(
    predictions: Iterable[Prediction],
    fixture: Fixture,
    rules: ScoringRules,
    *,
    registry: Optional[AlgorithmRegistry] = None,
) -> list[Prediction]:
    """Score every prediction tied to ``fixture``.

    Re-running after an administrative correction of the result replaces the
    previous values; nothing is accumulated across runs.
    """

    scored = [
        score_prediction(prediction, fixture, rules, registry=registry)
        for prediction in predictions
    ]
    logger.debug("Scored %d predictions for fixture %r", len(scored), fixture.id)
    return scored


__all__ = ["evaluate", "score_prediction", "score_predictions"]
