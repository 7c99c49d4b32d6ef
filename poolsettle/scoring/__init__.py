"""Scoring rule evaluation for score-pair and single-choice fixtures."""

from .evaluator import evaluate, score_prediction, score_predictions
from .registry import (
    AlgorithmRegistry,
    DEFAULT_SCORING_REGISTRY,
    ScoreEvaluation,
    ScoringAlgorithm,
)

__all__ = [
    "AlgorithmRegistry",
    "DEFAULT_SCORING_REGISTRY",
    "ScoreEvaluation",
    "ScoringAlgorithm",
    "evaluate",
    "score_prediction",
    "score_predictions",
]
