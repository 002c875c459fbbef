"""Rubric scoring: weighted total score and score-to-level mapping."""

from collections.abc import Iterable

from opic_evaluator.assessment.metrics import clamp01
from opic_evaluator.config import LevelThreshold, RubricConfig
from opic_evaluator.models.assessment import FeatureSet, LevelDecision, RubricScore
from opic_evaluator.models.level import Level

# Word and sentence counts at which the volume score saturates
VOLUME_FULL_WORDS = 180
VOLUME_FULL_SENTENCES = 8


def calibrate_cohesion_score(sentence_complexity: float, continuity_score: float) -> float:
    """Blend complexity (55%) and continuity (45%) into one cohesion score."""
    return clamp01(sentence_complexity * 0.55 + continuity_score * 0.45)


def calibrate_volume_score(word_count: int, sentence_count: int) -> float:
    """Score how much was said, 0-1.

    Args:
        word_count: Number of word tokens.
        sentence_count: Number of sentences.

    Returns:
        70% word volume, 30% sentence volume, clamped.
    """
    return clamp01(
        0.7 * (word_count / VOLUME_FULL_WORDS)
        + 0.3 * (sentence_count / VOLUME_FULL_SENTENCES)
    )


def compute_total_score(features: FeatureSet, rubric: RubricConfig) -> float:
    """Weighted rubric total minus repetition and sentence-length penalties.

    A transcript with no word tokens scores 0.0.
    """
    if features.word_count == 0:
        return 0.0
    w = rubric.weights
    p = rubric.penalties
    cohesion = calibrate_cohesion_score(
        features.sentence_complexity, features.continuity_score
    )
    volume = calibrate_volume_score(features.word_count, features.sentence_count)
    long_sentence_penalty = (
        p.long_sentence if features.average_sentence_length > p.long_sentence_words else 0.0
    )

    return clamp01(
        w.fluency * features.fluency_score
        + w.completion * features.sentence_completion_rate
        + w.cohesion * cohesion
        + w.lexical * features.lexical_variety
        + w.grammar * features.grammar_accuracy
        + w.volume * volume
        - p.repetition * features.repetition_penalty
        - long_sentence_penalty
    )


def map_score_to_level(score: float, thresholds: Iterable[LevelThreshold]) -> Level:
    """Map a total score to a level via the threshold table.

    Thresholds are scanned from highest to lowest; the first one the score
    meets or exceeds wins. Scores below every threshold map to the lowest level.
    """
    for entry in sorted(thresholds, key=lambda t: t.threshold, reverse=True):
        if score >= entry.threshold:
            return entry.level
    return Level.lowest()


def score_rubric(features: FeatureSet, rubric: RubricConfig) -> RubricScore:
    """Compute the rubric total and its base level."""
    total = compute_total_score(features, rubric)
    return RubricScore(
        total_score=total,
        level=map_score_to_level(total, rubric.thresholds),
        cohesion_score=calibrate_cohesion_score(
            features.sentence_complexity, features.continuity_score
        ),
        volume_score=calibrate_volume_score(features.word_count, features.sentence_count),
    )


def rubric_decision(rubric_score: RubricScore) -> LevelDecision:
    """Express the rubric's own reasoning as a level decision."""
    return LevelDecision(
        level=rubric_score.level,
        notes=[
            f"Weighted rubric score {rubric_score.total_score:.2f} maps to {rubric_score.level}.",
        ],
        reason=f"Weighted features place this response at {rubric_score.level}.",
        source="rubric",
    )
