"""Assembly of evaluation notes, reason summary and the final result."""

from opic_evaluator.models.assessment import (
    EvaluationResult,
    EvaluationScores,
    FeatureSet,
    LevelDecision,
    RubricScore,
)
from opic_evaluator.models.level import Level, LevelBand

COLLAPSED_NOVICE_LEVEL = Level.NM
COLLAPSED_NOVICE_NOTE = "Novice bands (NL, NM, NH) are reported together as NM."


def build_metric_notes(features: FeatureSet) -> list[str]:
    """Render the fixed metric summary appended to every result."""
    f = features
    return [
        f"Sentence completion: {f.sentence_completion_rate * 100:.0f}% "
        "(share of sentences with a subject and a verb)",
        f"Connector density: {f.connector_density * 100:.0f}% / "
        f"time expressions: {f.time_marker_hits}",
        f"Average sentence length: {f.average_sentence_length:.1f} words "
        f"({f.sentence_count} sentences / {f.word_count} words)",
        f"Filler rate: {f.filler_rate * 100:.1f}%",
        f"Repetition penalty: {f.repetition_penalty * 100:.0f}%",
    ]


def assemble_result(
    features: FeatureSet,
    rubric_score: RubricScore,
    decision: LevelDecision,
    target_level: Level | None = None,
    collapse_novice_bands: bool = False,
) -> EvaluationResult:
    """Merge the winning decision, scores and metric notes into a result.

    Args:
        features: Extracted transcript features.
        rubric_score: Rubric total and base level.
        decision: Decision that won rule resolution.
        target_level: Learner-selected level, carried through for display.
        collapse_novice_bands: Report every novice level as NM.

    Returns:
        A new EvaluationResult.
    """
    notes = list(decision.notes)
    level = decision.level
    if collapse_novice_bands and level.band == LevelBand.NOVICE:
        level = COLLAPSED_NOVICE_LEVEL
        notes.append(COLLAPSED_NOVICE_NOTE)
    notes.extend(build_metric_notes(features))

    return EvaluationResult(
        level=level,
        resolved_level=decision.level,
        base_level=rubric_score.level,
        total_score=rubric_score.total_score,
        scores=EvaluationScores.from_features(features),
        features=features,
        notes=notes,
        reason_summary=decision.reason,
        decided_by=decision.source,
        word_count=features.word_count,
        sentence_count=features.sentence_count,
        filler_rate=features.filler_rate,
        average_sentence_length=features.average_sentence_length,
        target_level=target_level,
    )
