"""Rule-based OPIc level evaluation engine."""

import structlog

from opic_evaluator.analysis.feedback import assemble_result
from opic_evaluator.analysis.transcript import prepare_transcript
from opic_evaluator.assessment.calibration import rubric_decision, score_rubric
from opic_evaluator.assessment.metrics import extract_features
from opic_evaluator.assessment.rules import resolve_level
from opic_evaluator.config import RubricConfig
from opic_evaluator.models.assessment import EvaluationResult
from opic_evaluator.models.level import Level

logger = structlog.get_logger()


class OpicEvaluator:
    """Classifies a transcript into an OPIc level.

    Holds only read-only configuration; an instance may be shared across callers.

    Args:
        rubric: Weights, thresholds and word lists. Defaults to the built-in rubric.
        collapse_novice_bands: Report NL, NM and NH uniformly as NM.
    """

    def __init__(
        self,
        rubric: RubricConfig | None = None,
        collapse_novice_bands: bool = False,
    ):
        self.rubric = rubric or RubricConfig()
        self.collapse_novice_bands = collapse_novice_bands

    def evaluate(self, transcript: str, target_level: Level | None = None) -> EvaluationResult:
        """Evaluate one transcript.

        Args:
            transcript: Full text of one spoken response.
            target_level: Learner-selected level; display only, never scored.

        Returns:
            EvaluationResult with level, scores, notes and counts.
        """
        prepared = prepare_transcript(transcript)
        features = extract_features(prepared, self.rubric.lexicon)
        rubric_score = score_rubric(features, self.rubric)
        decision = resolve_level(features, rubric_decision(rubric_score))

        result = assemble_result(
            features,
            rubric_score,
            decision,
            target_level=target_level,
            collapse_novice_bands=self.collapse_novice_bands,
        )

        logger.debug(
            "transcript_evaluated",
            level=result.level.value,
            base_level=result.base_level.value,
            decided_by=result.decided_by,
            total_score=round(result.total_score, 3),
            word_count=result.word_count,
            sentence_count=result.sentence_count,
        )

        return result


def evaluate_transcript(
    transcript: str,
    target_level: Level | None = None,
    rubric: RubricConfig | None = None,
) -> EvaluationResult:
    """Evaluate a transcript with a one-off evaluator."""
    return OpicEvaluator(rubric=rubric).evaluate(transcript, target_level=target_level)
