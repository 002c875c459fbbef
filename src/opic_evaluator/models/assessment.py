"""Evaluation result models."""

from pydantic import BaseModel, ConfigDict, Field

from opic_evaluator.models.level import Level


class FeatureSet(BaseModel):
    """Surface metrics derived once per transcript.

    Counts are non-negative integers, every other field is clamped to [0, 1]
    except ``average_sentence_length`` and ``filler_rate``, which are raw ratios.
    ``filler_rate`` is unbounded above: fillers are matched on word boundaries,
    so one apostrophe-joined token such as "uh'um" can hold two of them.
    """

    model_config = ConfigDict(frozen=True)

    word_count: int = 0
    sentence_count: int = 0
    average_sentence_length: float = 0.0
    filler_count: int = 0
    filler_rate: float = 0.0
    connector_count: int = 0
    connector_density: float = 0.0
    lexical_variety: float = 0.0
    sentence_completion_rate: float = 0.0
    repetition_penalty: float = 0.0
    time_marker_hits: int = 0
    fluency_score: float = 0.0
    sentence_complexity: float = 0.0
    continuity_score: float = 0.0
    grammar_accuracy: float = 0.0


class EvaluationScores(BaseModel):
    """Score subset shown alongside the level."""

    model_config = ConfigDict(frozen=True)

    sentence_completion_rate: float = 0.0
    sentence_complexity: float = 0.0
    fluency_score: float = 0.0
    lexical_variety: float = 0.0
    grammar_accuracy: float = 0.0

    @classmethod
    def from_features(cls, features: FeatureSet) -> "EvaluationScores":
        return cls(
            sentence_completion_rate=features.sentence_completion_rate,
            sentence_complexity=features.sentence_complexity,
            fluency_score=features.fluency_score,
            lexical_variety=features.lexical_variety,
            grammar_accuracy=features.grammar_accuracy,
        )


class RubricScore(BaseModel):
    """Weighted rubric total and the base level it maps to."""

    model_config = ConfigDict(frozen=True)

    total_score: float
    level: Level
    cohesion_score: float = 0.0
    volume_score: float = 0.0


class LevelDecision(BaseModel):
    """Outcome of one rule tier (or of the rubric itself)."""

    model_config = ConfigDict(frozen=True)

    level: Level
    notes: list[str] = Field(default_factory=list)
    reason: str = ""
    source: str = "rubric"  # "novice", "advanced", "intermediate", "rubric"


class EvaluationResult(BaseModel):
    """Final output of a transcript evaluation."""

    model_config = ConfigDict(frozen=True)

    level: Level
    resolved_level: Level
    base_level: Level
    total_score: float
    scores: EvaluationScores
    features: FeatureSet
    notes: list[str] = Field(default_factory=list)
    reason_summary: str = ""
    decided_by: str = "rubric"
    word_count: int = 0
    sentence_count: int = 0
    filler_rate: float = 0.0
    average_sentence_length: float = 0.0
    target_level: Level | None = None
