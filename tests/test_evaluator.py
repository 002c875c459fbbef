"""End-to-end tests for transcript evaluation."""

from pathlib import Path

import pytest

from opic_evaluator.assessment.lexicon import Lexicon
from opic_evaluator.assessment.rule_based import OpicEvaluator, evaluate_transcript
from opic_evaluator.config import RubricConfig, load_rubric
from opic_evaluator.models.assessment import EvaluationResult, FeatureSet
from opic_evaluator.models.level import Level

STRICT_RUBRIC = Path(__file__).resolve().parent.parent / "config" / "rubric.strict.yaml"

SHORT_TRANSCRIPT = "I go school yesterday. I like hamburger."

FILLER_FRAGMENT = "um like uh yeah"

NARRATIVE_TRANSCRIPT = (
    "Yesterday I visited my grandmother in the countryside because she had invited "
    "our whole family to celebrate her eightieth birthday together. Although the drive "
    "took almost four hours, I enjoyed watching the golden fields and quiet villages "
    "pass slowly outside the window. When we finally arrived, my cousins were already "
    "preparing a huge dinner, which included grilled fish, fresh vegetables, and "
    "homemade bread. However, the most memorable moment happened after dinner, when my "
    "grandmother shared stories about her childhood during difficult years. She "
    "explained that she walked several miles to school each morning, so I realized how "
    "fortunate my generation truly is today. Meanwhile, my younger brother recorded "
    "everything on his phone since he wants to create a short documentary about our "
    "family history. Next year I will travel abroad to study engineering, but I plan "
    "to return every summer before classes begin again. Therefore, this visit reminded "
    "me that staying connected with relatives matters more than any career achievement "
    "I could imagine."
)

SAMPLE_TRANSCRIPTS = [
    "",
    "   ",
    "123 456!!!",
    FILLER_FRAGMENT,
    SHORT_TRANSCRIPT,
    NARRATIVE_TRANSCRIPT,
    "yes yes yes yes yes yes yes yes",
    "I like my job because I work with people. I talk to them and I help them every day."
    "\nWhen I was young I wanted to be a doctor, but now I like this work.",
]

SCORE_FIELDS = [
    "connector_density",
    "lexical_variety",
    "sentence_completion_rate",
    "repetition_penalty",
    "fluency_score",
    "sentence_complexity",
    "continuity_score",
    "grammar_accuracy",
]


class TestEmptyInput:
    def test_empty_string(self):
        result = evaluate_transcript("")
        assert result.word_count == 0
        assert result.sentence_count == 0
        assert result.total_score == 0.0
        assert result.level == Level.lowest()
        assert result.features == FeatureSet()

    def test_non_linguistic_text(self):
        result = evaluate_transcript("123 456!!!")
        assert result.word_count == 0
        assert result.total_score == 0.0
        assert result.level == Level.NL


class TestScenarios:
    def test_short_simple_transcript(self):
        result = evaluate_transcript(SHORT_TRANSCRIPT)
        assert result.level in {Level.NH, Level.IL}
        assert result.word_count == 7
        assert result.sentence_count == 2
        assert any("limited" in note for note in result.notes)

    def test_short_simple_transcript_resolution(self):
        result = evaluate_transcript(SHORT_TRANSCRIPT)
        assert result.base_level == Level.IL
        assert result.level == Level.IL
        assert result.decided_by == "intermediate"

    def test_filler_fragment(self):
        result = evaluate_transcript(FILLER_FRAGMENT)
        assert result.level in {Level.NL, Level.NM}
        assert result.decided_by == "novice"
        assert any("isolated" in note for note in result.notes)
        assert any("complete sentences" in note for note in result.notes)

    def test_two_word_fragment_is_nl(self):
        result = evaluate_transcript("yeah um")
        assert result.level == Level.NL

    def test_connected_narrative(self):
        result = evaluate_transcript(NARRATIVE_TRANSCRIPT)
        assert result.word_count >= 150
        assert result.sentence_count >= 6
        assert result.level in {Level.IH, Level.AL}
        assert any("Connected discourse" in note for note in result.notes)

    def test_connected_narrative_reaches_al(self):
        result = evaluate_transcript(NARRATIVE_TRANSCRIPT)
        assert result.level == Level.AL
        assert result.base_level == Level.IH
        assert any("Time-framed narration" in note for note in result.notes)


class TestResultShape:
    @pytest.mark.parametrize("transcript", SAMPLE_TRANSCRIPTS)
    def test_scores_are_bounded(self, transcript):
        result = evaluate_transcript(transcript)
        assert 0.0 <= result.total_score <= 1.0
        for field in SCORE_FIELDS:
            assert 0.0 <= getattr(result.features, field) <= 1.0
        for value in result.scores.model_dump().values():
            assert 0.0 <= value <= 1.0
        for count in (
            result.word_count,
            result.sentence_count,
            result.features.filler_count,
            result.features.connector_count,
            result.features.time_marker_hits,
        ):
            assert isinstance(count, int)
            assert count >= 0

    @pytest.mark.parametrize("transcript", SAMPLE_TRANSCRIPTS)
    def test_deterministic(self, transcript):
        assert evaluate_transcript(transcript) == evaluate_transcript(transcript)

    def test_metric_notes_always_appended(self):
        result = evaluate_transcript(SHORT_TRANSCRIPT)
        tail = result.notes[-5:]
        assert tail[0].startswith("Sentence completion: 100%")
        assert tail[1] == "Connector density: 0% / time expressions: 1"
        assert tail[2] == "Average sentence length: 3.5 words (2 sentences / 7 words)"
        assert tail[3] == "Filler rate: 14.3%"
        assert tail[4] == "Repetition penalty: 21%"

    def test_reason_summary_is_one_line(self):
        result = evaluate_transcript(NARRATIVE_TRANSCRIPT)
        assert result.reason_summary
        assert "\n" not in result.reason_summary

    def test_result_is_frozen(self):
        result = evaluate_transcript(SHORT_TRANSCRIPT)
        with pytest.raises(Exception):
            result.level = Level.AL


class TestOpicEvaluator:
    def test_target_level_is_display_only(self):
        evaluator = OpicEvaluator()
        plain = evaluator.evaluate(SHORT_TRANSCRIPT)
        targeted = evaluator.evaluate(SHORT_TRANSCRIPT, target_level=Level.AL)
        assert targeted.target_level == Level.AL
        assert plain.target_level is None
        assert targeted.model_dump(exclude={"target_level"}) == plain.model_dump(
            exclude={"target_level"}
        )

    def test_collapse_novice_bands(self):
        evaluator = OpicEvaluator(collapse_novice_bands=True)
        result = evaluator.evaluate("")
        assert result.level == Level.NM
        assert result.resolved_level == Level.NL
        assert any("reported together as NM" in note for note in result.notes)

    def test_collapse_leaves_other_bands(self):
        evaluator = OpicEvaluator(collapse_novice_bands=True)
        result = evaluator.evaluate(NARRATIVE_TRANSCRIPT)
        assert result.level == result.resolved_level == Level.AL

    def test_instance_reuse_has_no_state(self):
        evaluator = OpicEvaluator()
        first = evaluator.evaluate(NARRATIVE_TRANSCRIPT)
        evaluator.evaluate(FILLER_FRAGMENT)
        assert evaluator.evaluate(NARRATIVE_TRANSCRIPT) == first

    def test_custom_lexicon_changes_fillers(self):
        rubric = RubricConfig(lexicon=Lexicon(fillers=["yeah"]))
        result = OpicEvaluator(rubric=rubric).evaluate(FILLER_FRAGMENT)
        assert result.features.filler_count == 1

    def test_strict_rubric_never_raises_base_level(self):
        strict = OpicEvaluator(rubric=load_rubric(STRICT_RUBRIC))
        default = OpicEvaluator()
        for transcript in SAMPLE_TRANSCRIPTS:
            assert (
                strict.evaluate(transcript).base_level.rank
                <= default.evaluate(transcript).base_level.rank
            )

    def test_returns_evaluation_result(self):
        assert isinstance(evaluate_transcript(SHORT_TRANSCRIPT), EvaluationResult)
