"""Linguistic surface metrics for rule-based level evaluation."""

import re
from collections import Counter
from functools import lru_cache

from opic_evaluator.analysis.transcript import PreparedTranscript
from opic_evaluator.assessment.lexicon import DEFAULT_LEXICON, Lexicon
from opic_evaluator.models.assessment import FeatureSet

# Sentence length (in words) at which the length contribution saturates
LENGTH_SATURATION_WORDS = 18.0


def clamp01(value: float) -> float:
    return min(1.0, max(0.0, value))


@lru_cache(maxsize=256)
def _phrase_pattern(phrase: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(phrase)}\b")


def count_fillers(text: str, fillers: frozenset[str] = DEFAULT_LEXICON.fillers) -> int:
    """Count filler words/phrases on whole-word boundaries.

    Each distinct filler is counted independently and the counts are summed.
    """
    lowered = text.lower()
    return sum(len(_phrase_pattern(f).findall(lowered)) for f in fillers)


def count_time_markers(
    text: str, markers: frozenset[str] = DEFAULT_LEXICON.time_markers
) -> int:
    """Count literal substring occurrences of time-reference markers."""
    lowered = text.lower()
    return sum(lowered.count(m) for m in markers)


def is_complete_sentence(words: list[str], lexicon: Lexicon = DEFAULT_LEXICON) -> bool:
    """A sentence is complete with 3+ words, a subject word and a verb-like word."""
    if len(words) < 3:
        return False
    has_subject = any(w in lexicon.subjects for w in words)
    return has_subject and any(lexicon.is_verb(w) for w in words)


def compute_repetition_penalty(tokens: list[str]) -> float:
    """Penalize transcripts where a single word dominates.

    Returns:
        0 when the most frequent token stays under 18% of all tokens,
        growing linearly to 1.
    """
    if not tokens:
        return 0.0
    max_count = Counter(tokens).most_common(1)[0][1]
    ratio = max_count / len(tokens)
    return clamp01((ratio - 0.18) * 2)


def compute_sentence_complexity(
    connector_density: float,
    average_sentence_length: float,
    time_marker_hits: int,
    sentence_count: int,
) -> float:
    length_contribution = clamp01(average_sentence_length / LENGTH_SATURATION_WORDS)
    tense_contribution = _tense_contribution(time_marker_hits, sentence_count)
    return clamp01(
        connector_density * 0.55
        + length_contribution * 0.35
        + tense_contribution * 0.10
    )


def compute_continuity_score(
    connector_density: float, time_marker_hits: int, sentence_count: int
) -> float:
    tense_contribution = _tense_contribution(time_marker_hits, sentence_count)
    return clamp01(connector_density * 0.6 + tense_contribution * 0.4)


def compute_grammar_accuracy(
    sentence_completion_rate: float, filler_rate: float, sentence_complexity: float
) -> float:
    """Estimate grammatical control from completion and disfluency.

    Complexity above 0.68 carries a fixed 0.05 deduction.
    """
    complexity_deduction = 0.05 if sentence_complexity > 0.68 else 0.0
    return clamp01(
        1
        - (1 - sentence_completion_rate) * 0.6
        - filler_rate * 0.25
        - complexity_deduction
    )


def _tense_contribution(time_marker_hits: int, sentence_count: int) -> float:
    return clamp01(time_marker_hits / max(1, sentence_count))


def extract_features(
    prepared: PreparedTranscript, lexicon: Lexicon = DEFAULT_LEXICON
) -> FeatureSet:
    """Compute the full feature set for a tokenized transcript.

    Args:
        prepared: Output of ``prepare_transcript``.
        lexicon: Word lists to match against.

    Returns:
        FeatureSet. A transcript with no word tokens yields all-zero metrics.
    """
    tokens = prepared.tokens
    sentence_count = len(prepared.sentences)
    word_count = len(tokens)

    if word_count == 0:
        return FeatureSet(sentence_count=sentence_count)

    average_sentence_length = (
        word_count / sentence_count if sentence_count else float(word_count)
    )

    filler_count = count_fillers(prepared.normalized, lexicon.fillers)
    filler_rate = filler_count / word_count
    fluency_score = clamp01(1 - filler_rate * 3)

    complete = sum(
        1 for words in prepared.sentence_tokens if is_complete_sentence(words, lexicon)
    )
    sentence_completion_rate = complete / sentence_count if sentence_count else 0.0

    connector_count = sum(1 for t in tokens if t in lexicon.connectors)
    connector_density = (
        clamp01(connector_count / (sentence_count * 1.5)) if sentence_count else 0.0
    )

    time_marker_hits = count_time_markers(prepared.normalized, lexicon.time_markers)
    sentence_complexity = compute_sentence_complexity(
        connector_density, average_sentence_length, time_marker_hits, sentence_count
    )

    return FeatureSet(
        word_count=word_count,
        sentence_count=sentence_count,
        average_sentence_length=average_sentence_length,
        filler_count=filler_count,
        filler_rate=filler_rate,
        connector_count=connector_count,
        connector_density=connector_density,
        lexical_variety=clamp01(len(set(tokens)) / word_count),
        sentence_completion_rate=sentence_completion_rate,
        repetition_penalty=compute_repetition_penalty(tokens),
        time_marker_hits=time_marker_hits,
        fluency_score=fluency_score,
        sentence_complexity=sentence_complexity,
        continuity_score=compute_continuity_score(
            connector_density, time_marker_hits, sentence_count
        ),
        grammar_accuracy=compute_grammar_accuracy(
            sentence_completion_rate, filler_rate, sentence_complexity
        ),
    )
