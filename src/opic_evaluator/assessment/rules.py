"""Tiered level rules that refine or override the rubric base level.

Three tiers run against the same FeatureSet:

- novice: word lists, memorized fragments and basic sentences (NL, NM, NH)
- advanced: connected multi-sentence discourse (IH, AL)
- intermediate: banding inside IL..IM3, used only as a refinement

Novice and advanced decisions override the rubric outright, in that order.
The intermediate decision replaces the rubric level only when it names an
intermediate band or outranks the rubric level.
"""

from collections.abc import Callable

import structlog

from opic_evaluator.models.assessment import FeatureSet, LevelDecision
from opic_evaluator.models.level import INTERMEDIATE_BANDS, Level

logger = structlog.get_logger()

OverrideRule = Callable[[FeatureSet], LevelDecision | None]


def check_novice(features: FeatureSet) -> LevelDecision | None:
    """Detect novice-band output.

    Args:
        features: Extracted transcript features.

    Returns:
        NL for word lists, NM when most memorized-speech signals fire,
        NH for short but complete basic sentences, None otherwise.
    """
    f = features

    no_complete_sentences = f.sentence_completion_rate < 0.25
    mostly_isolated = f.average_sentence_length <= 3.5 and f.sentence_count <= 2
    extremely_limited = f.word_count < 15

    if no_complete_sentences and mostly_isolated and extremely_limited:
        return LevelDecision(
            level=Level.NL,
            notes=[
                "Almost no complete sentences; the response is mostly isolated words.",
                "Fewer than 15 words were produced, so the message does not carry on.",
            ],
            reason="Speech stays at the level of listed words, so it was rated NL.",
            source="novice",
        )

    signals = {
        "Sentences are short, isolated phrases of a few words.": (
            3 < f.average_sentence_length <= 6
        ),
        "Vocabulary is narrow and repetitive, suggesting memorized phrases.": (
            f.lexical_variety < 0.35
        ),
        "Few complete sentences (subject plus verb) were detected.": (
            f.sentence_completion_rate < 0.45
        ),
        "Frequent fillers and hesitation break up the delivery.": f.filler_rate > 0.15,
    }
    fired = [note for note, hit in signals.items() if hit]
    if len(fired) >= 3:
        return LevelDecision(
            level=Level.NM,
            notes=fired,
            reason="Short templated phrases and frequent hesitation point to NM.",
            source="novice",
        )

    predictable_sentences = f.sentence_completion_rate >= 0.5
    handles_basics = f.word_count >= 40 and f.sentence_count >= 3
    beyond_memorized = f.lexical_variety >= 0.38
    below_intermediate_volume = f.word_count < 50

    if predictable_sentences and handles_basics and beyond_memorized and below_intermediate_volume:
        return LevelDecision(
            level=Level.NH,
            notes=[
                "Short but complete sentences were detected.",
                "Enough words and sentences for basic functions, "
                "but the response length is still limited.",
            ],
            reason="Basic sentences are strung together, so it was rated NH.",
            source="novice",
        )

    return None


def check_advanced(features: FeatureSet) -> LevelDecision | None:
    """Detect connected, expanded discourse (IH) and its stricter AL form."""
    f = features

    coherent_multi_sentence = (
        f.sentence_count >= 5
        and f.average_sentence_length >= 10
        and f.fluency_score >= 0.55
        and f.continuity_score >= 0.5
    )
    expanded_sentences = f.sentence_complexity >= 0.6 and f.average_sentence_length >= 12
    solid_vocabulary = f.lexical_variety >= 0.6

    if not (coherent_multi_sentence and expanded_sentences and solid_vocabulary):
        return None

    notes = [
        "Connected discourse: several sentences are linked to expand the topic.",
        "Long sentences keep lexical variety and use subordinate clauses.",
    ]

    connected_discourse = (
        f.sentence_count >= 6 and f.connector_density >= 0.45 and f.continuity_score >= 0.58
    )
    narrates_across_time = f.time_marker_hits >= 2 and f.word_count >= 140
    high_control = (
        f.grammar_accuracy >= 0.72
        and f.lexical_variety >= 0.64
        and f.fluency_score >= 0.62
        and f.word_count >= 160
    )

    if connected_discourse and narrates_across_time and high_control:
        return LevelDecision(
            level=Level.AL,
            notes=notes + [
                "Time-framed narration moves naturally between past and future with ample length.",
                "Grammar and vocabulary stay under control in long, complex sentences.",
            ],
            reason="Ample length, connected discourse and accuracy point to AL.",
            source="advanced",
        )

    return LevelDecision(
        level=Level.IH,
        notes=notes,
        reason="Sentences are connected to expand the topic, so it was rated IH.",
        source="advanced",
    )


def _word_band(word_count: int) -> str:
    if word_count < 50:
        return "low"
    return "mid" if word_count <= 150 else "high"


def _sentence_band(sentence_count: int) -> str:
    if sentence_count < 3:
        return "low"
    return "mid" if sentence_count <= 6 else "high"


def _structure_band(sentence_complexity: float) -> str:
    if sentence_complexity >= 0.58:
        return "complex"
    return "compound" if sentence_complexity >= 0.48 else "simple"


def check_intermediate(features: FeatureSet, fallback: Level) -> LevelDecision:
    """Place a response within the intermediate bands.

    Args:
        features: Extracted transcript features.
        fallback: Level to return when no band applies, normally the
            rubric base level.

    Returns:
        A decision for IL, IM1, IM2 or IM3, or for ``fallback``.
    """
    f = features
    has_time_shift = f.time_marker_hits >= 1

    meets_floor = (
        f.sentence_completion_rate >= 0.5
        and _word_band(f.word_count) != "low"
        and _sentence_band(f.sentence_count) != "low"
    )
    if not meets_floor:
        return LevelDecision(
            level=fallback,
            notes=[
                "Response length is too limited (few words or sentences) "
                "to place it in an intermediate band.",
            ],
            reason="Limited length and sentence completion keep the calculated level.",
            source="intermediate",
        )

    simple_delivery = (
        f.average_sentence_length < 7
        or f.connector_density < 0.22
        or f.lexical_variety < 0.42
        or f.filler_rate > 0.18
    )
    if simple_delivery:
        return LevelDecision(
            level=Level.IL,
            notes=[
                "Mostly short simple sentences listed one after another; linking is weak.",
                "Adding basic connectors and tense markers would lift the level quickly.",
            ],
            reason="Weak linking and limited vocabulary correspond to IL.",
            source="intermediate",
        )

    if (
        f.word_count >= 110
        and f.sentence_count >= 5
        and _structure_band(f.sentence_complexity) != "simple"
        and f.connector_density >= 0.4
        and f.continuity_score >= 0.55
        and f.lexical_variety >= 0.52
        and f.grammar_accuracy >= 0.6
        and f.fluency_score >= 0.6
        and has_time_shift
    ):
        return LevelDecision(
            level=Level.IM3,
            notes=[
                "Connectors and time expressions expand the answer into a stable paragraph.",
                "Vocabulary range and fluency are upper-intermediate or better.",
            ],
            reason="Paragraph-length, connected discourse places this at IM3.",
            source="intermediate",
        )

    if (
        f.word_count >= 80
        and f.sentence_count >= 4
        and f.connector_density >= 0.32
        and f.continuity_score >= 0.48
        and f.lexical_variety >= 0.48
        and f.sentence_complexity >= 0.52
        and f.fluency_score >= 0.55
        and has_time_shift
    ):
        return LevelDecision(
            level=Level.IM2,
            notes=[
                "Basic connectors and tense shifts are used to expand the content.",
                "Complete-sentence ratio and fluency stay stable.",
            ],
            reason="Connectors and tense shifts are woven in naturally, so it was rated IM2.",
            source="intermediate",
        )

    if (
        f.word_count >= 60
        and f.sentence_count >= 3
        and f.connector_density >= 0.24
        and f.sentence_complexity >= 0.44
        and f.fluency_score >= 0.5
        and f.lexical_variety >= 0.44
    ):
        return LevelDecision(
            level=Level.IM1,
            notes=[
                "A short paragraph introduces the topic with simple description.",
                "The share of complete sentences reaches a middle level.",
            ],
            reason="The topic is introduced and simply described, so it was rated IM1.",
            source="intermediate",
        )

    return LevelDecision(
        level=fallback,
        notes=["Intermediate band criteria agree with the calculated level."],
        reason="The calculated score matches the intermediate criteria, so the base level is kept.",
        source="intermediate",
    )


OVERRIDE_RULES: tuple[OverrideRule, ...] = (check_novice, check_advanced)


def resolve_level(features: FeatureSet, base: LevelDecision) -> LevelDecision:
    """Resolve the final decision from the rule tiers and the rubric base.

    Args:
        features: Extracted transcript features.
        base: The rubric's own decision.

    Returns:
        The first override rule's decision; else the intermediate decision if
        it names an intermediate band or outranks the base; else ``base``.
    """
    for rule in OVERRIDE_RULES:
        decision = rule(features)
        if decision is not None:
            logger.debug("rule_matched", tier=decision.source, level=decision.level.value)
            return decision

    intermediate = check_intermediate(features, fallback=base.level)
    if intermediate.level in INTERMEDIATE_BANDS or intermediate.level.outranks(base.level):
        logger.debug("rule_matched", tier="intermediate", level=intermediate.level.value)
        return intermediate

    return base
