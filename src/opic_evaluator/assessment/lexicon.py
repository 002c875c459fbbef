"""Closed word lists used by the feature extractor."""

from pydantic import BaseModel, ConfigDict, field_validator

# Disfluency markers; multi-word entries are matched as whole phrases
FILLERS: frozenset[str] = frozenset({
    "um", "uh", "erm", "hmm", "like", "you know", "i mean",
    "sort of", "kind of", "well",
})

SUBJECT_WORDS: frozenset[str] = frozenset({
    "i", "you", "he", "she", "we", "they", "it", "my", "our", "their",
    "people", "someone", "everyone",
})

VERB_STEMS: frozenset[str] = frozenset({
    "am", "is", "are", "was", "were", "do", "did", "does", "have", "has",
    "had", "like", "love", "want", "need", "go", "went", "say", "said",
    "talk", "talked", "work", "worked", "study", "studied", "live", "lived",
    "travel", "traveled", "enjoy", "enjoyed", "think", "thought", "feel",
    "felt", "can", "could", "will", "would", "should",
})

CONNECTORS: frozenset[str] = frozenset({
    "and", "but", "so", "because", "since", "when", "while", "if",
    "although", "though", "before", "after", "that", "which", "who",
    "where", "however", "therefore", "meanwhile",
})

# Matched as literal substrings of the normalized text
TIME_MARKERS: frozenset[str] = frozenset({
    "yesterday", "last", "ago", "when i was", "before", "after",
    "tomorrow", "next", "future", "plan", "will", "would", "could",
})

VERB_SUFFIXES: tuple[str, ...] = ("ed", "ing")


class Lexicon(BaseModel):
    """Substitutable bundle of the word lists.

    Entries are stored lowercase; swapping a lexicon localizes the evaluator
    without touching the scoring logic.
    """

    model_config = ConfigDict(frozen=True)

    fillers: frozenset[str] = FILLERS
    subjects: frozenset[str] = SUBJECT_WORDS
    verb_stems: frozenset[str] = VERB_STEMS
    connectors: frozenset[str] = CONNECTORS
    time_markers: frozenset[str] = TIME_MARKERS
    verb_suffixes: tuple[str, ...] = VERB_SUFFIXES

    @field_validator("fillers", "subjects", "verb_stems", "connectors", "time_markers", mode="before")
    @classmethod
    def _lowercase_entries(cls, value):
        if isinstance(value, str):
            value = [value]
        return frozenset(" ".join(str(v).lower().split()) for v in value)

    def is_verb(self, word: str) -> bool:
        return word in self.verb_stems or word.endswith(self.verb_suffixes)


DEFAULT_LEXICON = Lexicon()
