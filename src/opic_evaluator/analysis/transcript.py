"""Transcript normalization, sentence splitting and word tokenization."""

import re

from pydantic import BaseModel, ConfigDict, Field

_WHITESPACE_RE = re.compile(r"\s+")
_SENTENCE_BREAK_RE = re.compile(r"[.!?]+|\n+")
_WORD_RE = re.compile(r"\b[a-z']+\b")


class PreparedTranscript(BaseModel):
    """Tokenized view of one transcript."""

    model_config = ConfigDict(frozen=True)

    normalized: str = ""
    sentences: list[str] = Field(default_factory=list)
    tokens: list[str] = Field(default_factory=list)
    sentence_tokens: list[list[str]] = Field(default_factory=list)


def normalize_text(text: str) -> str:
    """Collapse whitespace runs to single spaces and trim."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def split_sentences(text: str) -> list[str]:
    """Split text into sentences on terminal punctuation or line breaks.

    Args:
        text: Raw transcript text.

    Returns:
        Normalized, non-empty sentences. Text without any usable break is
        returned as a single sentence; empty text gives an empty list.
    """
    normalized = normalize_text(text)
    if not normalized:
        return []

    sentences = [normalize_text(part) for part in _SENTENCE_BREAK_RE.split(text)]
    sentences = [s for s in sentences if s]
    return sentences or [normalized]


def tokenize(text: str) -> list[str]:
    """Extract lowercase word tokens (letters and apostrophes only)."""
    return _WORD_RE.findall(text.lower())


def prepare_transcript(text: str) -> PreparedTranscript:
    """Run normalization, sentence splitting and tokenization in one pass."""
    sentences = split_sentences(text)
    return PreparedTranscript(
        normalized=normalize_text(text),
        sentences=sentences,
        tokens=tokenize(text),
        sentence_tokens=[tokenize(s) for s in sentences],
    )
