"""Lightweight text heuristics used by the offline quiz synthesizer."""
from __future__ import annotations

import re
from collections import Counter

KEY_TERM_LIMIT = 20
MIN_TERM_LENGTH = 5  # "long word": more than 4 characters
MIN_SENTENCE_LENGTH = 21
PLACEHOLDER_SENTENCE = "Sample text from your study material"


def extract_key_terms(text: str, limit: int = KEY_TERM_LIMIT) -> list[str]:
    """Return the most frequent long words in *text*, most frequent first.

    Ties keep the order in which the words first appear.
    """
    cleaned = re.sub(r"[^a-z\s]", " ", text.lower())
    words = [w for w in cleaned.split() if len(w) >= MIN_TERM_LENGTH]
    return [word for word, _ in Counter(words).most_common(limit)]


def split_sentences(text: str) -> list[str]:
    """Split on runs of ``.!?`` and keep the trimmed sentences longer than 20 chars.

    Falls back to a single placeholder sentence so callers can always index
    into the result.
    """
    sentences = [s.strip() for s in re.split(r"[.!?]+", text)]
    sentences = [s for s in sentences if len(s) >= MIN_SENTENCE_LENGTH]
    return sentences or [PLACEHOLDER_SENTENCE]


def long_words(sentence: str) -> list[str]:
    return [w for w in sentence.split() if len(w) >= MIN_TERM_LENGTH]


def middle_long_word(sentence: str) -> str | None:
    words = long_words(sentence)
    if not words:
        return None
    return words[len(words) // 2]


def strip_punctuation(word: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "", word)


def capitalize(word: str) -> str:
    return word[:1].upper() + word[1:]
