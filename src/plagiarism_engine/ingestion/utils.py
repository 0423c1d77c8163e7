# src/plagiarism_engine/ingestion/utils.py
import re
from typing import List

from plagiarism_engine.models.plagiarism_models import NormalizedWord

_NON_WORD_RE = re.compile(r"[^\w\s']")
# apostrophe-only tokens, e.g. the ' in "rock ' roll"
_ISOLATED_APOSTROPHE_RE = re.compile(r"(?<!\S)'+(?!\S)")
_WHITESPACE_RE = re.compile(r"\s+")
_WORD_RE = re.compile(r"\b[\w']+\b")
_PARAGRAPH_BREAK_RE = re.compile(r"\n\s*\n")
_SENTENCE_END_RE = re.compile(r"[.!?]+")


def normalize_text(text: str) -> str:
    """
    Canonical form used for fingerprinting: punctuation replaced by spaces,
    isolated apostrophes dropped, whitespace collapsed, lower-cased.
    Apostrophes inside words ("don't") are kept.
    """
    if not text:
        return ""
    text = _NON_WORD_RE.sub(" ", text)
    text = _ISOLATED_APOSTROPHE_RE.sub(" ", text)
    text = _WHITESPACE_RE.sub(" ", text)
    # lower-case last: some characters expand when lowered and must not split a token
    return text.strip().lower()


def split_into_words(text: str) -> List[str]:
    return [w for w in normalize_text(text).split(" ") if w]


def get_word_positions(text: str) -> List[NormalizedWord]:
    """
    Scan the ORIGINAL text so offsets can be used for highlighting.

    The i-th entry corresponds to the i-th word of split_into_words(text);
    apostrophes are stripped from the comparison form.
    """
    if not text:
        return []
    return [
        NormalizedWord(
            word=m.group(0).lower().replace("'", ""),
            char_start=m.start(),
            char_end=m.end(),
        )
        for m in _WORD_RE.finditer(text)
    ]


def word_count(text: str) -> int:
    return len(split_into_words(text))


def split_paragraphs(text: str, min_chars: int = 0) -> List[str]:
    """Blank-line delimited paragraphs, stripped, at least `min_chars` long."""
    if not text:
        return []
    paragraphs = (p.strip() for p in _PARAGRAPH_BREAK_RE.split(text))
    return [p for p in paragraphs if p and len(p) >= min_chars]


def split_sentences(text: str) -> List[str]:
    """
    Minimal splitter on terminal punctuation.
    Good enough for sentence-length statistics, not for linguistic work.
    """
    if not text:
        return []
    return [s.strip() for s in _SENTENCE_END_RE.split(text) if s.strip()]
