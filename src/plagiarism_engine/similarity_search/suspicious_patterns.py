# src/plagiarism_engine/similarity_search/suspicious_patterns.py
"""
Evasion and style heuristics over the raw (not normalized) text.
Each detector returns at most one SuspiciousPattern.
"""

import re
from typing import List, Optional

import numpy as np

from plagiarism_engine.ingestion.utils import split_paragraphs, split_sentences
from plagiarism_engine.models.plagiarism_models import (
    SuspiciousPattern,
    SuspiciousPatternType,
    TextSpan,
)

# Latin look-alikes and zero-width characters
HOMOGLYPHS = {
    "\u0430": "Cyrillic a",
    "\u0435": "Cyrillic e",
    "\u043e": "Cyrillic o",
    "\u0440": "Cyrillic p",
    "\u0441": "Cyrillic c",
    "\u0445": "Cyrillic x",
    "\u0443": "Cyrillic y",
    "\u200b": "Zero-width space",
    "\u200c": "Zero-width non-joiner",
    "\u200d": "Zero-width joiner",
    "\ufeff": "Byte order mark",
}

INVISIBLE_RE = re.compile("[\u200b-\u200f\u2028-\u202f\u205f-\u206f\ufeff]")

STYLE_MIN_PARAGRAPH_CHARS = 100
STYLE_CV_THRESHOLD = 0.5
STYLE_CV_HIGH = 0.8


def detect_character_substitution(text: str) -> Optional[SuspiciousPattern]:
    positions = [TextSpan(start=i, end=i + 1) for i, ch in enumerate(text) if ch in HOMOGLYPHS]
    if not positions:
        return None

    count = len(positions)
    severity = 4 if count > 5 else 3 if count > 2 else 2
    return SuspiciousPattern(
        type=SuspiciousPatternType.CHARACTER_SUBSTITUTION,
        description=f"Found {count} suspicious character(s) that may be Unicode lookalikes",
        severity=severity,
        positions=positions,
    )


def detect_invisible_characters(text: str) -> Optional[SuspiciousPattern]:
    positions = [TextSpan(start=m.start(), end=m.end()) for m in INVISIBLE_RE.finditer(text)]
    if not positions:
        return None

    count = len(positions)
    severity = 5 if count > 10 else 4 if count > 5 else 3
    return SuspiciousPattern(
        type=SuspiciousPatternType.INVISIBLE_CHARACTERS,
        description=f"Found {count} invisible character(s) that may be used to evade detection",
        severity=severity,
        positions=positions,
    )


def mean_sentence_length(paragraph: str) -> float:
    sentences = split_sentences(paragraph)
    if not sentences:
        return 0.0
    return float(np.mean([len(s.split()) for s in sentences]))


def detect_style_inconsistency(text: str) -> Optional[SuspiciousPattern]:
    """
    Coefficient of variation of the per-paragraph mean sentence length.
    Document-wide, so the pattern carries no positions.
    """
    paragraphs = split_paragraphs(text, min_chars=STYLE_MIN_PARAGRAPH_CHARS)
    if len(paragraphs) < 2:
        return None

    lengths = np.array([mean_sentence_length(p) for p in paragraphs])
    mean = float(lengths.mean())
    if mean <= 0:
        return None

    # population standard deviation (ddof=0)
    cv = float(lengths.std()) / mean
    if cv <= STYLE_CV_THRESHOLD:
        return None

    return SuspiciousPattern(
        type=SuspiciousPatternType.INCONSISTENT_STYLE,
        description="Writing style varies significantly between paragraphs",
        severity=3 if cv > STYLE_CV_HIGH else 2,
        positions=[],
    )


def detect_suspicious_patterns(text: str) -> List[SuspiciousPattern]:
    if not text:
        return []
    found = (
        detect_character_substitution(text),
        detect_invisible_characters(text),
        detect_style_inconsistency(text),
    )
    return [p for p in found if p is not None]
