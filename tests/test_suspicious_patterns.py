# tests/test_suspicious_patterns.py
import sys
import os

# Ensure src is in the path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from plagiarism_engine.models import SuspiciousPatternType
from plagiarism_engine.similarity_search.suspicious_patterns import (
    detect_character_substitution,
    detect_invisible_characters,
    detect_style_inconsistency,
    detect_suspicious_patterns,
)

SHORT_SENTENCES = "The cat sat. " * 10
LONG_SENTENCE = " ".join(["word"] * 40) + "."


def test_clean_text_has_no_patterns():
    assert detect_suspicious_patterns("A perfectly ordinary sentence.") == []
    assert detect_suspicious_patterns("") == []


def test_single_cyrillic_lookalike():
    text = "p\u0430yment"
    pattern = detect_character_substitution(text)
    assert pattern.type == SuspiciousPatternType.CHARACTER_SUBSTITUTION
    assert pattern.severity == 2
    assert [(p.start, p.end) for p in pattern.positions] == [(1, 2)]


def test_character_substitution_severity_scales():
    assert detect_character_substitution("\u0430\u0435\u043e").severity == 3
    assert detect_character_substitution("\u0430\u0435\u043e\u0440\u0441\u0445").severity == 4


def test_invisible_characters():
    pattern = detect_invisible_characters("a\u2060b")
    assert pattern.type == SuspiciousPatternType.INVISIBLE_CHARACTERS
    assert pattern.severity == 3
    assert detect_invisible_characters("x" + "\u2060" * 6).severity == 4
    assert detect_invisible_characters("\u2060" * 11).severity == 5
    assert detect_invisible_characters("plain") is None


def test_zero_width_space_triggers_both_checks():
    types = [p.type for p in detect_suspicious_patterns("zero\u200bwidth")]
    assert types == [SuspiciousPatternType.CHARACTER_SUBSTITUTION, SuspiciousPatternType.INVISIBLE_CHARACTERS]


def test_style_inconsistency():
    text = f"{SHORT_SENTENCES}\n\n{LONG_SENTENCE}"
    pattern = detect_style_inconsistency(text)
    assert pattern.type == SuspiciousPatternType.INCONSISTENT_STYLE
    # means 3 and 40: cv = 18.5 / 21.5
    assert pattern.severity == 3
    assert pattern.positions == []


def test_consistent_style_is_not_reported():
    assert detect_style_inconsistency(f"{SHORT_SENTENCES}\n\n{SHORT_SENTENCES}") is None


def test_style_needs_two_long_paragraphs():
    assert detect_style_inconsistency(SHORT_SENTENCES) is None
    assert detect_style_inconsistency(f"{LONG_SENTENCE}\n\nTiny one. Two.") is None
