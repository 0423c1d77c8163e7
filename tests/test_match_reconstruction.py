# tests/test_match_reconstruction.py
import sys
import os
import pytest

# Ensure src is in the path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from plagiarism_engine.models import MatchSource, MatchType, SourceType
from plagiarism_engine.similarity_search.evidence_algorithm import fingerprint_matcher
from plagiarism_engine.similarity_search.evidence_algorithm.exact_matcher import (
    compare_against_sources,
    compare_documents,
    deduplicate_matches,
    determine_match_type,
)
from plagiarism_engine.similarity_search.evidence_algorithm.fingerprint_matcher import generate_fingerprints
from plagiarism_engine.similarity_search.fingerprint_index import find_matching_fingerprints
from plagiarism_engine.similarity_search.match_merger import WordSpan, coalesce_spans, merge_pairs_into_spans

SHARED = "The quick brown fox jumps over the lazy dog near the river"
QUERY = f"Completely unrelated opening words here. {SHARED}. Closing remark differs entirely."
SOURCE = f"Another preface sentence begins now. {SHARED}! Different ending appears."
SOURCE_INFO = MatchSource(type=SourceType.INTERNAL, id="src")


def _compare(query, source, n=5, w=4, **kwargs):
    return compare_documents(query, source, generate_fingerprints(query, "q", n, w),
                             generate_fingerprints(source, "src", n, w), SOURCE_INFO, **kwargs)


def test_shared_sentence_becomes_one_match():
    result = _compare(QUERY, SOURCE)

    assert len(result.matches) == 1
    match = result.matches[0]
    assert match.word_count == 12
    assert match.text == SHARED
    assert QUERY[match.start_offset:match.end_offset] == SHARED
    assert SOURCE[match.source_start_offset:match.source_end_offset] == SHARED
    assert match.match_type == MatchType.EXACT
    assert match.excluded is False
    assert result.matched_word_count == 12
    # shorter document (the source) has 20 words
    assert match.similarity == 60.0
    assert 0 < result.jaccard <= 100
    assert 0 < result.containment <= 100


def test_query_basis_similarity():
    result = _compare(SHARED, SOURCE, similarity_basis="query")
    assert result.matches[0].similarity == 100.0


def test_unknown_basis():
    with pytest.raises(ValueError):
        _compare(QUERY, SOURCE, similarity_basis="longest")


def test_punctuation_difference_is_near_exact():
    source = "Something else first. The quick, brown fox jumps over the lazy dog near the river; then more."
    result = _compare(QUERY, source)
    assert len(result.matches) == 1
    assert result.matches[0].word_count == 12
    assert result.matches[0].match_type == MatchType.NEAR_EXACT


def test_determine_match_type_ignores_case():
    assert determine_match_type("The Results", "the results") == MatchType.EXACT
    assert determine_match_type("the results.", "the results") == MatchType.NEAR_EXACT


def test_min_match_length_filters_short_spans():
    query = "alpha beta gamma delta epsilon zeta and then something else"
    source = "other words alpha beta gamma delta epsilon zeta here"
    assert len(_compare(query, source, n=3, w=1, min_match_length=6).matches) == 1
    assert _compare(query, source, n=3, w=1, min_match_length=7).matches == []


def test_hash_collision_never_matches():
    query = "alpha beta gamma delta aÿ"
    source = "alpha beta gamma delta bà"
    q_set = generate_fingerprints(query, "q")
    s_set = generate_fingerprints(source, "src")
    assert q_set.fingerprints[0].hash == s_set.fingerprints[0].hash

    result = compare_documents(query, source, q_set, s_set, SOURCE_INFO)
    assert result.pairs == []
    assert result.matches == []


def test_constant_hash_only_pairs_equal_text(monkeypatch):
    monkeypatch.setattr(fingerprint_matcher, "compute_ngram_hash", lambda words: 42)
    a = generate_fingerprints("red green blue", "a", 2, 1)
    b = generate_fingerprints("blue red green", "b", 2, 1)
    assert {fp.hash for fp in a.fingerprints} == {42}

    pairs = find_matching_fingerprints(a, b)
    assert [(p.query.ngram_text, p.source.ngram_text) for p in pairs] == [("red green", "red green")]


def test_coalesce_adjacent_and_overlapping_spans():
    spans = [WordSpan(5, 9, 20, 24), WordSpan(0, 5, 0, 5), WordSpan(12, 15, 30, 33), WordSpan(13, 17, 31, 35)]
    assert coalesce_spans(spans) == [WordSpan(0, 9, 0, 24), WordSpan(12, 17, 30, 35)]


def test_duplicate_seeds_collapse():
    words = "one two three four five six seven".split()
    q = generate_fingerprints(" ".join(words), "q", 3, 1)
    s = generate_fingerprints(" ".join(words), "s", 3, 1)
    pairs = find_matching_fingerprints(q, s)
    assert len(pairs) == 5
    assert merge_pairs_into_spans(pairs, words, words, 1) == [WordSpan(0, 7, 0, 7)]


def test_invalid_min_match_length():
    with pytest.raises(ValueError):
        merge_pairs_into_spans([], [], [], 0)


def test_deduplicate_keeps_most_similar():
    low = _compare(QUERY, SOURCE).matches[0]
    high = low.model_copy(update={"id": "other", "similarity": 90.0})
    kept = deduplicate_matches([low, high])
    assert [m.id for m in kept] == ["other"]


def test_compare_against_sources():
    q_set = generate_fingerprints(QUERY, "q")
    sources = {
        "q": (QUERY, q_set, MatchSource(id="q")),
        "src": (SOURCE, generate_fingerprints(SOURCE, "src"), SOURCE_INFO),
        "copy": (SOURCE, generate_fingerprints(SOURCE, "copy"), MatchSource(id="copy")),
    }
    total, matches = compare_against_sources(QUERY, q_set, sources)
    # both copies overlap on the same query words: one survives
    assert len(matches) == 1
    assert total == pytest.approx(12 / 21 * 100)
