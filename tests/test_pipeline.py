# tests/test_pipeline.py
import sys
import os
import json
import pytest

# Ensure src is in the path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from plagiarism_engine.models import (
    Classification,
    Confidence,
    DEFAULT_PLAGIARISM_CONFIG,
    ExclusionReason,
    SourceDocument,
    SourceType,
)
from plagiarism_engine.similarity_search.pipeline import detect_plagiarism, quick_plagiarism_check, run_from_file
from plagiarism_engine.similarity_search.result_aggregator import exclude_match, include_match, match_at_position

SHARED = "The quick brown fox jumps over the lazy dog near the river"
USER_DOC = SourceDocument(
    id="older-essay",
    title="Older essay",
    content=f"Another preface sentence begins now. {SHARED}! Different ending appears.",
    created_at=1700000000,
)


def _distinct_words(prefix, count):
    return " ".join(f"{prefix}{i}" for i in range(count))


def test_end_to_end_shared_sentence():
    result = detect_plagiarism(SHARED, "draft", user_documents=[USER_DOC])

    assert len(result.matches) == 1
    match = result.matches[0]
    assert match.word_count == 12
    assert match.excluded is False
    assert match.source.type == SourceType.USER_DOCUMENT
    assert match.source.id == "older-essay"
    assert result.similarity_score == 100
    assert result.originality_score == 0
    assert result.classification == Classification.CRITICAL
    assert result.stats.matched_words == 12
    assert result.stats.unique_sources == 1
    assert result.stats.fingerprints_matched > 0

    assert len(result.self_plagiarism) == 1
    self_match = result.self_plagiarism[0]
    assert self_match.id == match.id
    assert self_match.source_document.id == "older-essay"
    assert self_match.source_document.snippet == USER_DOC.content[:100]
    assert [s.source.id for s in result.sources] == ["older-essay"]


def test_empty_document():
    result = detect_plagiarism("", "empty", user_documents=[USER_DOC])
    assert result.matches == []
    assert result.similarity_score == 0
    assert result.confidence == Confidence.LOW
    assert result.stats.fingerprints_generated == 0
    assert result.classification == Classification.ORIGINAL


def test_self_document_is_skipped():
    same = SourceDocument(id="draft", content=SHARED)
    result = detect_plagiarism(SHARED, "draft", user_documents=[same])
    assert result.matches == []
    assert result.self_plagiarism == []


def test_quoted_and_cited_sentence_is_excluded():
    text = 'He said "the results were significant" (Smith, 2024).'
    source = SourceDocument(id="paper", content="He said the results were significant.")
    result = detect_plagiarism(text, "draft", user_documents=[source])

    assert len(result.matches) == 1
    match = result.matches[0]
    assert match.excluded
    assert match.exclusion_reason in (ExclusionReason.CITED, ExclusionReason.QUOTED)
    assert result.stats.matched_words == 0
    assert result.stats.excluded_words == match.word_count
    assert result.stats.quoted_words == 4
    assert result.similarity_score == 0


def test_min_match_length_drops_matches():
    config = DEFAULT_PLAGIARISM_CONFIG.with_overrides(min_match_length=13)
    result = detect_plagiarism(SHARED, "draft", user_documents=[USER_DOC], config=config)
    assert result.matches == []
    assert result.similarity_score == 0


def test_self_plagiarism_check_can_be_disabled():
    config = DEFAULT_PLAGIARISM_CONFIG.with_overrides(checks={"self_plagiarism": False})
    result = detect_plagiarism(SHARED, "draft", user_documents=[USER_DOC], config=config)
    assert result.matches == []


def test_external_documents():
    text = f"Completely unrelated opening words here. {SHARED}. Closing remark differs entirely."
    result = detect_plagiarism(text, "draft", external_documents=[("web-1", USER_DOC.content)])

    assert len(result.matches) == 1
    match = result.matches[0]
    assert match.source.type == SourceType.INTERNAL
    # relative to the shorter (20 word) source document
    assert match.similarity == 60.0
    assert result.self_plagiarism == []
    assert result.similarity_score == round(12 / 21 * 100, 1)


def test_dict_documents_are_accepted():
    doc = {"id": "older", "title": "Older", "content": USER_DOC.content, "created_at": "2024-01-01T00:00:00Z"}
    result = detect_plagiarism(SHARED, "draft", user_documents=[doc])
    assert result.self_plagiarism[0].source_document.created_at.year == 2024


def test_exclude_and_include_match():
    result = detect_plagiarism(SHARED, "draft", user_documents=[USER_DOC])
    match_id = result.matches[0].id

    excluded = exclude_match(result, match_id)
    assert excluded.similarity_score == 0
    assert excluded.classification == Classification.ORIGINAL
    assert excluded.matches[0].exclusion_reason == ExclusionReason.USER_EXCLUDED
    assert excluded.self_plagiarism[0].excluded
    assert excluded.sources == []
    # the original result is untouched
    assert result.similarity_score == 100
    assert result.matches[0].excluded is False

    restored = include_match(excluded, match_id)
    assert restored.similarity_score == 100
    assert restored.matches[0].exclusion_reason is None

    with pytest.raises(KeyError):
        exclude_match(result, "missing")


def test_match_at_position():
    result = detect_plagiarism(SHARED, "draft", user_documents=[USER_DOC])
    assert match_at_position(result, 0).id == result.matches[0].id
    assert match_at_position(result, len(SHARED) + 5) is None


def test_uncited_quotes_and_patterns_reported():
    text = 'She wrote "this is a fairly long quoted sentence" and left it at that. p\u0430yment'
    result = detect_plagiarism(text, "draft")
    assert len(result.uncited_quotes) == 1
    assert [p.type.value for p in result.suspicious_patterns] == ["character-substitution"]

    config = DEFAULT_PLAGIARISM_CONFIG.with_overrides(
        checks={"uncited_quotes": False, "suspicious_patterns": False})
    quiet = detect_plagiarism(text, "draft", config=config)
    assert quiet.uncited_quotes == []
    assert quiet.suspicious_patterns == []


def test_quick_check_flags_documents():
    text = _distinct_words("term", 40)
    docs = [
        SourceDocument(id="copy-1", content=text),
        SourceDocument(id="copy-2", content=f"prefix words {text}"),
        SourceDocument(id="other", content=_distinct_words("other", 40)),
        SourceDocument(id="draft", content=text),
    ]
    result = quick_plagiarism_check(text, "draft", docs)

    assert result.self_plagiarism_count == 2
    assert [hit.document_id for hit in result.flagged_documents] == ["copy-1", "copy-2"]
    assert result.similarity_score == 20
    assert result.originality_score == 80
    assert result.uncited_quote_count == 0


def test_quick_check_score_is_capped():
    text = _distinct_words("term", 40)
    docs = [SourceDocument(id=f"copy-{i}", content=text) for i in range(7)]
    assert quick_plagiarism_check(text, "draft", docs).similarity_score == 50


def test_quick_check_without_documents():
    result = quick_plagiarism_check("", "draft")
    assert result.similarity_score == 0
    assert result.flagged_documents == []


def test_run_from_file(tmp_path):
    input_path = tmp_path / "doc.json"
    output_path = tmp_path / "report.json"
    input_path.write_text(json.dumps({
        "document_id": "draft",
        "text": SHARED,
        "user_documents": [USER_DOC.model_dump(mode="json")],
        "config": {"exclusions": {"common_phrases": False}},
    }), encoding="utf-8")

    result = run_from_file(str(input_path), str(output_path))

    report = json.loads(output_path.read_text(encoding="utf-8"))
    assert report["similarity_score"] == result.similarity_score == 100
    assert report["classification"] == "critical"
    assert report["config"]["exclusions"]["common_phrases"] is False
