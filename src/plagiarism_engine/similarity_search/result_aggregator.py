# src/plagiarism_engine/similarity_search/result_aggregator.py
"""
Statistics, scoring and classification of a finished check, plus the
manual exclude / include operations that re-score an existing result.
"""

import logging
import uuid
from typing import Dict, Iterable, List, Optional, Sequence

from plagiarism_engine.models.config_models import Classification, PlagiarismConfig
from plagiarism_engine.models.plagiarism_models import (
    Confidence,
    ExclusionReason,
    Match,
    PlagiarismResult,
    PlagiarismStats,
    SelfPlagiarismMatch,
    SourceSummary,
    SuspiciousPattern,
    UncitedQuote,
)
from . import configs
from .similarity_engine import word_based_similarity

logger = logging.getLogger(__name__)

CLASSIFICATION_INFO: Dict[Classification, Dict[str, str]] = {
    Classification.ORIGINAL: {
        "label": "Original",
        "description": "Content appears to be highly original with minimal matches.",
    },
    Classification.ACCEPTABLE: {
        "label": "Acceptable",
        "description": "Some similarity detected, likely from properly cited sources or common phrases.",
    },
    Classification.NEEDS_REVIEW: {
        "label": "Needs Review",
        "description": "Moderate similarity detected. Review matches to ensure proper attribution.",
    },
    Classification.CONCERNING: {
        "label": "Concerning",
        "description": "Significant similarity detected. Careful review of sources recommended.",
    },
    Classification.HIGH_RISK: {
        "label": "High Risk",
        "description": "High levels of similarity. Major revision or proper citation needed.",
    },
    Classification.CRITICAL: {
        "label": "Critical",
        "description": "Very high similarity indicates potential plagiarism. Immediate attention required.",
    },
}


def classification_info(classification: Classification) -> Dict[str, str]:
    return dict(CLASSIFICATION_INFO[Classification(classification)])


def similarity_score(matched_words: int, total_words: int) -> float:
    """Percentage of the document covered by counted matches, capped at 100, one decimal."""
    return round(word_based_similarity(total_words, matched_words), 1)


def determine_confidence(total_words: int, fingerprint_count: int) -> Confidence:
    if total_words > configs.CONFIDENCE_HIGH_MIN_WORDS and fingerprint_count > configs.CONFIDENCE_HIGH_MIN_FINGERPRINTS:
        return Confidence.HIGH
    if total_words < configs.CONFIDENCE_LOW_MAX_WORDS:
        return Confidence.LOW
    return Confidence.MEDIUM


def summarize_sources(matches: Iterable[Match], total_words: int) -> List[SourceSummary]:
    """One summary per source that still has counted (non-excluded) matches, in first-seen order."""
    grouped: Dict[str, List[Match]] = {}
    for match in matches:
        if not match.excluded:
            grouped.setdefault(match.source.id, []).append(match)

    summaries = []
    for source_matches in grouped.values():
        words = sum(m.word_count for m in source_matches)
        summaries.append(SourceSummary(
            source=source_matches[0].source,
            match_count=len(source_matches),
            words_matched=words,
            contribution_percent=round(word_based_similarity(total_words, words), 1),
        ))
    return summaries


def _words(matches: Iterable[Match]) -> int:
    return sum(m.word_count for m in matches)


def compute_stats(matches: Sequence[Match],
                  total_words: int,
                  quoted_words: int,
                  fingerprints_generated: int,
                  fingerprints_matched: int,
                  processing_time_ms: float = 0.0) -> PlagiarismStats:
    counted = [m for m in matches if not m.excluded]
    excluded = [m for m in matches if m.excluded]
    return PlagiarismStats(
        total_words=total_words,
        matched_words=_words(counted),
        quoted_words=quoted_words,
        cited_words=_words(m for m in excluded if m.exclusion_reason == ExclusionReason.CITED),
        excluded_words=_words(excluded),
        unique_sources=len({m.source.id for m in counted}),
        fingerprints_generated=fingerprints_generated,
        fingerprints_matched=fingerprints_matched,
        processing_time_ms=processing_time_ms,
    )


def aggregate_result(document_id: str,
                     matches: Sequence[Match],
                     config: PlagiarismConfig,
                     total_words: int,
                     quoted_words: int = 0,
                     fingerprints_generated: int = 0,
                     fingerprints_matched: int = 0,
                     self_plagiarism: Sequence[SelfPlagiarismMatch] = (),
                     uncited_quotes: Sequence[UncitedQuote] = (),
                     suspicious_patterns: Sequence[SuspiciousPattern] = (),
                     processing_time_ms: float = 0.0) -> PlagiarismResult:
    stats = compute_stats(matches, total_words, quoted_words,
                          fingerprints_generated, fingerprints_matched, processing_time_ms)
    score = similarity_score(stats.matched_words, total_words)

    return PlagiarismResult(
        id=f"check-{document_id}-{uuid.uuid4().hex[:8]}",
        document_id=document_id,
        similarity_score=score,
        originality_score=round(100 - score, 1),
        classification=config.classification.classify(score),
        confidence=determine_confidence(total_words, fingerprints_generated),
        matches=list(matches),
        self_plagiarism=list(self_plagiarism),
        uncited_quotes=list(uncited_quotes),
        suspicious_patterns=list(suspicious_patterns),
        stats=stats,
        sources=summarize_sources(matches, total_words),
        config=config,
    )


# ---------------- MANUAL REVIEW ---------------- #

def _rescore(result: PlagiarismResult, match_id: str, excluded: bool,
             reason: Optional[ExclusionReason]) -> PlagiarismResult:
    if not any(m.id == match_id for m in result.matches):
        raise KeyError(f"no match with id {match_id!r} in result {result.id}")

    update = {"excluded": excluded, "exclusion_reason": reason}
    matches = [m.model_copy(update=update) if m.id == match_id else m for m in result.matches]
    self_plagiarism = [m.model_copy(update=update) if m.id == match_id else m for m in result.self_plagiarism]

    old = result.stats
    stats = compute_stats(matches, old.total_words, old.quoted_words, old.fingerprints_generated,
                          old.fingerprints_matched, old.processing_time_ms)
    score = similarity_score(stats.matched_words, stats.total_words)
    logger.debug("Match %s %s: similarity %.1f -> %.1f", match_id,
                 "excluded" if excluded else "included", result.similarity_score, score)

    return result.model_copy(update={
        "matches": matches,
        "self_plagiarism": self_plagiarism,
        "stats": stats,
        "similarity_score": score,
        "originality_score": round(100 - score, 1),
        "classification": result.config.classification.classify(score),
        "sources": summarize_sources(matches, stats.total_words),
    })


def exclude_match(result: PlagiarismResult, match_id: str) -> PlagiarismResult:
    """New result with the match marked user-excluded and every score recomputed."""
    return _rescore(result, match_id, True, ExclusionReason.USER_EXCLUDED)


def include_match(result: PlagiarismResult, match_id: str) -> PlagiarismResult:
    """New result with the match counted again, whatever excluded it before."""
    return _rescore(result, match_id, False, None)


def match_at_position(result: PlagiarismResult, offset: int) -> Optional[Match]:
    for match in result.matches:
        if match.start_offset <= offset < match.end_offset:
            return match
    return None
