# src/plagiarism_engine/similarity_search/evidence_algorithm/exact_matcher.py
import logging
import uuid
from typing import List, Literal, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from plagiarism_engine.ingestion.utils import get_word_positions, split_into_words
from plagiarism_engine.models.plagiarism_models import (
    FingerprintPair,
    FingerprintSet,
    Match,
    MatchSource,
    MatchType,
)
from .. import configs
from ..fingerprint_index import find_matching_fingerprints
from ..match_merger import WordSpan, merge_pairs_into_spans, span_char_range
from ..similarity_engine import containment_similarity, jaccard_similarity, word_based_similarity

logger = logging.getLogger(__name__)

SimilarityBasis = Literal["shorter", "query"]


class ComparisonResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    matches: List[Match] = Field(default_factory=list)
    pairs: List[FingerprintPair] = Field(default_factory=list)
    matched_word_count: int = 0
    jaccard: float = 0.0
    containment: float = 0.0


def new_match_id() -> str:
    return f"match_{uuid.uuid4().hex[:12]}"


def determine_match_type(query_span_text: str, source_span_text: str) -> MatchType:
    """Exact when both raw spans read the same ignoring case; otherwise only the normalized words agree."""
    if query_span_text.strip().lower() == source_span_text.strip().lower():
        return MatchType.EXACT
    return MatchType.NEAR_EXACT


def _basis_words(query_words: int, source_words: int, similarity_basis: SimilarityBasis) -> int:
    if similarity_basis == "query":
        return query_words
    if similarity_basis == "shorter":
        return min(query_words, source_words)
    raise ValueError(f"unknown similarity basis: {similarity_basis!r}")


def spans_to_matches(spans: Sequence[WordSpan],
                     query_text: str,
                     source_text: str,
                     source: MatchSource,
                     basis_words: int) -> List[Match]:
    query_positions = get_word_positions(query_text)
    source_positions = get_word_positions(source_text)

    matches = []
    for span in spans:
        start, end = span_char_range(query_positions, span.query_start, span.query_end)
        src_start, src_end = span_char_range(source_positions, span.source_start, span.source_end)
        text = query_text[start:end]
        similarity = word_based_similarity(basis_words, span.word_count)
        matches.append(Match(
            id=new_match_id(),
            text=text,
            start_offset=start,
            end_offset=end,
            word_count=span.word_count,
            similarity=round(similarity, 1),
            match_type=determine_match_type(text, source_text[src_start:src_end]),
            source=source,
            source_start_offset=src_start,
            source_end_offset=src_end,
        ))
    return matches


def compare_documents(query_text: str,
                      source_text: str,
                      query_set: FingerprintSet,
                      source_set: FingerprintSet,
                      source: MatchSource,
                      min_match_length: int = configs.MIN_MATCH_LENGTH,
                      similarity_basis: SimilarityBasis = "shorter",
                      pairs: Optional[Sequence[FingerprintPair]] = None) -> ComparisonResult:
    """
    Compare one query document with one source document.

    `pairs` may be supplied when they were already found through an index;
    otherwise the two fingerprint sets are intersected here.
    """
    if pairs is None:
        pairs = find_matching_fingerprints(query_set, source_set)
    pairs = list(pairs)
    if not pairs:
        return ComparisonResult()

    query_words = split_into_words(query_text)
    source_words = split_into_words(source_text)
    spans = merge_pairs_into_spans(pairs, query_words, source_words, min_match_length)

    basis = _basis_words(len(query_words), len(source_words), similarity_basis)
    matches = spans_to_matches(spans, query_text, source_text, source, basis)
    matched = sum(m.word_count for m in matches)

    logger.debug("Compared %s with %s: %d pairs, %d matches, %d words",
                 query_set.document_id, source_set.document_id, len(pairs), len(matches), matched)

    return ComparisonResult(
        matches=matches,
        pairs=pairs,
        matched_word_count=matched,
        jaccard=jaccard_similarity(query_set, source_set),
        containment=containment_similarity(query_set, source_set),
    )


def deduplicate_matches(matches: Sequence[Match]) -> List[Match]:
    """Among matches overlapping in the query text keep the most similar one (first wins on ties)."""
    kept: List[Match] = []
    for match in sorted(matches, key=lambda m: m.start_offset):
        overlap = next((i for i, k in enumerate(kept)
                        if match.start_offset < k.end_offset and k.start_offset < match.end_offset), None)
        if overlap is None:
            kept.append(match)
        elif match.similarity > kept[overlap].similarity:
            kept[overlap] = match
    return kept


def compare_against_sources(query_text: str,
                            query_set: FingerprintSet,
                            sources: Mapping[str, Tuple[str, FingerprintSet, MatchSource]],
                            min_match_length: int = configs.MIN_MATCH_LENGTH,
                            min_similarity: float = 0.0) -> Tuple[float, List[Match]]:
    """
    Compare a query with several sources keyed by id -> (text, fingerprints, source).

    Returns the overall word-based similarity of the query and the matches,
    with overlapping matches from different sources reduced to the strongest.
    """
    collected: List[Match] = []
    for doc_id, (text, fp_set, source) in sources.items():
        if doc_id == query_set.document_id:
            continue
        result = compare_documents(query_text, text, query_set, fp_set, source, min_match_length)
        if result.matches and result.jaccard >= min_similarity:
            collected.extend(result.matches)

    matches = deduplicate_matches(collected)
    total = word_based_similarity(query_set.word_count, sum(m.word_count for m in matches))
    return total, matches
