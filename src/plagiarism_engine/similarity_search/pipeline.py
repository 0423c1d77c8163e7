import json
import logging
import time
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from plagiarism_engine.ingestion.utils import word_count
from plagiarism_engine.models.config_models import DEFAULT_PLAGIARISM_CONFIG, PlagiarismConfig
from plagiarism_engine.models.plagiarism_models import (
    ContainmentHit,
    Match,
    MatchSource,
    PlagiarismResult,
    QuickCheckResult,
    SelfPlagiarismMatch,
    SourceDocument,
    SourceDocumentInfo,
    SourceType,
)
from . import configs
from .citation_detector import detect_citations, detect_quotes, find_uncited_quotes
from .evidence_algorithm.exact_matcher import compare_documents
from .evidence_algorithm.fingerprint_matcher import generate_fingerprints, generate_fingerprints_for_documents
from .exclusion_policy import apply_exclusions
from .fingerprint_index import build_fingerprint_index, search_with_index
from .result_aggregator import aggregate_result
from .similarity_engine import containment_similarity
from .suspicious_patterns import detect_suspicious_patterns

logger = logging.getLogger(__name__)

DocumentLike = Union[SourceDocument, Mapping[str, Any], Tuple[str, str]]


def to_source_document(doc: DocumentLike) -> SourceDocument:
    if isinstance(doc, SourceDocument):
        return doc
    if isinstance(doc, Mapping):
        return SourceDocument.model_validate(doc)
    doc_id, content = doc
    return SourceDocument(id=doc_id, content=content)


def _candidates(document_id: str,
                groups: Iterable[Tuple[Iterable[DocumentLike], SourceType]]) -> Dict[str, Tuple[SourceDocument, SourceType]]:
    """Corpus documents keyed by id, without the query document; first occurrence of an id wins."""
    candidates: Dict[str, Tuple[SourceDocument, SourceType]] = {}
    for docs, source_type in groups:
        for raw in docs:
            doc = to_source_document(raw)
            if doc.id == document_id:
                logger.debug("Skipping self comparison with document %s", doc.id)
                continue
            if doc.id in candidates:
                logger.debug("Duplicate corpus document %s ignored", doc.id)
                continue
            candidates[doc.id] = (doc, source_type)
    return candidates


def _match_source(doc: SourceDocument, source_type: SourceType) -> MatchSource:
    return MatchSource(
        type=source_type,
        id=doc.id,
        title=doc.title or None,
        created_at=doc.created_at,
        snippet=doc.content[:configs.SOURCE_SNIPPET_CHARS],
    )


def _self_plagiarism(matches: Sequence[Match],
                     candidates: Mapping[str, Tuple[SourceDocument, SourceType]]) -> List[SelfPlagiarismMatch]:
    found = []
    for match in matches:
        if match.source.type != SourceType.USER_DOCUMENT:
            continue
        doc, _ = candidates[match.source.id]
        found.append(SelfPlagiarismMatch(
            **dict(match),
            source_document=SourceDocumentInfo(
                id=doc.id,
                title=doc.title,
                created_at=doc.created_at,
                snippet=doc.content[:configs.SOURCE_SNIPPET_CHARS],
            ),
        ))
    return found


def detect_plagiarism(text: str,
                      document_id: str,
                      user_documents: Iterable[DocumentLike] = (),
                      config: Optional[PlagiarismConfig] = None,
                      external_documents: Iterable[DocumentLike] = ()) -> PlagiarismResult:
    """
    Full check of `text` against the user's own documents (self-plagiarism)
    and any externally supplied corpus.

    Matches against user documents are scored relative to the query length;
    matches against external documents relative to the shorter document.
    """
    config = config or DEFAULT_PLAGIARISM_CONFIG
    started = time.perf_counter()
    logger.info("Plagiarism check started for %s (%d chars)", document_id, len(text or ""))

    if config.checks.external_api:
        logger.warning("External lookup requested for %s; no network calls are made, "
                       "pass the retrieved documents as external_documents", document_id)

    query_set = generate_fingerprints(text or "", document_id, config.ngram_size, config.window_size)
    if not query_set.fingerprints:
        logger.debug("Document %s produced no fingerprints", document_id)

    groups = [(external_documents, SourceType.INTERNAL)]
    if config.checks.self_plagiarism:
        groups.insert(0, (user_documents, SourceType.USER_DOCUMENT))
    candidates = _candidates(document_id, groups)

    matches: List[Match] = []
    matched_fingerprints = set()
    if candidates and query_set.fingerprints:
        sets = generate_fingerprints_for_documents(
            [doc for doc, _ in candidates.values()], config.ngram_size, config.window_size)
        hits = search_with_index(query_set, build_fingerprint_index(sets))

        for doc_id, (doc, source_type) in candidates.items():
            pairs = hits.get(doc_id)
            if not pairs:
                continue
            basis = "query" if source_type == SourceType.USER_DOCUMENT else "shorter"
            comparison = compare_documents(text, doc.content, query_set, sets[doc_id],
                                           _match_source(doc, source_type),
                                           config.min_match_length, basis, pairs=pairs)
            if comparison.matches:
                matches.extend(comparison.matches)
                matched_fingerprints.update(p.query.word_offset for p in comparison.pairs)

    matches = sorted(apply_exclusions(matches, text or "", config), key=lambda m: (m.start_offset, m.end_offset))

    quotes = detect_quotes(text or "")
    uncited = []
    if config.checks.uncited_quotes:
        uncited = find_uncited_quotes(text or "", config.min_quote_length, config.citation_distance,
                                      quotes=quotes, citations=detect_citations(text or ""))
    patterns = detect_suspicious_patterns(text or "") if config.checks.suspicious_patterns else []

    elapsed_ms = (time.perf_counter() - started) * 1000
    result = aggregate_result(
        document_id=document_id,
        matches=matches,
        config=config,
        total_words=query_set.word_count,
        quoted_words=sum(word_count(q.text) for q in quotes),
        fingerprints_generated=len(query_set.fingerprints),
        fingerprints_matched=len(matched_fingerprints),
        self_plagiarism=_self_plagiarism(matches, candidates),
        uncited_quotes=uncited,
        suspicious_patterns=patterns,
        processing_time_ms=round(elapsed_ms, 2),
    )
    logger.info("Plagiarism check finished for %s in %.1f ms: similarity=%.1f (%s), %d matches",
                document_id, elapsed_ms, result.similarity_score, result.classification.value, len(matches))
    return result


def quick_plagiarism_check(text: str,
                           document_id: str,
                           user_documents: Iterable[DocumentLike] = (),
                           config: Optional[PlagiarismConfig] = None) -> QuickCheckResult:
    """
    Hash-set screening with shorter n-grams: no match reconstruction and no
    suspicious-pattern scan. Each user document sharing more than
    QUICK_MATCH_THRESHOLD hashes adds QUICK_SCORE_PER_DOCUMENT, up to QUICK_SCORE_CAP.
    """
    config = config or DEFAULT_PLAGIARISM_CONFIG
    query_set = generate_fingerprints(text or "", document_id, configs.QUICK_NGRAM_SIZE, config.window_size)
    query_hashes = query_set.hashes()

    candidates = _candidates(document_id, [(user_documents, SourceType.USER_DOCUMENT)])
    sets = generate_fingerprints_for_documents(
        [doc for doc, _ in candidates.values()], configs.QUICK_NGRAM_SIZE, config.window_size)

    flagged = []
    for doc_id, fp_set in sets.items():
        shared = len(query_hashes & fp_set.hashes())
        if shared > configs.QUICK_MATCH_THRESHOLD:
            flagged.append(ContainmentHit(
                document_id=doc_id,
                shared_hashes=shared,
                containment=round(containment_similarity(query_set, fp_set), 1),
            ))

    score = min(len(flagged) * configs.QUICK_SCORE_PER_DOCUMENT, configs.QUICK_SCORE_CAP) if flagged else 0.0
    uncited = find_uncited_quotes(text or "", config.min_quote_length, config.citation_distance)
    logger.debug("Quick check for %s: %d of %d documents flagged", document_id, len(flagged), len(sets))

    return QuickCheckResult(
        similarity_score=float(score),
        originality_score=float(100 - score),
        self_plagiarism_count=len(flagged),
        uncited_quote_count=len(uncited),
        flagged_documents=flagged,
    )


def process_document(doc: Dict) -> PlagiarismResult:
    """
    Run a check described by a JSON-like dict:
    {"document_id", "text", "user_documents": [...], "external_documents": [...], "config": {...}}
    where "config" holds overrides of the default configuration.
    """
    config = DEFAULT_PLAGIARISM_CONFIG.with_overrides(**doc.get("config", {}))
    return detect_plagiarism(
        doc.get("text", ""),
        doc.get("document_id", "unknown"),
        user_documents=doc.get("user_documents", []),
        config=config,
        external_documents=doc.get("external_documents", []),
    )


def run_from_file(input_path: str, output_path: str) -> PlagiarismResult:
    with open(input_path, "r", encoding="utf-8") as f:
        doc = json.load(f)
    res = process_document(doc)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(res.model_dump(mode="json"), f, indent=2, ensure_ascii=False)
    return res


def main(argv: Optional[List[str]] = None) -> None:
    import argparse
    parser = argparse.ArgumentParser(description="Run a plagiarism check on a JSON document description")
    parser.add_argument("--input", "-i", required=True, help="Input JSON file (document_id, text, user_documents, ...)")
    parser.add_argument("--output", "-o", default="plagiarism_report.json", help="Output JSON file for the report")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if configs.ENABLE_DEBUG_LOGS else logging.INFO)
    res = run_from_file(args.input, args.output)
    logger.info("Processing completed (similarity %.1f%%). Results saved to %s", res.similarity_score, args.output)


if __name__ == "__main__":
    main()
