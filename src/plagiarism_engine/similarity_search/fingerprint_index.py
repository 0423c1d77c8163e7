# src/plagiarism_engine/similarity_search/fingerprint_index.py
"""
Inverted hash -> (document, fingerprint) index over a corpus of FingerprintSets.

A hash hit is only a candidate: every pair returned here has also been
checked for equal n-gram text, so hash collisions never surface as matches.
"""

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from plagiarism_engine.models.plagiarism_models import (
    Fingerprint,
    FingerprintPair,
    FingerprintSet,
    IndexEntry,
)
from . import configs

logger = logging.getLogger(__name__)

FingerprintSets = Union[Mapping[str, FingerprintSet], Iterable[FingerprintSet]]


class FingerprintIndex:
    """Read-only once built; rebuild it to add documents."""

    def __init__(self, sets: FingerprintSets):
        values = sets.values() if isinstance(sets, Mapping) else sets
        table: Dict[int, List[IndexEntry]] = defaultdict(list)
        document_ids = []
        for fp_set in values:
            document_ids.append(fp_set.document_id)
            for fp in fp_set.fingerprints:
                table[fp.hash].append(IndexEntry(document_id=fp_set.document_id, fingerprint=fp))

        self._table: Dict[int, Tuple[IndexEntry, ...]] = {h: tuple(entries) for h, entries in table.items()}
        self._document_ids: Tuple[str, ...] = tuple(document_ids)

    def lookup(self, hash_value: int) -> Tuple[IndexEntry, ...]:
        return self._table.get(hash_value, ())

    def __contains__(self, hash_value: int) -> bool:
        return hash_value in self._table

    def __len__(self) -> int:
        return len(self._table)

    @property
    def document_ids(self) -> Tuple[str, ...]:
        return self._document_ids


def build_fingerprint_index(sets: FingerprintSets) -> FingerprintIndex:
    index = FingerprintIndex(sets)
    logger.debug("Built fingerprint index: %d documents, %d distinct hashes",
                 len(index.document_ids), len(index))
    return index


def _verified(query: Fingerprint, source: Fingerprint) -> bool:
    return query.hash == source.hash and query.ngram_text == source.ngram_text


def find_matching_fingerprints(query: FingerprintSet, source: FingerprintSet) -> List[FingerprintPair]:
    """All (query, source) fingerprint pairs with equal hash AND equal n-gram text."""
    by_hash: Dict[int, List[Fingerprint]] = defaultdict(list)
    for fp in source.fingerprints:
        by_hash[fp.hash].append(fp)

    pairs = []
    for q in query.fingerprints:
        for s in by_hash.get(q.hash, ()):
            if _verified(q, s):
                pairs.append(FingerprintPair(query=q, source=s))
    return pairs


def search_with_index(query: FingerprintSet, index: FingerprintIndex) -> Dict[str, List[FingerprintPair]]:
    """
    Verified pairs per indexed document, in first-hit order.
    Entries belonging to the query's own document id are skipped.
    """
    results: Dict[str, List[FingerprintPair]] = defaultdict(list)
    skipped_self = 0
    for q in query.fingerprints:
        for entry in index.lookup(q.hash):
            if entry.document_id == query.document_id:
                skipped_self += 1
                continue
            if _verified(q, entry.fingerprint):
                results[entry.document_id].append(FingerprintPair(query=q, source=entry.fingerprint))

    if skipped_self:
        logger.debug("Skipped %d self hits for document %s", skipped_self, query.document_id)
    return dict(results)


def find_matches_in_collection(query: FingerprintSet,
                               sets: Mapping[str, FingerprintSet]) -> Dict[str, List[FingerprintPair]]:
    """Pairwise variant of search_with_index for small collections that are not worth indexing."""
    results = {}
    for doc_id, fp_set in sets.items():
        if doc_id == query.document_id:
            logger.debug("Skipping self comparison for document %s", doc_id)
            continue
        pairs = find_matching_fingerprints(query, fp_set)
        if pairs:
            results[doc_id] = pairs
    return results


def search_many(queries: Iterable[FingerprintSet],
                index: FingerprintIndex,
                max_workers: Optional[int] = None) -> Dict[str, Dict[str, List[FingerprintPair]]]:
    """Run several queries against one index concurrently; keyed by query document id."""
    queries = list(queries)
    if not queries:
        return {}
    with ThreadPoolExecutor(max_workers=max_workers or configs.MAX_WORKERS) as executor:
        found = list(executor.map(lambda q: search_with_index(q, index), queries))
    return {q.document_id: hits for q, hits in zip(queries, found)}
