# src/plagiarism_engine/similarity_search/evidence_algorithm/fingerprint_matcher.py
"""
Winnowing fingerprints over word n-grams.

Every window of `ngram_size` normalized words is hashed with a polynomial
hash; winnowing (Schleimer, Wilkerson & Aiken) then keeps the minimum hash
of each window of `window_size` consecutive hashes. Two documents sharing a
run of at least window_size + ngram_size - 1 words always share a fingerprint.
"""

import logging
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor
from itertools import repeat
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from plagiarism_engine.ingestion.utils import get_word_positions, split_into_words
from plagiarism_engine.models.plagiarism_models import (
    Fingerprint,
    FingerprintSet,
    HashedNGram,
    NGram,
    SourceDocument,
)
from .. import configs

logger = logging.getLogger(__name__)

DocumentInput = Union[SourceDocument, Tuple[str, str]]


def _check_size(name: str, value: int) -> None:
    if value < 1:
        raise ValueError(f"{name} must be a positive integer, got {value}")


def compute_hash(s: str) -> int:
    h = 0
    for ch in s:
        h = (h * configs.HASH_PRIME + ord(ch)) % configs.HASH_MOD
    return h


def compute_ngram_hash(words: Sequence[str]) -> int:
    return compute_hash(" ".join(words))


def generate_ngrams(text: str, n: int = configs.NGRAM_SIZE) -> List[NGram]:
    """
    All overlapping n-word windows. Texts with fewer than n words yield
    nothing: no partial n-grams are produced.
    """
    _check_size("ngram_size", n)
    words = split_into_words(text)
    if len(words) < n:
        return []

    positions = get_word_positions(text)
    ngrams = []
    for i in range(len(words) - n + 1):
        char_position = positions[i].char_start if i < len(positions) else 0
        ngrams.append(NGram(words=tuple(words[i:i + n]), char_position=char_position, word_index=i))
    return ngrams


def generate_ngram_hashes(text: str, n: int = configs.NGRAM_SIZE) -> List[HashedNGram]:
    return [
        HashedNGram(
            words=ng.words,
            char_position=ng.char_position,
            word_index=ng.word_index,
            hash=compute_ngram_hash(ng.words),
        )
        for ng in generate_ngrams(text, n)
    ]


def _to_fingerprint(ng: HashedNGram) -> Fingerprint:
    return Fingerprint(
        hash=ng.hash,
        char_position=ng.char_position,
        ngram_text=ng.text,
        word_offset=ng.word_index,
    )


def winnow(hashed: Sequence[HashedNGram], window_size: int = configs.WINNOW_WINDOW) -> List[Fingerprint]:
    """
    Select the minimum hash of every window, rightmost minimum on ties, and
    record it only when it is not the position recorded for the previous window.
    """
    _check_size("window_size", window_size)
    if not hashed:
        return []

    if len(hashed) <= window_size:
        # too short to window: keep everything
        return [_to_fingerprint(ng) for ng in hashed]

    fingerprints = []
    previous_index = -1
    for start in range(len(hashed) - window_size + 1):
        min_index = start
        for j in range(start + 1, start + window_size):
            if hashed[j].hash <= hashed[min_index].hash:
                min_index = j

        if min_index != previous_index:
            fingerprints.append(_to_fingerprint(hashed[min_index]))
            previous_index = min_index

    return fingerprints


def generate_fingerprints(text: str,
                          document_id: str,
                          ngram_size: int = configs.NGRAM_SIZE,
                          window_size: int = configs.WINNOW_WINDOW) -> FingerprintSet:
    _check_size("ngram_size", ngram_size)
    _check_size("window_size", window_size)

    fingerprints = winnow(generate_ngram_hashes(text, ngram_size), window_size)
    words = split_into_words(text)
    if len(words) < ngram_size:
        logger.debug("Document %s has %d words, fewer than n-gram size %d: no fingerprints",
                     document_id, len(words), ngram_size)

    return FingerprintSet(
        document_id=document_id,
        fingerprints=tuple(fingerprints),
        ngram_size=ngram_size,
        window_size=window_size,
        word_count=len(words),
    )


def _as_pair(document: DocumentInput) -> Tuple[str, str]:
    if isinstance(document, SourceDocument):
        return document.id, document.content
    doc_id, text = document
    return doc_id, text


def generate_fingerprints_for_documents(documents: Iterable[DocumentInput],
                                        ngram_size: int = configs.NGRAM_SIZE,
                                        window_size: int = configs.WINNOW_WINDOW,
                                        max_workers: Optional[int] = None,
                                        use_processes: Optional[bool] = None) -> Dict[str, FingerprintSet]:
    """
    Fingerprint a corpus. Each document is independent, so large corpora are
    spread over a thread pool (or a process pool when `use_processes`).
    """
    _check_size("ngram_size", ngram_size)
    _check_size("window_size", window_size)

    pairs = [_as_pair(d) for d in documents]
    ids = [doc_id for doc_id, _ in pairs]
    texts = [text for _, text in pairs]
    workers = max_workers or configs.MAX_WORKERS

    if len(pairs) < configs.PARALLEL_MIN_DOCUMENTS or workers <= 1:
        sets = [generate_fingerprints(text, doc_id, ngram_size, window_size) for doc_id, text in pairs]
    else:
        processes = configs.USE_PROCESS_POOL if use_processes is None else use_processes
        executor_cls = ProcessPoolExecutor if processes else ThreadPoolExecutor
        logger.debug("Fingerprinting %d documents with %s(max_workers=%d)",
                     len(pairs), executor_cls.__name__, workers)
        with executor_cls(max_workers=workers) as executor:
            sets = list(executor.map(generate_fingerprints, texts, ids,
                                     repeat(ngram_size), repeat(window_size)))

    return {fp_set.document_id: fp_set for fp_set in sets}
