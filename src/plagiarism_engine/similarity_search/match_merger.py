# src/plagiarism_engine/similarity_search/match_merger.py
"""
Turn verified fingerprint pairs into contiguous matched spans.

Each pair is a seed of ngram_size agreeing words. The seed is grown word by
word in both directions while the two documents keep agreeing, spans that
land on the same words are collapsed, and spans whose query ranges overlap
or touch are coalesced into one.
"""

import logging
from typing import Iterable, List, NamedTuple, Sequence

from plagiarism_engine.models.plagiarism_models import FingerprintPair, NormalizedWord
from . import configs

logger = logging.getLogger(__name__)


class WordSpan(NamedTuple):
    """Half-open word ranges [start, end) in the query and the source document."""
    query_start: int
    query_end: int
    source_start: int
    source_end: int

    @property
    def word_count(self) -> int:
        return self.query_end - self.query_start


def _extend(seed: WordSpan, query_words: Sequence[str], source_words: Sequence[str]) -> WordSpan:
    qs, qe, ss, se = seed
    while qs > 0 and ss > 0 and query_words[qs - 1] == source_words[ss - 1]:
        qs -= 1
        ss -= 1
    while qe < len(query_words) and se < len(source_words) and query_words[qe] == source_words[se]:
        qe += 1
        se += 1
    return WordSpan(qs, qe, ss, se)


def _seed(pair: FingerprintPair, query_words: Sequence[str], source_words: Sequence[str]):
    n = len(pair.query.ngram_text.split(" "))
    qi, si = pair.query.word_offset, pair.source.word_offset
    if qi + n > len(query_words) or si + n > len(source_words):
        return None
    # the fingerprint must describe these word lists; anything else is stale input
    if list(query_words[qi:qi + n]) != list(source_words[si:si + n]):
        return None
    return WordSpan(qi, qi + n, si, si + n)


def extend_pairs(pairs: Iterable[FingerprintPair],
                 query_words: Sequence[str],
                 source_words: Sequence[str]) -> List[WordSpan]:
    """Grow every seed to its maximal agreeing run; identical runs are reported once."""
    spans = []
    seen = set()
    for pair in pairs:
        seed = _seed(pair, query_words, source_words)
        if seed is None:
            logger.debug("Dropping fingerprint pair at query word %d: words disagree",
                         pair.query.word_offset)
            continue
        # a seed inside a run already grown on the same diagonal gives the same run
        if any(s.query_start <= seed.query_start and seed.query_end <= s.query_end
               and s.query_start - s.source_start == seed.query_start - seed.source_start
               for s in spans):
            continue
        span = _extend(seed, query_words, source_words)
        if span not in seen:
            seen.add(span)
            spans.append(span)
    return spans


def coalesce_spans(spans: Iterable[WordSpan]) -> List[WordSpan]:
    """Merge spans whose query word ranges overlap or are adjacent."""
    ordered = sorted(spans)
    merged: List[WordSpan] = []
    for span in ordered:
        if merged and span.query_start <= merged[-1].query_end:
            last = merged[-1]
            merged[-1] = WordSpan(
                last.query_start,
                max(last.query_end, span.query_end),
                min(last.source_start, span.source_start),
                max(last.source_end, span.source_end),
            )
        else:
            merged.append(span)
    return merged


def merge_pairs_into_spans(pairs: Iterable[FingerprintPair],
                           query_words: Sequence[str],
                           source_words: Sequence[str],
                           min_match_length: int = configs.MIN_MATCH_LENGTH) -> List[WordSpan]:
    if min_match_length < 1:
        raise ValueError(f"min_match_length must be a positive integer, got {min_match_length}")
    spans = coalesce_spans(extend_pairs(pairs, query_words, source_words))
    kept = [s for s in spans if s.word_count >= min_match_length]
    if len(kept) < len(spans):
        logger.debug("Dropped %d spans shorter than %d words", len(spans) - len(kept), min_match_length)
    return kept


def span_char_range(positions: Sequence[NormalizedWord], start: int, end: int):
    """Character range in the original text covering words [start, end)."""
    if not positions or start >= end:
        return 0, 0
    start = min(start, len(positions) - 1)
    end = min(end, len(positions))
    return positions[start].char_start, positions[end - 1].char_end
