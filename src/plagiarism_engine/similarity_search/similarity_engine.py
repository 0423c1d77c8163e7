from typing import Set

from plagiarism_engine.models.plagiarism_models import FingerprintSet


# All scores are percentages in [0, 100].

def _shared(set1: FingerprintSet, set2: FingerprintSet):
    hashes1, hashes2 = set1.hashes(), set2.hashes()
    return hashes1, hashes2, len(hashes1 & hashes2)


def jaccard_similarity(set1: FingerprintSet, set2: FingerprintSet) -> float:
    """|A ∩ B| / |A ∪ B| over distinct fingerprint hashes."""
    hashes1, hashes2, intersection = _shared(set1, set2)
    union = len(hashes1) + len(hashes2) - intersection
    return intersection / union * 100 if union > 0 else 0.0


def containment_similarity(query: FingerprintSet, source: FingerprintSet) -> float:
    """How much of `query` is contained in `source`: |A ∩ B| / |A|. Asymmetric."""
    hashes1, _, intersection = _shared(query, source)
    return intersection / len(hashes1) * 100 if hashes1 else 0.0


def overlap_coefficient(set1: FingerprintSet, set2: FingerprintSet) -> float:
    hashes1, hashes2, intersection = _shared(set1, set2)
    min_size = min(len(hashes1), len(hashes2))
    return intersection / min_size * 100 if min_size > 0 else 0.0


def word_based_similarity(query_word_count: int, matched_word_count: int) -> float:
    if query_word_count <= 0:
        return 0.0
    return min(matched_word_count / query_word_count * 100, 100.0)


def _word_set(text: str) -> Set[str]:
    return {w for w in text.lower().split() if len(w) > 2}


def quick_text_similarity(text1: str, text2: str) -> float:
    """
    Jaccard over lower-cased words longer than two characters.
    For short snippets where fingerprinting finds nothing to compare.
    """
    words1, words2 = _word_set(text1), _word_set(text2)
    if not words1 or not words2:
        return 0.0
    intersection = len(words1 & words2)
    return intersection / (len(words1) + len(words2) - intersection) * 100


def _char_ngrams(text: str, n: int) -> Set[str]:
    compact = " ".join(text.lower().split())
    return {compact[i:i + n] for i in range(len(compact) - n + 1)}


def ngram_text_similarity(text1: str, text2: str, n: int = 3) -> float:
    if n < 1:
        raise ValueError(f"n must be a positive integer, got {n}")
    grams1, grams2 = _char_ngrams(text1, n), _char_ngrams(text2, n)
    union = len(grams1 | grams2)
    return len(grams1 & grams2) / union * 100 if union > 0 else 0.0
