import logging
import re
from collections import Counter
from typing import Iterable, List, Sequence

import jellyfish
import numpy as np

logger = logging.getLogger("REA.TextSimilarity")

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")
_TOKEN_SPLIT = re.compile(r"\W+")

STOPWORDS = frozenset({
    "a", "an", "the", "and", "or", "but", "if", "then", "else", "when",
    "at", "by", "for", "with", "about", "against", "between", "into",
    "through", "during", "before", "after", "above", "below", "to",
    "from", "up", "down", "in", "out", "on", "off", "over", "under",
    "again", "further", "once", "here", "there", "where",
    "why", "how", "all", "any", "both", "each", "few", "more", "most",
    "other", "some", "such", "no", "nor", "not", "only", "own", "same",
    "so", "than", "too", "very", "can", "will", "just", "should", "now",
    "is", "are", "was", "were", "be", "been", "being", "have", "has", "had",
    "do", "does", "did", "doing", "this", "that", "these", "those", "am", "of",
})


def normalize_text(text: str) -> str:
    """Lowercase, turn punctuation into spaces and collapse whitespace."""
    lowered = _NON_WORD.sub(" ", text.lower())
    return _WHITESPACE.sub(" ", lowered).strip()


def significant_words(normalized: str) -> List[str]:
    return [w for w in normalized.split(" ") if len(w) > 1]


def short_string_ratio(first: str, second: str) -> float:
    """Jaro-Winkler similarity used for names and short phrases."""
    if not first or not second:
        return 0.0
    lo, hi = sorted((first, second))
    return jellyfish.jaro_winkler_similarity(lo, hi)


def _approximate_distance(first: str, second: str) -> float:
    m, n = len(first), len(second)
    length_ratio = abs(m - n) / max(m, n)
    positions = range(0, min(m, n, 100), 10)
    samples = len(positions)
    matches = sum(1 for i in positions if first[i] == second[i])
    match_rate = matches / samples if samples else 0.0
    return min(1.0, max(0.0, 0.7 * length_ratio + 0.3 * (1.0 - match_rate)))


def normalized_levenshtein(first: str, second: str, *, long_text_length: int = 1000) -> float:
    """Edit distance divided by the longer length, in [0, 1].

    Inputs longer than ``long_text_length`` use a sampled approximation
    instead of the full O(m*n) table; that path is lossy.
    """
    if first == second:
        return 0.0
    m, n = len(first), len(second)
    if m == 0 or n == 0:
        return 1.0
    if m > long_text_length or n > long_text_length:
        return _approximate_distance(first, second)

    target = np.fromiter((ord(c) for c in second), dtype=np.int64, count=n)
    offsets = np.arange(n + 1, dtype=np.int64)
    previous = offsets.copy()
    for i, ch in enumerate(first, start=1):
        cost = (target != ord(ch)).astype(np.int64)
        current = np.empty(n + 1, dtype=np.int64)
        current[0] = i
        # deletion and substitution, then close over insertions left to right
        current[1:] = np.minimum(previous[1:] + 1, previous[:-1] + cost)
        current = np.minimum.accumulate(current - offsets) + offsets
        previous = current
    return float(previous[-1]) / max(m, n)


def semantic_similarity_approximation(words1: Sequence[str], words2: Sequence[str]) -> float:
    """Blend of Jaccard, containment and word-bigram overlap."""
    if not words1 or not words2:
        return 0.0
    terms1, terms2 = set(words1), set(words2)
    common = len(terms1 & terms2)
    jaccard = common / len(terms1 | terms2)
    containment = common / min(len(terms1), len(terms2))

    sequence = 0.0
    if len(words1) > 1 and len(words2) > 1:
        bigrams1 = set(zip(words1, words1[1:]))
        bigrams2 = set(zip(words2, words2[1:]))
        union = len(bigrams1 | bigrams2)
        sequence = len(bigrams1 & bigrams2) / (union or 1)

    return 0.5 * jaccard + 0.3 * containment + 0.2 * sequence


def tokenize(text: str) -> List[str]:
    """Lowercased word tokens with stop words removed."""
    if not isinstance(text, str) or not text:
        return []
    return [t for t in _TOKEN_SPLIT.split(text.lower()) if t and t not in STOPWORDS]


def extract_keywords(text: str) -> List[str]:
    return [t for t in tokenize(text) if len(t) > 3]


def cosine_similarity(text1: str, text2: str) -> float:
    """Cosine similarity of term-frequency vectors."""
    tf1, tf2 = Counter(tokenize(text1)), Counter(tokenize(text2))
    vocabulary = sorted(set(tf1) | set(tf2))
    if not vocabulary:
        return 0.0
    v1 = np.array([tf1.get(t, 0) for t in vocabulary], dtype=float)
    v2 = np.array([tf2.get(t, 0) for t in vocabulary], dtype=float)
    norm = float(np.linalg.norm(v1) * np.linalg.norm(v2))
    if norm == 0.0:
        return 0.0
    score = float(np.dot(v1, v2)) / norm
    if abs(score - 1.0) < 1e-7:
        return 1.0
    return round(min(1.0, max(0.0, score)), 8)


def contains_any(text: str, keywords: Iterable[str]) -> bool:
    lowered = text.lower()
    return any(k.lower() in lowered for k in keywords)
