import logging
from threading import Lock
from typing import Dict, Optional, Tuple

logger = logging.getLogger("REA.SimilarityCache")


def pair_key(first: str, second: str) -> str:
    """Order-independent key for a pair of strings."""
    lo, hi = sorted((first, second))
    return f"{lo}::{hi}"


class SimilarityCache:
    """Memo store for pairwise string similarity scores.

    One instance is owned by whoever builds the similarity engine; nothing
    in the package keeps a process-wide copy. Access is serialised with a
    lock so a single instance can be shared by several threads.
    """

    def __init__(self, max_entries: Optional[int] = None) -> None:
        if max_entries is not None and (not isinstance(max_entries, int) or max_entries < 1):
            raise ValueError("max_entries must be a positive integer or None")
        self.max_entries = max_entries
        self._scores: Dict[str, float] = {}
        self._lock = Lock()
        self.hits = 0
        self.misses = 0

    def get(self, first: str, second: str) -> Optional[float]:
        key = pair_key(first, second)
        with self._lock:
            score = self._scores.get(key)
            if score is None:
                self.misses += 1
            else:
                self.hits += 1
            return score

    def put(self, first: str, second: str, score: float) -> float:
        key = pair_key(first, second)
        with self._lock:
            if self.max_entries is not None and key not in self._scores and len(self._scores) >= self.max_entries:
                # dicts keep insertion order; drop the oldest entry
                self._scores.pop(next(iter(self._scores)))
            self._scores[key] = float(score)
        return float(score)

    def clear(self) -> None:
        with self._lock:
            self._scores.clear()
            self.hits = 0
            self.misses = 0
        logger.debug("Similarity cache cleared")

    def stats(self) -> Dict[str, float]:
        with self._lock:
            lookups = self.hits + self.misses
            return {
                "hits": self.hits,
                "misses": self.misses,
                "size": len(self._scores),
                "ratio": self.hits / (lookups or 1),
            }

    def __len__(self) -> int:
        return len(self._scores)

    def __contains__(self, pair: Tuple[str, str]) -> bool:
        return pair_key(*pair) in self._scores
