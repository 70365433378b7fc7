"""
Fitness cache for shade-evo.

Evaluations are expensive simulation runs, so every result (failures
included) is memoized under the canonical signature of its design. The cache
is append-only for the duration of a run and is carried inside checkpoints so a
resumed run does not repeat work.
"""

import logging
from typing import Any, Dict, Optional

from ..core.design import DesignCodec
from ..core.individual import EvaluationResult
from ..core.population import Population

logger = logging.getLogger(__name__)


class FitnessCache:
    """
    Maps design signatures to evaluation results.

    Attributes:
        cache: Dictionary mapping signatures to results
        hit_count: Number of cache hits
        miss_count: Number of cache misses
    """

    def __init__(self):
        self.cache: Dict[str, EvaluationResult] = {}
        self.hit_count = 0
        self.miss_count = 0

    def get(self, signature: str) -> Optional[EvaluationResult]:
        """
        Retrieve a result from the cache.

        Args:
            signature: Canonical design signature

        Returns:
            A copy of the cached result if found, None otherwise
        """
        if signature in self.cache:
            self.hit_count += 1
            logger.debug(f"Cache hit for {signature}")
            return self.cache[signature].copy()  # Return a copy to prevent mutation

        self.miss_count += 1
        logger.debug(f"Cache miss for {signature}")
        return None

    def put(self, signature: str, result: EvaluationResult) -> None:
        """
        Store a result. Existing entries are never overwritten.

        Args:
            signature: Canonical design signature
            result: Evaluation result to store
        """
        if signature in self.cache:
            return
        self.cache[signature] = result.copy()
        logger.debug(f"Cached result for {signature} (size: {len(self.cache)})")

    def seed_from_population(self, population: Population, codec: DesignCodec) -> int:
        """
        Add the results of a restored population, failed ones included.

        Returns:
            Number of new entries
        """
        added = 0
        for individual in population:
            if individual.is_evaluated():
                signature = codec.signature(individual.design)
                if signature not in self.cache:
                    self.cache[signature] = individual.result.copy()
                    added += 1
        return added

    def load_entries(self, entries: Dict[str, Dict[str, Any]]) -> int:
        """Add serialized entries (as produced by ``to_dict``); returns how many were new."""
        added = 0
        for signature, data in entries.items():
            if signature not in self.cache:
                self.cache[signature] = EvaluationResult.from_dict(data)
                added += 1
        return added

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {signature: result.to_dict() for signature, result in self.cache.items()}

    def clear(self) -> None:
        """Clear all cached results."""
        self.cache.clear()
        self.hit_count = 0
        self.miss_count = 0
        logger.info("Fitness cache cleared")

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary with cache statistics (size, hit rate, etc.)
        """
        total_requests = self.hit_count + self.miss_count
        hit_rate = self.hit_count / total_requests if total_requests > 0 else 0.0

        return {
            "size": len(self.cache),
            "hit_count": self.hit_count,
            "miss_count": self.miss_count,
            "hit_rate": hit_rate,
            "total_requests": total_requests,
        }

    def __contains__(self, signature: str) -> bool:
        return signature in self.cache

    def __len__(self) -> int:
        return len(self.cache)

    def __repr__(self) -> str:
        stats = self.get_stats()
        return (
            f"FitnessCache(size={stats['size']}, "
            f"hit_rate={stats['hit_rate']:.2%}, "
            f"total_requests={stats['total_requests']})"
        )
