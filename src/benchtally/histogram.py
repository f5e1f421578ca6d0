import math
import logging
from collections import Counter

logger = logging.getLogger(__name__)


class LatencyHistogram:
    """
    Distribution of integer latency samples, in microseconds.

    Samples are kept as value -> occurrences, so merging two histograms is
    exact and the order of merges never changes the result.
    """

    def __init__(self, counts: dict[int, int] | None = None) -> None:
        self._counts: Counter = Counter()
        self._total = 0
        if counts:
            for value, count in counts.items():
                self.record(int(value), int(count))

    def record(self, value: int, count: int = 1) -> None:
        if value < 0:
            raise ValueError(f"latency samples must be non-negative, got {value}")
        if count <= 0:
            return
        self._counts[value] += count
        self._total += count

    def merge(self, other: "LatencyHistogram") -> None:
        for value, count in other._counts.items():
            self._counts[value] += count
        self._total += other._total

    def copy(self) -> "LatencyHistogram":
        dup = LatencyHistogram()
        dup._counts = Counter(self._counts)
        dup._total = self._total
        return dup

    def total_count(self) -> int:
        return self._total

    def min(self) -> int:
        if not self._total:
            return 0
        return min(self._counts)

    def max(self) -> int:
        if not self._total:
            return 0
        return max(self._counts)

    def mean(self) -> float:
        if not self._total:
            return 0.0
        return sum(v * c for v, c in self._counts.items()) / self._total

    def stddev(self) -> float:
        if not self._total:
            return 0.0
        mean = self.mean()
        sum_sq = sum(c * (v - mean) ** 2 for v, c in self._counts.items())
        return math.sqrt(sum_sq / self._total)

    def value_at_quantile(self, q: float) -> int:
        """Smallest recorded value covering ``q`` percent of all samples."""
        if not self._total:
            return 0
        q = min(max(q, 0.0), 100.0)
        wanted = max(1, int((q / 100.0) * self._total + 0.5))
        seen = 0
        for value in sorted(self._counts):
            seen += self._counts[value]
            if seen >= wanted:
                return value
        return self.max()

    def to_dict(self) -> dict[str, int]:
        return {str(v): c for v, c in sorted(self._counts.items())}

    @classmethod
    def from_dict(cls, data: dict) -> "LatencyHistogram":
        return cls({int(v): int(c) for v, c in data.items()})

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LatencyHistogram):
            return NotImplemented
        return self._counts == other._counts

    def __repr__(self) -> str:
        return f"LatencyHistogram(count={self._total}, min={self.min()}, max={self.max()})"
