"""
Subset enumeration for brute-force semantics.

Subsets are produced lazily by size (ascending by default, descending on
request); subsets of equal size follow ``itertools.combinations`` order
over the universe, which is lexicographic in canonical index. A consumer
may stop pulling at any time, and may prune: in ascending mode pruning S
skips every superset of S, in descending mode every subset of S.
"""

from __future__ import annotations

from itertools import combinations
from typing import Generic, Iterable, Iterator, TypeVar

from .errors import CancellationToken, check_cancelled

T = TypeVar("T")


class SubsetEnumerator(Generic[T]):
    """
    Restartable, prunable power-set traversal.

    Each ``iter()`` starts a fresh traversal with no prunes. ``prune`` only
    affects the traversal currently in progress.
    """

    def __init__(self, universe: Iterable[T], descending: bool = False,
                 cancel: CancellationToken | None = None,
                 min_size: int = 0, max_size: int | None = None):
        self.universe: tuple[T, ...] = tuple(universe)
        self.descending = descending
        self.cancel = cancel
        self.min_size = min_size
        self.max_size = len(self.universe) if max_size is None else max_size
        self._pruned: list[frozenset[T]] = []
        self.probes = 0

    def __iter__(self) -> Iterator[frozenset[T]]:
        self._pruned = []
        self.probes = 0
        return self._traverse()

    def __len__(self) -> int:
        return 2 ** len(self.universe)

    def prune(self, subset: Iterable[T]) -> None:
        self._pruned.append(frozenset(subset))

    def _traverse(self) -> Iterator[frozenset[T]]:
        sizes = range(self.min_size, self.max_size + 1)
        if self.descending:
            sizes = reversed(sizes)
        for size in sizes:
            for combo in combinations(self.universe, size):
                check_cancelled(self.cancel)
                candidate = frozenset(combo)
                if self._is_pruned(candidate):
                    continue
                self.probes += 1
                yield candidate

    def _is_pruned(self, candidate: frozenset[T]) -> bool:
        if self.descending:
            return any(candidate <= p for p in self._pruned)
        return any(p <= candidate for p in self._pruned)
