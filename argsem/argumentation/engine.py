"""
Argumentation Engine — brute-force extension computation

Implements the semantics of abstract argumentation over explicit subset
search:
- Grounded extension (unique, least fixpoint of the characteristic function)
- Conflict-free, admissible, complete and stable sets (filters)
- Preferred and naive extensions (⊆-maximal, found largest-first)
- Stage and semi-stable extensions (⊆-maximal range)
- Ideal and eager extensions (greatest admissible subset of an intersection)
- CF2 (SCC-recursive, see ``scc.py``)

Computational complexity:
- Grounded: polynomial, O(|Args| · |Attacks|) per iteration
- Everything else: O(2^|Args|) worst case

The brute-force results are deterministic: extensions are ordered by size,
then lexicographically by canonical argument index. They also serve as the
reference oracle for the SAT-based strategy.
"""

from __future__ import annotations

import logging
from functools import reduce
from typing import Callable, Iterable, Optional

from .errors import (
    CancellationToken,
    UnsupportedConfigurationError,
    check_cancelled,
)
from .models import (
    Argument,
    ArgumentationFramework,
    ArgumentRef,
    Extension,
    Semantics,
)
from .scc import cf2_extensions
from .subsets import SubsetEnumerator

logger = logging.getLogger("argsem.engine")

Algorithm = Callable[
    [ArgumentationFramework, Optional[CancellationToken]],
    list[frozenset[Argument]],
]

LARGE_FRAMEWORK = 20


class SemanticsEngine:
    """
    Core engine for computing argumentation extensions by brute force.

    Follows Dung's characteristic function F:
        F(S) = { a ∈ Args | S defends a }

    The grounded extension is the least fixpoint of F. Algorithms are
    looked up in a registry keyed by ``Semantics``; ``register`` adds or
    replaces one.
    """

    def __init__(self, warn_threshold: int = LARGE_FRAMEWORK):
        self.warn_threshold = warn_threshold
        self._algorithms: dict[Semantics, Algorithm] = {
            Semantics.CONFLICT_FREE: self.conflict_free_sets,
            Semantics.ADMISSIBLE: self.admissible_sets,
            Semantics.COMPLETE: self.complete_sets,
            Semantics.GROUNDED: self.grounded_sets,
            Semantics.PREFERRED: self.preferred_sets,
            Semantics.STABLE: self.stable_sets,
            Semantics.SEMI_STABLE: self.semi_stable_sets,
            Semantics.STAGE: self.stage_sets,
            Semantics.IDEAL: self.ideal_sets,
            Semantics.EAGER: self.eager_sets,
            Semantics.NAIVE: self.naive_sets,
            Semantics.CF2: self.cf2_sets,
        }

    def register(self, semantics: Semantics, algorithm: Algorithm) -> None:
        self._algorithms[semantics] = algorithm

    def supports(self, semantics: Semantics) -> bool:
        return semantics in self._algorithms

    def extensions(self, af: ArgumentationFramework, semantics: Semantics,
                   cancel: CancellationToken | None = None) -> list[Extension]:
        """All extensions of ``af`` under ``semantics``, in canonical order."""
        algorithm = self._algorithms.get(semantics)
        if algorithm is None:
            raise UnsupportedConfigurationError(
                f"No brute-force algorithm for {semantics.value}"
            )
        if len(af) > self.warn_threshold and semantics is not Semantics.GROUNDED:
            logger.warning(
                f"Large framework ({len(af)} args) for brute-force "
                f"{semantics.value} search"
            )
        found = algorithm(af, cancel)
        return [Extension(s, semantics) for s in _canonical(af, found)]

    # ── Predicates ──────────────────────────────────────────────

    def is_conflict_free(self, af: ArgumentationFramework,
                         candidate: Iterable[ArgumentRef]) -> bool:
        """Check that no attack lies entirely inside candidate."""
        members = af.check_members(candidate)
        return _conflict_free(af, members)

    def is_admissible(self, af: ArgumentationFramework,
                      candidate: Iterable[ArgumentRef]) -> bool:
        """
        S is admissible iff:
        1. S is conflict-free
        2. S defends all its members
        """
        members = af.check_members(candidate)
        return _conflict_free(af, members) and _self_defending(af, members)

    def is_complete(self, af: ArgumentationFramework,
                    candidate: Iterable[ArgumentRef]) -> bool:
        """
        S is complete iff S is admissible and contains every
        argument it defends.
        """
        members = af.check_members(candidate)
        return (_conflict_free(af, members)
                and self.characteristic(af, members) == members)

    def is_stable(self, af: ArgumentationFramework,
                  candidate: Iterable[ArgumentRef]) -> bool:
        """S is stable iff S is conflict-free and attacks every outsider."""
        members = af.check_members(candidate)
        return _conflict_free(af, members) and af.is_attacking_all_others(members)

    def defends(self, af: ArgumentationFramework,
                candidate: Iterable[ArgumentRef], arg: ArgumentRef) -> bool:
        members = af.check_members(candidate)
        return af.defends(members, arg)

    def characteristic(self, af: ArgumentationFramework,
                       candidate: Iterable[ArgumentRef]) -> frozenset[Argument]:
        """F(S): every argument defended by S."""
        members = af.check_members(candidate)
        return frozenset(a for a in af.arguments() if af.defends(members, a))

    # ── Grounded Extension ──────────────────────────────────────

    def grounded_extension(self, af: ArgumentationFramework,
                           cancel: CancellationToken | None = None
                           ) -> frozenset[Argument]:
        """
        Compute the grounded extension via iterative fixpoint.

        Algorithm:
            S₀ = ∅
            Sₙ₊₁ = F(Sₙ)
            Stop when Sₙ₊₁ = Sₙ

        F is monotone and the framework finite, so this takes at most
        |Args| + 1 rounds.
        """
        current: frozenset[Argument] = frozenset()
        while True:
            check_cancelled(cancel)
            following = self.characteristic(af, current)
            if following == current:
                return current
            current = following

    def grounded_sets(self, af, cancel=None):
        return [self.grounded_extension(af, cancel)]

    # ── Conflict-free based ─────────────────────────────────────

    def conflict_free_sets(self, af: ArgumentationFramework,
                           cancel: CancellationToken | None = None
                           ) -> list[frozenset[Argument]]:
        """Smallest first; supersets of a conflicting set are never probed."""
        enumerator = SubsetEnumerator(af.arguments(), cancel=cancel)
        found = []
        for candidate in enumerator:
            if _conflict_free(af, candidate):
                found.append(candidate)
            else:
                enumerator.prune(candidate)
        logger.debug(
            f"conflict-free: {len(found)} sets after {enumerator.probes} probes"
        )
        return found

    def admissible_sets(self, af, cancel=None):
        return [s for s in self.conflict_free_sets(af, cancel)
                if _self_defending(af, s)]

    def complete_sets(self, af, cancel=None):
        return [s for s in self.admissible_sets(af, cancel)
                if self.characteristic(af, s) == s]

    def stable_sets(self, af, cancel=None):
        """May legitimately be empty (e.g. odd attack cycles)."""
        return [s for s in self.conflict_free_sets(af, cancel)
                if af.is_attacking_all_others(s)]

    # ── Maximality ──────────────────────────────────────────────

    def preferred_sets(self, af: ArgumentationFramework,
                       cancel: CancellationToken | None = None
                       ) -> list[frozenset[Argument]]:
        """
        Compute all preferred (maximal admissible) extensions.

        Walks subsets largest-first and prunes every subset of an
        admissible set already found, so each admissible set reached is
        ⊆-maximal. The empty set is admissible, hence there is always at
        least one preferred extension.
        """
        return self._maximal_search(
            af, cancel,
            lambda s: _conflict_free(af, s) and _self_defending(af, s),
        )

    def naive_sets(self, af, cancel=None):
        """Maximal conflict-free sets."""
        return self._maximal_search(af, cancel, lambda s: _conflict_free(af, s))

    def _maximal_search(self, af, cancel, accept) -> list[frozenset[Argument]]:
        enumerator = SubsetEnumerator(af.arguments(), descending=True,
                                      cancel=cancel)
        found = []
        for candidate in enumerator:
            if accept(candidate):
                found.append(candidate)
                enumerator.prune(candidate)
        return found

    def semi_stable_sets(self, af, cancel=None):
        """Complete extensions with ⊆-maximal range."""
        return _maximal_range(af, self.complete_sets(af, cancel))

    def stage_sets(self, af, cancel=None):
        """Conflict-free sets with ⊆-maximal range."""
        return _maximal_range(af, self.conflict_free_sets(af, cancel))

    # ── Unique-status semantics ─────────────────────────────────

    def ideal_sets(self, af, cancel=None):
        """Greatest admissible set inside every preferred extension."""
        preferred = self.preferred_sets(af, cancel)
        return [greatest_admissible_subset(af, intersection(preferred))]

    def eager_sets(self, af, cancel=None):
        """Greatest admissible set inside every semi-stable extension."""
        semi_stable = self.semi_stable_sets(af, cancel)
        return [greatest_admissible_subset(af, intersection(semi_stable))]

    # ── SCC-recursive ───────────────────────────────────────────

    def cf2_sets(self, af, cancel=None):
        return cf2_extensions(af, self.naive_sets, cancel)


# ── Helpers ─────────────────────────────────────────────────────

def _conflict_free(af: ArgumentationFramework,
                   candidate: frozenset[Argument]) -> bool:
    for target in candidate:
        for attackers in af.attacking_sets(target):
            if attackers <= candidate:
                return False
    return True


def _self_defending(af: ArgumentationFramework,
                    candidate: frozenset[Argument]) -> bool:
    return all(af.defends(candidate, a) for a in candidate)


def intersection(sets: list[frozenset[Argument]]) -> frozenset[Argument]:
    if not sets:
        return frozenset()
    return reduce(frozenset.intersection, sets)


def _canonical(af: ArgumentationFramework,
               sets: Iterable[frozenset[Argument]]) -> list[frozenset[Argument]]:
    return sorted(set(sets), key=af.sort_key)


def _maximal_range(af: ArgumentationFramework,
                   candidates: list[frozenset[Argument]]
                   ) -> list[frozenset[Argument]]:
    """Keep every candidate whose range no other candidate strictly exceeds."""
    ranges = [(c, af.range_of(c)) for c in candidates]
    return [
        c for c, r in ranges
        if not any(r < other for _, other in ranges)
    ]


def greatest_admissible_subset(af: ArgumentationFramework,
                               candidate: frozenset[Argument]
                               ) -> frozenset[Argument]:
    """
    Largest admissible subset of a conflict-free ``candidate``: discard
    members not defended by the current set until nothing changes.
    """
    current = frozenset(candidate)
    while True:
        kept = frozenset(a for a in current if af.defends(current, a))
        if kept == current:
            return current
        current = kept
