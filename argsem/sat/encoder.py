"""
sat/encoder.py — Propositional encodings of argumentation semantics

Every query opens its own solver, maps argument i (framework order) to
variable i + 1, and adds auxiliary variables on demand:

    x(a)    a is in the candidate set
    att(a)  a is attacked by the candidate set
    r(a)    a is in the range of the candidate set, x(a) ∨ att(a)

Set attacks get a conjunction variable per attacker set, so binary
frameworks are simply the case where no conjunction variable is needed.

Searches:
- all models with exact blocking clauses (CF, ADM, CO, ST)
- ⊆-maximal models grown under activation literals, then every subset of
  the maximum blocked (PR, NA); incomparable maxima are all enumerated
- ⊆-maximal range, then every model with exactly that range (STG, SST)
- ⊆-minimal complete model (GR)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from argsem.argumentation.engine import greatest_admissible_subset, intersection
from argsem.argumentation.errors import (
    CancellationToken,
    SolverResourceError,
    UnsupportedConfigurationError,
    check_cancelled,
)
from argsem.argumentation.models import (
    Argument,
    ArgumentationFramework,
    ArgumentRef,
    Extension,
    Semantics,
)

from .solver import SatSolver

logger = logging.getLogger("argsem.sat.encoder")

SolverFactory = Callable[[], SatSolver]


class FrameworkEncoding:
    """Variable mapping of one framework inside one solver."""

    def __init__(self, af: ArgumentationFramework, solver: SatSolver):
        self.af = af
        self.solver = solver
        self.arguments = af.arguments()
        self.var: dict[Argument, int] = {
            a: solver.new_variable() for a in self.arguments
        }
        self._attacked: dict[Argument, int] = {}
        self._range: dict[Argument, int] = {}
        self._conjunctions: dict[frozenset[Argument], int] = {}

    # ── Auxiliary variables ─────────────────────────────────────

    def conjunction(self, members: frozenset[Argument]) -> int:
        if len(members) == 1:
            return self.var[next(iter(members))]
        if members not in self._conjunctions:
            c = self.solver.new_variable()
            lits = [self.var[m] for m in self._ordered(members)]
            for lit in lits:
                self.solver.add_clause([-c, lit])
            self.solver.add_clause([c] + [-lit for lit in lits])
            self._conjunctions[members] = c
        return self._conjunctions[members]

    def attacked(self, arg: Argument) -> int:
        if arg not in self._attacked:
            v = self.solver.new_variable()
            witnesses = [self.conjunction(s) for s in self._attacks_on(arg)]
            self.solver.add_clause([-v] + witnesses)
            for w in witnesses:
                self.solver.add_clause([-w, v])
            self._attacked[arg] = v
        return self._attacked[arg]

    def in_range(self, arg: Argument) -> int:
        if arg not in self._range:
            r = self.solver.new_variable()
            x, att = self.var[arg], self.attacked(arg)
            self.solver.add_clause([-r, x, att])
            self.solver.add_clause([-x, r])
            self.solver.add_clause([-att, r])
            self._range[arg] = r
        return self._range[arg]

    # ── Semantics constraints ───────────────────────────────────

    def add_conflict_free(self) -> None:
        """¬x(b₁) ∨ … ∨ ¬x(bₖ) ∨ ¬x(a) for every attack ({b₁..bₖ}, a)."""
        for target in self.arguments:
            for attackers in self._attacks_on(target):
                involved = self._ordered(attackers | {target})
                self.solver.add_clause([-self.var[a] for a in involved])

    def add_admissible(self) -> None:
        """x(a) → some attacker in each attack on a is attacked."""
        self.add_conflict_free()
        for target in self.arguments:
            for attackers in self._attacks_on(target):
                self.solver.add_clause(
                    [-self.var[target]]
                    + [self.attacked(b) for b in self._ordered(attackers)]
                )

    def add_complete(self) -> None:
        """Admissible, and every defended argument is in."""
        self.add_admissible()
        for target in self.arguments:
            countered = [self._countered(s) for s in self._attacks_on(target)]
            self.solver.add_clause([self.var[target]] + [-k for k in countered])

    def add_stable(self) -> None:
        """Conflict-free, and every argument is in or attacked."""
        self.add_conflict_free()
        for target in self.arguments:
            self.solver.add_clause([self.var[target], self.attacked(target)])

    def _countered(self, attackers: frozenset[Argument]) -> int:
        if len(attackers) == 1:
            return self.attacked(next(iter(attackers)))
        k = self.solver.new_variable()
        lits = [self.attacked(b) for b in self._ordered(attackers)]
        self.solver.add_clause([-k] + lits)
        for lit in lits:
            self.solver.add_clause([-lit, k])
        return k

    # ── Witnesses and blocking ──────────────────────────────────

    def witness_extension(self) -> frozenset[Argument]:
        values = self.solver.witness([self.var[a] for a in self.arguments])
        return frozenset(a for a, v in zip(self.arguments, values) if v)

    def witness_range(self) -> frozenset[Argument]:
        values = self.solver.witness([self.in_range(a) for a in self.arguments])
        return frozenset(a for a, v in zip(self.arguments, values) if v)

    def exact_lits(self, members: frozenset[Argument]) -> list[int]:
        """Literals of a clause excluding exactly ``members`` as a model."""
        return [
            -self.var[a] if a in members else self.var[a]
            for a in self.arguments
        ]

    def outside(self, members: frozenset[Argument]) -> list[Argument]:
        return [a for a in self.arguments if a not in members]

    def activation(self) -> int:
        return self.solver.new_variable()

    def retire(self, act: int) -> None:
        self.solver.add_clause([-act])

    def _attacks_on(self, target: Argument) -> list[frozenset[Argument]]:
        return sorted(self.af.attacking_sets(target), key=self.af.sort_key)

    def _ordered(self, members) -> list[Argument]:
        return sorted(members, key=self.af.index)


class SatExtensionSolver:
    """
    SAT-based extension search.

    Each call acquires a fresh solver from ``solver_factory`` inside a
    ``with`` block, so the solver is released on every exit path,
    including cancellation and errors.
    """

    def __init__(self, solver_factory: SolverFactory):
        self._factory = solver_factory
        self._algorithms = {
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
        }
        self._constraints = {
            Semantics.CONFLICT_FREE: FrameworkEncoding.add_conflict_free,
            Semantics.ADMISSIBLE: FrameworkEncoding.add_admissible,
            Semantics.COMPLETE: FrameworkEncoding.add_complete,
            Semantics.STABLE: FrameworkEncoding.add_stable,
        }

    def supports(self, semantics: Semantics) -> bool:
        return semantics in self._algorithms

    def extensions(self, af: ArgumentationFramework, semantics: Semantics,
                   cancel: CancellationToken | None = None) -> list[Extension]:
        algorithm = self._algorithms.get(semantics)
        if algorithm is None:
            raise UnsupportedConfigurationError(
                f"No SAT encoding for {semantics.value}"
            )
        found = algorithm(af, cancel)
        return [Extension(s, semantics)
                for s in sorted(set(found), key=af.sort_key)]

    @contextmanager
    def session(self, af: ArgumentationFramework) -> Iterator[FrameworkEncoding]:
        with self._factory() as solver:
            encoding = FrameworkEncoding(af, solver)
            yield encoding
            logger.debug(
                f"SAT session: {solver.num_variables} vars, "
                f"{solver.calls} solver calls"
            )

    # ── Enumeration of all models ───────────────────────────────

    def conflict_free_sets(self, af, cancel=None):
        return self._all_models(af, cancel, FrameworkEncoding.add_conflict_free)

    def admissible_sets(self, af, cancel=None):
        return self._all_models(af, cancel, FrameworkEncoding.add_admissible)

    def complete_sets(self, af, cancel=None):
        return self._all_models(af, cancel, FrameworkEncoding.add_complete)

    def stable_sets(self, af, cancel=None):
        return self._all_models(af, cancel, FrameworkEncoding.add_stable)

    def _all_models(self, af, cancel, constrain) -> list[frozenset[Argument]]:
        with self.session(af) as enc:
            constrain(enc)
            found = []
            while True:
                check_cancelled(cancel)
                if not enc.solver.satisfiable():
                    break
                model = enc.witness_extension()
                found.append(model)
                if not enc.arguments:
                    break
                enc.solver.add_clause(enc.exact_lits(model))
            return found

    # ── Maximal models ──────────────────────────────────────────

    def preferred_sets(self, af, cancel=None):
        return self._maximal_models(af, cancel, FrameworkEncoding.add_admissible)

    def naive_sets(self, af, cancel=None):
        return self._maximal_models(af, cancel, FrameworkEncoding.add_conflict_free)

    def _maximal_models(self, af, cancel, constrain) -> list[frozenset[Argument]]:
        with self.session(af) as enc:
            constrain(enc)
            found = []
            while True:
                check_cancelled(cancel)
                if not enc.solver.satisfiable():
                    break
                current = self._grow(enc, enc.witness_extension(), cancel)
                found.append(current)
                outside = enc.outside(current)
                if not outside:
                    break
                # later models must leave ``current``: no subset of it again
                enc.solver.add_clause([enc.var[a] for a in outside])
            return found

    def _grow(self, enc: FrameworkEncoding, current: frozenset[Argument],
              cancel) -> frozenset[Argument]:
        while True:
            outside = enc.outside(current)
            if not outside:
                return current
            check_cancelled(cancel)
            act = enc.activation()
            enc.solver.add_clause([-act] + [enc.var[a] for a in outside])
            grown = enc.solver.satisfiable(
                [act] + [enc.var[a] for a in enc._ordered(current)]
            )
            if grown:
                current = enc.witness_extension()
            enc.retire(act)
            if not grown:
                return current

    # ── Maximal range ───────────────────────────────────────────

    def stage_sets(self, af, cancel=None):
        return self._maximal_range_models(
            af, cancel, FrameworkEncoding.add_conflict_free)

    def semi_stable_sets(self, af, cancel=None):
        return self._maximal_range_models(
            af, cancel, FrameworkEncoding.add_complete)

    def _maximal_range_models(self, af, cancel, constrain):
        with self.session(af) as enc:
            constrain(enc)
            r = {a: enc.in_range(a) for a in enc.arguments}
            found = []
            while True:
                check_cancelled(cancel)
                if not enc.solver.satisfiable():
                    break
                covered = self._grow_range(enc, r, enc.witness_range(), cancel)
                outside = enc.outside(covered)

                # every model whose range is exactly ``covered``
                act = enc.activation()
                exact = ([act] + [r[a] for a in enc._ordered(covered)]
                         + [-r[a] for a in outside])
                while enc.solver.satisfiable(exact):
                    check_cancelled(cancel)
                    model = enc.witness_extension()
                    found.append(model)
                    enc.solver.add_clause([-act] + enc.exact_lits(model))
                enc.retire(act)

                if not outside:
                    break
                enc.solver.add_clause([r[a] for a in outside])
            return found

    def _grow_range(self, enc, r, covered, cancel) -> frozenset[Argument]:
        while True:
            outside = enc.outside(covered)
            if not outside:
                return covered
            check_cancelled(cancel)
            act = enc.activation()
            enc.solver.add_clause([-act] + [r[a] for a in outside])
            grown = enc.solver.satisfiable(
                [act] + [r[a] for a in enc._ordered(covered)]
            )
            if grown:
                covered = enc.witness_range()
            enc.retire(act)
            if not grown:
                return covered

    # ── Minimal model ───────────────────────────────────────────

    def grounded_sets(self, af, cancel=None):
        """The grounded extension is the ⊆-least complete extension."""
        with self.session(af) as enc:
            enc.add_complete()
            check_cancelled(cancel)
            if not enc.solver.satisfiable():
                raise SolverResourceError(
                    "complete encoding reported unsatisfiable"
                )
            current = enc.witness_extension()
            while current:
                check_cancelled(cancel)
                act = enc.activation()
                for a in enc.outside(current):
                    enc.solver.add_clause([-act, -enc.var[a]])
                enc.solver.add_clause(
                    [-act] + [-enc.var[a] for a in enc._ordered(current)]
                )
                shrunk = enc.solver.satisfiable([act])
                if shrunk:
                    current = enc.witness_extension()
                enc.retire(act)
                if not shrunk:
                    break
            return [current]

    # ── Derived ─────────────────────────────────────────────────

    def ideal_sets(self, af, cancel=None):
        preferred = self.preferred_sets(af, cancel)
        return [greatest_admissible_subset(af, intersection(preferred))]

    def eager_sets(self, af, cancel=None):
        semi_stable = self.semi_stable_sets(af, cancel)
        return [greatest_admissible_subset(af, intersection(semi_stable))]

    # ── Acceptance via assumptions ──────────────────────────────

    def credulous(self, af: ArgumentationFramework, arg: ArgumentRef,
                  semantics: Semantics,
                  cancel: CancellationToken | None = None) -> Optional[bool]:
        """
        Decide credulous acceptance with one solver call where an encoding
        captures it, else None. Credulous preferred and complete coincide
        with credulous admissible; credulous naive with conflict-free.
        """
        base = {
            Semantics.PREFERRED: Semantics.ADMISSIBLE,
            Semantics.COMPLETE: Semantics.ADMISSIBLE,
            Semantics.NAIVE: Semantics.CONFLICT_FREE,
        }.get(semantics, semantics)
        constrain = self._constraints.get(base)
        if constrain is None:
            return None
        return self._query(af, arg, constrain, positive=True, cancel=cancel)

    def sceptical(self, af: ArgumentationFramework, arg: ArgumentRef,
                  semantics: Semantics,
                  cancel: CancellationToken | None = None) -> Optional[bool]:
        """
        Decide sceptical acceptance as "no model without arg". Vacuously
        true when the encoding has no model at all. Sceptical grounded
        equals sceptical complete.
        """
        if semantics is Semantics.GROUNDED:
            semantics = Semantics.COMPLETE
        constrain = self._constraints.get(semantics)
        if constrain is None:
            return None
        return not self._query(af, arg, constrain, positive=False, cancel=cancel)

    def _query(self, af, arg, constrain, positive, cancel) -> bool:
        member = af.check_members([arg])
        with self.session(af) as enc:
            constrain(enc)
            check_cancelled(cancel)
            lit = enc.var[next(iter(member))]
            return enc.solver.satisfiable([lit if positive else -lit])
