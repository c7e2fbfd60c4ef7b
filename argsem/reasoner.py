"""
reasoner.py — Reasoner facade

Single entry point for semantics queries:

  extensions(framework, semantics, strategy)   → list of Extensions
  accepts(framework, argument, semantics, mode) → bool

Strategy:
  brute_force — explicit subset search (SemanticsEngine); always correct,
                exponential, deterministic output order; the test oracle
  sat         — propositional encodings solved incrementally
                (SatExtensionSolver); CF2 has no encoding

A (semantics, strategy) pair without an implementation raises
UnsupportedConfigurationError; there is no silent fallback. Configuration
comes in through ReasonerConfig, never from process-wide state.
"""

from __future__ import annotations

import logging
import time
from typing import Optional, Union

from argsem.argumentation.engine import SemanticsEngine, intersection
from argsem.argumentation.errors import (
    CancellationToken,
    SolverResourceError,
    UnsupportedConfigurationError,
)
from argsem.argumentation.bridge import FrameworkBridge
from argsem.argumentation.models import (
    Argument,
    ArgumentationFramework,
    ArgumentRef,
    Extension,
    Labelling,
    Semantics,
)
from argsem.models import (
    AcceptanceMode,
    AcceptanceResult,
    AcceptanceStatus,
    ReasonerConfig,
    ReasoningResult,
    SatBackend,
    Strategy,
)
from argsem.sat.encoder import SatExtensionSolver, SolverFactory
from argsem.sat.solver import DimacsSolver, PySatSolver, SatSolver

log = logging.getLogger("argsem.reasoner")

SemanticsRef = Union[Semantics, str]
StrategyRef = Union[Strategy, str, None]


class Reasoner:
    """
    Orchestrates brute-force and SAT-based reasoning.

    Usage:
        reasoner = Reasoner(ReasonerConfig(strategy="sat"))
        reasoner.extensions(af, Semantics.PREFERRED)
        reasoner.accepts(af, "a", "ST", AcceptanceMode.SCEPTICAL)

    A Reasoner holds no per-query state: every SAT query opens and closes
    its own solver, so one instance can serve concurrent queries.
    """

    def __init__(self, config: Optional[ReasonerConfig] = None,
                 solver_factory: Optional[SolverFactory] = None):
        self.config = config or ReasonerConfig()
        self.engine = SemanticsEngine(
            warn_threshold=self.config.brute_force_warn_threshold,
        )
        self.sat = SatExtensionSolver(solver_factory or self._make_solver)
        self.bridge = FrameworkBridge()

    def _make_solver(self) -> SatSolver:
        if self.config.sat_backend is SatBackend.DIMACS:
            if not self.config.sat_binary:
                raise SolverResourceError(
                    "sat_backend=dimacs requires sat_binary to be set"
                )
            return DimacsSolver(
                self.config.sat_binary,
                self.config.sat_binary_args,
                timeout=self.config.sat_timeout,
            )
        return PySatSolver(self.config.sat_solver)

    def _strategy(self, strategy: StrategyRef) -> Strategy:
        if strategy is None:
            return self.config.strategy
        try:
            return Strategy(strategy)
        except ValueError:
            raise UnsupportedConfigurationError(
                f"Unknown strategy: {strategy!r}"
            ) from None

    def supports(self, semantics: SemanticsRef, strategy: StrategyRef = None) -> bool:
        semantics = Semantics.parse(semantics)
        if self._strategy(strategy) is Strategy.SAT:
            return self.sat.supports(semantics)
        return self.engine.supports(semantics)

    # ── Extensions ──────────────────────────────────────────────

    def extensions(
        self,
        framework: ArgumentationFramework,
        semantics: SemanticsRef,
        strategy: StrategyRef = None,
        cancel: Optional[CancellationToken] = None,
    ) -> list[Extension]:
        """
        All extensions of ``framework`` under ``semantics``.

        The result is a set of extensions returned as a list in canonical
        order (size, then framework order). An empty list is a legal
        answer, e.g. stable semantics on an odd cycle.
        """
        semantics = Semantics.parse(semantics)
        strategy = self._strategy(strategy)
        start = time.perf_counter()

        if strategy is Strategy.SAT:
            result = self.sat.extensions(framework, semantics, cancel)
        else:
            result = self.engine.extensions(framework, semantics, cancel)

        elapsed = (time.perf_counter() - start) * 1000
        log.debug(
            f"{semantics.code} via {strategy.value}: {len(result)} extensions "
            f"over {len(framework)} args in {elapsed:.2f}ms"
        )
        return result

    def labellings(self, framework: ArgumentationFramework,
                   semantics: SemanticsRef, strategy: StrategyRef = None,
                   cancel: Optional[CancellationToken] = None) -> list[Labelling]:
        return [
            Labelling.from_extension(framework, ext)
            for ext in self.extensions(framework, semantics, strategy, cancel)
        ]

    def solve(self, framework: ArgumentationFramework,
              semantics: SemanticsRef, strategy: StrategyRef = None,
              cancel: Optional[CancellationToken] = None) -> ReasoningResult:
        """Extensions wrapped in a serialisable result with timing."""
        semantics = Semantics.parse(semantics)
        strategy = self._strategy(strategy)
        start = time.perf_counter()
        found = self.extensions(framework, semantics, strategy, cancel)
        elapsed = (time.perf_counter() - start) * 1000
        return ReasoningResult(
            semantics=semantics.value,
            strategy=strategy,
            extensions=[self.bridge.extension_record(framework, e) for e in found],
            framework_summary=framework.to_dict()["stats"],
            resolution_time_ms=round(elapsed, 3),
        )

    # ── Acceptance ──────────────────────────────────────────────

    def accepts(
        self,
        framework: ArgumentationFramework,
        argument: ArgumentRef,
        semantics: SemanticsRef,
        mode: Union[AcceptanceMode, str],
        strategy: StrategyRef = None,
        cancel: Optional[CancellationToken] = None,
    ) -> bool:
        """
        Credulous: ``argument`` is in at least one extension.
        Sceptical: ``argument`` is in every extension. With no extensions
        at all (stable on an odd cycle) sceptical acceptance holds
        vacuously and credulous acceptance fails.
        """
        target = _single(framework, argument)
        semantics = Semantics.parse(semantics)
        mode = AcceptanceMode(mode)
        strategy = self._strategy(strategy)

        if strategy is Strategy.SAT:
            if mode is AcceptanceMode.CREDULOUS:
                answer = self.sat.credulous(framework, target, semantics, cancel)
            else:
                answer = self.sat.sceptical(framework, target, semantics, cancel)
            if answer is not None:
                return answer

        found = self.extensions(framework, semantics, strategy, cancel)
        if mode is AcceptanceMode.CREDULOUS:
            return any(target in e.arguments for e in found)
        return all(target in e.arguments for e in found)

    def acceptance_status(
        self,
        framework: ArgumentationFramework,
        argument: ArgumentRef,
        semantics: SemanticsRef,
        strategy: StrategyRef = None,
        cancel: Optional[CancellationToken] = None,
    ) -> AcceptanceStatus:
        """
        ACCEPTED if in every extension, UNDECIDED if only in some,
        REJECTED if in none. Without any extension the answer is REJECTED.
        """
        target = _single(framework, argument)
        found = self.extensions(framework, semantics, strategy, cancel)
        if not any(target in e.arguments for e in found):
            return AcceptanceStatus.REJECTED
        if all(target in e.arguments for e in found):
            return AcceptanceStatus.ACCEPTED
        return AcceptanceStatus.UNDECIDED

    def query(self, framework: ArgumentationFramework, argument: ArgumentRef,
              semantics: SemanticsRef, mode: Union[AcceptanceMode, str],
              strategy: StrategyRef = None,
              cancel: Optional[CancellationToken] = None) -> AcceptanceResult:
        """``accepts`` wrapped in a serialisable result with timing."""
        target = _single(framework, argument)
        semantics = Semantics.parse(semantics)
        strategy = self._strategy(strategy)
        start = time.perf_counter()
        accepted = self.accepts(framework, target, semantics, mode, strategy, cancel)
        elapsed = (time.perf_counter() - start) * 1000
        return AcceptanceResult(
            argument=target.name,
            semantics=semantics.value,
            mode=AcceptanceMode(mode),
            accepted=accepted,
            strategy=strategy,
            resolution_time_ms=round(elapsed, 3),
        )

    # ── Framework properties ────────────────────────────────────

    def is_coherent(self, framework: ArgumentationFramework,
                    strategy: StrategyRef = None,
                    cancel: Optional[CancellationToken] = None) -> bool:
        """Preferred and stable extensions coincide."""
        preferred = self.extensions(framework, Semantics.PREFERRED, strategy, cancel)
        stable = self.extensions(framework, Semantics.STABLE, strategy, cancel)
        return {e.arguments for e in preferred} == {e.arguments for e in stable}

    def is_relatively_coherent(self, framework: ArgumentationFramework,
                               strategy: StrategyRef = None,
                               cancel: Optional[CancellationToken] = None) -> bool:
        """The grounded extension equals the intersection of preferred ones."""
        grounded = self.extensions(framework, Semantics.GROUNDED, strategy, cancel)
        preferred = self.extensions(framework, Semantics.PREFERRED, strategy, cancel)
        return grounded[0].arguments == intersection([e.arguments for e in preferred])


def _single(framework: ArgumentationFramework, argument: ArgumentRef) -> Argument:
    return next(iter(framework.check_members([argument])))


# ── Module-level shortcuts ───────────────────────────────────────

def extensions(framework: ArgumentationFramework, semantics: SemanticsRef,
               strategy: StrategyRef = Strategy.BRUTE_FORCE,
               config: Optional[ReasonerConfig] = None,
               cancel: Optional[CancellationToken] = None) -> list[Extension]:
    return Reasoner(config).extensions(framework, semantics, strategy, cancel)


def accepts(framework: ArgumentationFramework, argument: ArgumentRef,
            semantics: SemanticsRef, mode: Union[AcceptanceMode, str],
            strategy: StrategyRef = Strategy.BRUTE_FORCE,
            config: Optional[ReasonerConfig] = None,
            cancel: Optional[CancellationToken] = None) -> bool:
    return Reasoner(config).accepts(framework, argument, semantics, mode,
                                    strategy, cancel)
