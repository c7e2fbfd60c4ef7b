"""
sat/solver.py — Minimal incremental SAT interface

The encoder only ever talks to ``SatSolver``: allocate variables, add
clauses, solve under assumptions, read a witness, close. Literals follow
the DIMACS convention (variables are positive integers allocated from 1,
a negative literal is the negation).

Backends:
- PySatSolver: in-process solver from python-sat (default "minisat22")
- DimacsSolver: external binary fed a DIMACS CNF file per call, reading
  SAT-competition output ("s SATISFIABLE" / "v ..." lines)
"""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from abc import ABC, abstractmethod
from typing import Iterable, Optional, Sequence

from pysat.solvers import Solver

from argsem.argumentation.errors import SolverResourceError

log = logging.getLogger("argsem.sat")

DEFAULT_SOLVER = "minisat22"

SAT_EXIT_CODE = 10
UNSAT_EXIT_CODE = 20


class SatSolver(ABC):
    """
    Stateful SAT solver handle.

    Usage:
        with PySatSolver() as solver:
            a, b = solver.new_variable(), solver.new_variable()
            solver.add_clause([a, -b])
            if solver.satisfiable([b]):
                solver.witness([a, b])  # [True, True]
    """

    def __init__(self):
        self._top = 0
        self._closed = False
        self._model: dict[int, bool] | None = None
        self.calls = 0

    def new_variable(self) -> int:
        self._top += 1
        return self._top

    @property
    def num_variables(self) -> int:
        return self._top

    def add_clause(self, literals: Iterable[int]) -> None:
        clause = [int(lit) for lit in literals]
        self._check_open()
        if not clause:
            raise ValueError("Empty clauses are not accepted")
        for lit in clause:
            if lit == 0 or abs(lit) > self._top:
                raise ValueError(f"Literal {lit} does not name an allocated variable")
        self._add(clause)

    def satisfiable(self, assumptions: Sequence[int] = ()) -> bool:
        """Solve with ``assumptions`` temporarily forced true."""
        self._check_open()
        self.calls += 1
        model = self._solve([int(lit) for lit in assumptions])
        self._model = model
        return model is not None

    def witness(self, variables: Sequence[int],
                assumptions: Optional[Sequence[int]] = None) -> list[bool] | None:
        """
        Truth value per requested variable under the last satisfiable call.
        With ``assumptions`` the solver is called first; ``None`` means
        unsatisfiable.
        """
        if assumptions is not None and not self.satisfiable(assumptions):
            return None
        if self._model is None:
            return None
        return [self._model.get(v, False) for v in variables]

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._model = None
            self._release()

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def _check_open(self) -> None:
        if self._closed:
            raise SolverResourceError("SAT solver already closed")

    @abstractmethod
    def _add(self, clause: list[int]) -> None:
        ...

    @abstractmethod
    def _solve(self, assumptions: list[int]) -> dict[int, bool] | None:
        """Return the model as variable → value, or None when UNSAT."""

    def _release(self) -> None:
        pass


# ── In-process backend ───────────────────────────────────────────

class PySatSolver(SatSolver):
    """Incremental solver backed by python-sat."""

    def __init__(self, name: str = DEFAULT_SOLVER):
        super().__init__()
        self.name = name
        try:
            self._solver = Solver(name=name)
        except Exception as e:
            log.error(f"Cannot create SAT solver {name!r}: {e}")
            raise SolverResourceError(f"SAT solver {name!r} unavailable: {e}") from e

    def _add(self, clause):
        self._solver.add_clause(clause)

    def _solve(self, assumptions):
        try:
            result = self._solver.solve(assumptions=assumptions)
        except (RuntimeError, NotImplementedError) as e:
            log.error(f"SAT solver {self.name!r} failed: {e}")
            raise SolverResourceError(f"SAT solver {self.name!r} failed: {e}") from e
        if not result:
            return None
        return {abs(lit): lit > 0 for lit in self._solver.get_model() or []}

    def _release(self):
        self._solver.delete()


# ── External binary backend ──────────────────────────────────────

def to_dimacs(num_variables: int, clauses: Sequence[Sequence[int]],
              assumptions: Sequence[int] = ()) -> str:
    """DIMACS CNF text; assumptions are appended as unit clauses."""
    body = [list(c) for c in clauses] + [[lit] for lit in assumptions]
    lines = [f"p cnf {num_variables} {len(body)}"]
    lines.extend(" ".join(str(lit) for lit in clause) + " 0" for clause in body)
    return "\n".join(lines) + "\n"


def parse_competition_output(output: str,
                             returncode: int | None = None) -> dict[int, bool] | None:
    """
    Parse SAT-competition solver output. Returns the model, or None if
    UNSATISFIABLE. Unknown or missing status raises SolverResourceError.
    """
    status = None
    model: dict[int, bool] = {}
    for line in output.splitlines():
        line = line.strip()
        if line.startswith("s "):
            status = line[2:].strip().upper()
        elif line.startswith("v "):
            for token in line[2:].split():
                lit = int(token)
                if lit != 0:
                    model[abs(lit)] = lit > 0

    if status is None and returncode in (SAT_EXIT_CODE, UNSAT_EXIT_CODE):
        status = "SATISFIABLE" if returncode == SAT_EXIT_CODE else "UNSATISFIABLE"
    if status == "SATISFIABLE":
        return model
    if status == "UNSATISFIABLE":
        return None
    raise SolverResourceError(f"Unrecognised solver status: {status!r}")


class DimacsSolver(SatSolver):
    """
    Runs an external SAT binary (cadical, kissat, glucose -model, ...)
    on a fresh DIMACS file for every call. Clauses are kept in memory,
    so the incremental interface is preserved at the cost of re-solving.
    """

    def __init__(self, binary: str, args: Sequence[str] = (),
                 timeout: float | None = None, temp_dir: str | None = None):
        super().__init__()
        self.binary = binary
        self.args = list(args)
        self.timeout = timeout
        self.temp_dir = temp_dir
        self._clauses: list[list[int]] = []

    @property
    def clauses(self) -> list[list[int]]:
        return [list(c) for c in self._clauses]

    def _add(self, clause):
        self._clauses.append(clause)

    def _solve(self, assumptions):
        text = to_dimacs(self._top, self._clauses, assumptions)
        fd, path = tempfile.mkstemp(suffix=".cnf", dir=self.temp_dir)
        try:
            with os.fdopen(fd, "w") as f:
                f.write(text)
            proc = subprocess.run(
                [self.binary, *self.args, path],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.SubprocessError) as e:
            log.error(f"SAT binary {self.binary!r} failed: {e}")
            raise SolverResourceError(f"SAT binary {self.binary!r} failed: {e}") from e
        finally:
            try:
                os.unlink(path)
            except OSError:
                pass
        return parse_competition_output(proc.stdout, proc.returncode)
