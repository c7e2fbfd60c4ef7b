"""
Errors and cooperative cancellation for argumentation reasoning.

Construction-time problems (an attack naming an unknown argument) are
raised eagerly by the framework; configuration problems and solver
failures are raised by the reasoner at query time.
"""

from __future__ import annotations

import threading


class ArgumentationError(Exception):
    """Base class for every error raised by argsem."""


class InvalidReferenceError(ArgumentationError, ValueError):
    """An attack or extension references an argument not in the framework."""

    def __init__(self, names, context: str = ""):
        self.names = sorted(str(n) for n in names)
        where = f" ({context})" if context else ""
        super().__init__(
            f"Unknown argument(s){where}: {', '.join(self.names)}"
        )


class UnsupportedConfigurationError(ArgumentationError):
    """The requested semantics × strategy combination is not implemented."""


class SolverResourceError(ArgumentationError):
    """The SAT backend failed or is unavailable."""


class CancelledError(ArgumentationError):
    """Cooperative cancellation was observed mid-search."""


class CancellationToken:
    """
    Caller-owned cancellation signal.

    Long-running searches call ``raise_if_cancelled`` between subset
    probes and between SAT solver calls. Safe to trigger from another
    thread.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancelledError("Reasoning query cancelled")


def check_cancelled(cancel: CancellationToken | None) -> None:
    if cancel is not None:
        cancel.raise_if_cancelled()
