"""
SCC-recursive semantics (Baroni, Giacomin & Guida 2005).

CF2 splits the attack graph into strongly connected components and
processes them in topological order. Inside a component only the
arguments not attacked by an already accepted argument of an earlier
component survive; the surviving sub-framework is solved recursively,
and a framework that is a single component falls back to its naive
extensions.
"""

from __future__ import annotations

import logging
from typing import Callable

from .errors import (
    CancellationToken,
    UnsupportedConfigurationError,
    check_cancelled,
)
from .models import Argument, ArgumentationFramework

logger = logging.getLogger("argsem.scc")

BaseSemantics = Callable[
    [ArgumentationFramework, "CancellationToken | None"],
    list[frozenset[Argument]],
]


def cf2_extensions(af: ArgumentationFramework, naive: BaseSemantics,
                   cancel: CancellationToken | None = None
                   ) -> list[frozenset[Argument]]:
    """All CF2 extensions of a binary framework, in canonical order."""
    if not af.is_binary:
        raise UnsupportedConfigurationError(
            "CF2 is only defined here for binary attack relations"
        )
    found = set(_cf2(af, naive, cancel, depth=0))
    return sorted(found, key=af.sort_key)


def _cf2(af: ArgumentationFramework, naive: BaseSemantics,
         cancel: CancellationToken | None, depth: int
         ) -> list[frozenset[Argument]]:
    components = af.strongly_connected_components()
    if len(components) <= 1:
        return naive(af, cancel)

    logger.debug(
        f"cf2 depth={depth}: {len(components)} components "
        f"over {len(af)} arguments"
    )
    partials: list[frozenset[Argument]] = [frozenset()]
    for component in components:
        check_cancelled(cancel)
        extended = []
        for partial in partials:
            surviving = [
                a for a in af.arguments()
                if a in component
                and not ((af.attackers(a) - component) & partial)
            ]
            for local in _cf2(af.restrict(surviving), naive, cancel, depth + 1):
                extended.append(partial | local)
        partials = extended
    return partials
