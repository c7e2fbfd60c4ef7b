"""
Argumentation Framework Models — Dung's Abstract Argumentation

Implements the formal structures from:
- Dung (1995): On the acceptability of arguments
- Nielsen & Parsons (2006): frameworks with sets of attacking arguments
- Caminada (2006): labellings as an alternative view on extensions

An attack is a (set of attackers, target) pair. Binary frameworks are the
special case where every attacker set is a singleton, so every semantics
is written once against attacker sets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Union

import networkx as nx

from .errors import InvalidReferenceError, UnsupportedConfigurationError


class Semantics(str, Enum):
    """Argumentation semantics for extension computation."""
    CONFLICT_FREE = "conflict_free"
    ADMISSIBLE = "admissible"
    COMPLETE = "complete"
    GROUNDED = "grounded"
    PREFERRED = "preferred"
    STABLE = "stable"
    SEMI_STABLE = "semi_stable"
    STAGE = "stage"
    IDEAL = "ideal"
    EAGER = "eager"
    NAIVE = "naive"
    CF2 = "cf2"

    @property
    def code(self) -> str:
        """Short tag as used by ICCMA-style solvers (CF, ADM, CO, ...)."""
        return _SEMANTICS_CODES[self]

    @classmethod
    def parse(cls, value: Union[str, "Semantics"]) -> "Semantics":
        """Accept a member, its value ("preferred") or its code ("PR")."""
        if isinstance(value, Semantics):
            return value
        text = str(value).strip()
        try:
            return cls(text.lower())
        except ValueError:
            pass
        for member, code in _SEMANTICS_CODES.items():
            if code == text.upper():
                return member
        raise UnsupportedConfigurationError(f"Unknown semantics: {value!r}")


_SEMANTICS_CODES = {
    Semantics.CONFLICT_FREE: "CF",
    Semantics.ADMISSIBLE: "ADM",
    Semantics.COMPLETE: "CO",
    Semantics.GROUNDED: "GR",
    Semantics.PREFERRED: "PR",
    Semantics.STABLE: "ST",
    Semantics.SEMI_STABLE: "SST",
    Semantics.STAGE: "STG",
    Semantics.IDEAL: "ID",
    Semantics.EAGER: "EA",
    Semantics.NAIVE: "NA",
    Semantics.CF2: "CF2",
}


class Label(str, Enum):
    """Three-valued status of an argument in a labelling."""
    IN = "in"
    OUT = "out"
    UNDEC = "undec"


@dataclass(frozen=True, order=True)
class Argument:
    """
    An argument in an abstract argumentation framework.

    Arguments are opaque: only the name matters, and two arguments with
    the same name are the same argument.
    """
    name: str

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("Argument name must be a non-empty string")

    def __str__(self):
        return self.name

    def __repr__(self):
        return f"Arg({self.name})"


@dataclass(frozen=True)
class Attack:
    """
    An attack relation.

    If ({a}, b) is an attack, argument 'a' attacks argument 'b'. With a
    larger attacker set the attack succeeds only when all attackers are
    jointly accepted.
    """
    attackers: frozenset[Argument]
    target: Argument

    def __post_init__(self):
        if not self.attackers:
            raise ValueError("An attack needs at least one attacker")

    @classmethod
    def binary(cls, attacker: Argument, target: Argument) -> "Attack":
        return cls(frozenset({attacker}), target)

    @property
    def is_binary(self) -> bool:
        return len(self.attackers) == 1

    @property
    def attacker(self) -> Argument:
        """The single attacker of a binary attack."""
        if not self.is_binary:
            raise ValueError(f"{self!r} is a set attack")
        return next(iter(self.attackers))

    @property
    def is_self_attack(self) -> bool:
        return self.target in self.attackers

    def __repr__(self):
        if self.is_binary:
            return f"({self.attacker.name} -> {self.target.name})"
        names = ",".join(sorted(a.name for a in self.attackers))
        return f"({{{names}}} -> {self.target.name})"


ArgumentRef = Union[Argument, str]


@dataclass(frozen=True)
class Extension:
    """
    A set of arguments that are collectively acceptable under
    a given semantics.

    Extensions are built during search and frozen on completion; the
    semantics tag records what they were computed for and does not take
    part in set comparisons (use ``arguments`` for those).
    """
    arguments: frozenset[Argument] = field(default_factory=frozenset)
    semantics: Semantics | None = field(default=None, compare=False)

    def __contains__(self, item) -> bool:
        if isinstance(item, str):
            item = Argument(item)
        return item in self.arguments

    def __iter__(self) -> Iterator[Argument]:
        return iter(self.arguments)

    def __len__(self) -> int:
        return len(self.arguments)

    @property
    def size(self) -> int:
        return len(self.arguments)

    @property
    def is_empty(self) -> bool:
        return not self.arguments

    @property
    def names(self) -> frozenset[str]:
        return frozenset(a.name for a in self.arguments)

    def __repr__(self):
        tag = f"{self.semantics.code}:" if self.semantics else ""
        return f"Ext({tag}{{{', '.join(sorted(self.names))}}})"


class ArgumentationFramework:
    """
    Abstract Argumentation Framework (AAF).

    AF = (Args, Attacks) where:
    - Args is a finite set of arguments, iterated in insertion order
    - Attacks ⊆ (2^Args \\ {∅}) × Args

    Endpoints are validated when an attack is added, so semantics never
    see dangling references. Attacker and attacked indexes give O(1)
    neighbour lookup. Frameworks must not be mutated while queries are
    running against them; use ``copy``/``restrict``/``without`` to derive
    a new framework instead.
    """

    def __init__(self, arguments: Iterable[ArgumentRef] = (),
                 attacks: Iterable = ()):
        self._arguments: dict[str, Argument] = {}
        self._attacks: set[Attack] = set()
        self._attacking_sets: dict[Argument, set[frozenset[Argument]]] = {}
        self._attacked: dict[Argument, set[Argument]] = {}
        self._order: dict[Argument, int] | None = None

        for arg in arguments:
            self.add_argument(arg)
        for attack in attacks:
            if isinstance(attack, Attack):
                self.add_attack(attack.attackers, attack.target)
            else:
                attacker, target = attack
                self.add_attack(attacker, target)

    # ── Construction ────────────────────────────────────────────

    def add_argument(self, arg: ArgumentRef) -> Argument:
        if isinstance(arg, str):
            arg = Argument(arg)
        if arg.name not in self._arguments:
            self._arguments[arg.name] = arg
            self._attacking_sets[arg] = set()
            self._attacked[arg] = set()
            self._order = None
        return self._arguments[arg.name]

    def add_attack(self, attacker, target: ArgumentRef) -> Attack:
        """
        Add an attack. ``attacker`` is a single argument (binary attack)
        or an iterable of arguments (set attack). Every endpoint must
        already be part of the framework.
        """
        if isinstance(attacker, (Argument, str)):
            refs = [attacker]
        else:
            refs = list(attacker)
        unknown = [r for r in [*refs, target] if not self.contains(r)]
        if unknown:
            raise InvalidReferenceError(unknown, "attack endpoint")

        attackers = frozenset(self._resolve(r) for r in refs)
        attack = Attack(attackers, self._resolve(target))
        if attack not in self._attacks:
            self._attacks.add(attack)
            self._attacking_sets[attack.target].add(attackers)
            for a in attackers:
                self._attacked[a].add(attack.target)
        return attack

    def remove_attack(self, attack: Attack) -> bool:
        if attack not in self._attacks:
            return False
        self._attacks.discard(attack)
        self._attacking_sets[attack.target].discard(attack.attackers)
        for a in attack.attackers:
            still = any(
                a in other.attackers and other.target == attack.target
                for other in self._attacks
            )
            if not still:
                self._attacked[a].discard(attack.target)
        return True

    def remove_argument(self, arg: ArgumentRef) -> bool:
        """Remove an argument together with every incident attack."""
        if not self.contains(arg):
            return False
        arg = self._resolve(arg)
        for attack in [t for t in self._attacks
                       if t.target == arg or arg in t.attackers]:
            self.remove_attack(attack)
        del self._arguments[arg.name]
        del self._attacking_sets[arg]
        del self._attacked[arg]
        self._order = None
        return True

    # ── Queries ─────────────────────────────────────────────────

    def arguments(self) -> tuple[Argument, ...]:
        return tuple(self._arguments.values())

    def attacks(self) -> frozenset[Attack]:
        return frozenset(self._attacks)

    def contains(self, arg: ArgumentRef) -> bool:
        name = arg if isinstance(arg, str) else arg.name
        return name in self._arguments

    def attackers(self, arg: ArgumentRef) -> frozenset[Argument]:
        """All arguments taking part in some attack on ``arg``."""
        sets = self._attacking_sets[self._resolve(arg)]
        return frozenset().union(*sets) if sets else frozenset()

    def attacking_sets(self, arg: ArgumentRef) -> frozenset[frozenset[Argument]]:
        return frozenset(self._attacking_sets[self._resolve(arg)])

    def attacked(self, arg: ArgumentRef) -> frozenset[Argument]:
        return frozenset(self._attacked[self._resolve(arg)])

    def attacks_set(self, candidate: frozenset[Argument],
                    target: ArgumentRef) -> bool:
        """True iff some attacking set of ``target`` lies inside ``candidate``."""
        return any(
            attackers <= candidate
            for attackers in self._attacking_sets[self._resolve(target)]
        )

    def defends(self, candidate: frozenset[Argument],
                arg: ArgumentRef) -> bool:
        """
        ``candidate`` defends ``arg`` if every attack on ``arg`` has a
        member that is itself attacked by ``candidate``.
        """
        for attackers in self._attacking_sets[self._resolve(arg)]:
            if not any(self.attacks_set(candidate, x) for x in attackers):
                return False
        return True

    def range_of(self, candidate: frozenset[Argument]) -> frozenset[Argument]:
        """S together with every argument S attacks."""
        reached = set(candidate)
        for a in candidate:
            for target in self._attacked[a]:
                if target not in reached and self.attacks_set(candidate, target):
                    reached.add(target)
        return frozenset(reached)

    def is_attacking_all_others(self, candidate: frozenset[Argument]) -> bool:
        return len(self.range_of(candidate)) == len(self._arguments)

    def check_members(self, candidate: Iterable[ArgumentRef]) -> frozenset[Argument]:
        """Resolve names to arguments; reject anything outside the framework."""
        refs = list(candidate)
        unknown = [r for r in refs if not self.contains(r)]
        if unknown:
            raise InvalidReferenceError(unknown, "extension member")
        return frozenset(self._resolve(r) for r in refs)

    def index(self, arg: ArgumentRef) -> int:
        """Canonical position of ``arg`` (insertion order)."""
        if self._order is None:
            self._order = {a: i for i, a in enumerate(self._arguments.values())}
        return self._order[self._resolve(arg)]

    def sort_key(self, candidate: Iterable[Argument]) -> tuple:
        """Size first, then lexicographic on canonical indices."""
        indices = sorted(self.index(a) for a in candidate)
        return (len(indices), tuple(indices))

    # ── Structure ───────────────────────────────────────────────

    @property
    def is_binary(self) -> bool:
        return all(attack.is_binary for attack in self._attacks)

    def has_self_loops(self) -> bool:
        return any(attack.is_self_attack for attack in self._attacks)

    def to_networkx(self) -> nx.DiGraph:
        """Dependency graph: an edge from every attacker to its target."""
        graph = nx.DiGraph()
        graph.add_nodes_from(self._arguments.values())
        for attack in self._attacks:
            for a in attack.attackers:
                graph.add_edge(a, attack.target)
        return graph

    def is_well_founded(self) -> bool:
        """No infinite chain of attacks, i.e. the attack graph is acyclic."""
        return nx.is_directed_acyclic_graph(self.to_networkx())

    def strongly_connected_components(self) -> list[frozenset[Argument]]:
        """SCCs of the attack graph, listed in a topological order."""
        graph = self.to_networkx()
        condensed = nx.condensation(graph)
        order = nx.lexicographical_topological_sort(
            condensed,
            key=lambda c: min(self.index(a) for a in condensed.nodes[c]["members"]),
        )
        return [frozenset(condensed.nodes[c]["members"]) for c in order]

    def restrict(self, candidate: Iterable[ArgumentRef]) -> "ArgumentationFramework":
        """Sub-framework induced by ``candidate``, keeping canonical order."""
        keep = self.check_members(candidate)
        return ArgumentationFramework(
            [a for a in self._arguments.values() if a in keep],
            [t for t in self._attacks
             if t.target in keep and t.attackers <= keep],
        )

    def without(self, arg: ArgumentRef) -> "ArgumentationFramework":
        """Copy of this framework with ``arg`` (and its attacks) removed."""
        other = self.copy()
        other.remove_argument(arg)
        return other

    def copy(self) -> "ArgumentationFramework":
        return ArgumentationFramework(self._arguments.values(), self._attacks)

    # ── Helpers ─────────────────────────────────────────────────

    def _resolve(self, arg: ArgumentRef) -> Argument:
        name = arg if isinstance(arg, str) else arg.name
        try:
            return self._arguments[name]
        except KeyError:
            raise InvalidReferenceError([name]) from None

    def __len__(self):
        return len(self._arguments)

    def __iter__(self) -> Iterator[Argument]:
        return iter(self.arguments())

    def __contains__(self, item) -> bool:
        return isinstance(item, (Argument, str)) and self.contains(item)

    def __repr__(self):
        return (f"ArgumentationFramework(arguments={len(self._arguments)}, "
                f"attacks={len(self._attacks)})")

    def to_dict(self) -> dict:
        return {
            "arguments": [a.name for a in self._arguments.values()],
            "attacks": [
                {
                    "attackers": sorted(a.name for a in t.attackers),
                    "target": t.target.name,
                }
                for t in sorted(self._attacks, key=self._attack_key)
            ],
            "stats": {
                "num_arguments": len(self._arguments),
                "num_attacks": len(self._attacks),
            },
        }

    def _attack_key(self, attack: Attack) -> tuple:
        return (self.sort_key(attack.attackers), self.index(attack.target))


class Labelling:
    """
    A total map from arguments to {IN, OUT, UNDEC}.

    Built from an extension: IN = members, OUT = arguments attacked by the
    members, UNDEC = the rest. For complete extensions this is a bijection.
    """

    def __init__(self, labels: dict[Argument, Label]):
        self._labels = dict(labels)

    @classmethod
    def from_extension(cls, af: ArgumentationFramework,
                       extension: Extension | Iterable[ArgumentRef]) -> "Labelling":
        members = af.check_members(extension)
        labels = {}
        for arg in af.arguments():
            if arg in members:
                labels[arg] = Label.IN
            elif af.attacks_set(members, arg):
                labels[arg] = Label.OUT
            else:
                labels[arg] = Label.UNDEC
        return cls(labels)

    def to_extension(self, semantics: Semantics | None = None) -> Extension:
        return Extension(self.in_arguments, semantics)

    def __getitem__(self, arg: ArgumentRef) -> Label:
        if isinstance(arg, str):
            arg = Argument(arg)
        return self._labels[arg]

    def items(self):
        return self._labels.items()

    @property
    def in_arguments(self) -> frozenset[Argument]:
        return self._with(Label.IN)

    @property
    def out_arguments(self) -> frozenset[Argument]:
        return self._with(Label.OUT)

    @property
    def undec_arguments(self) -> frozenset[Argument]:
        return self._with(Label.UNDEC)

    def _with(self, label: Label) -> frozenset[Argument]:
        return frozenset(a for a, l in self._labels.items() if l is label)

    def is_complete(self, af: ArgumentationFramework) -> bool:
        """
        Complete-labelling legality: an argument is IN iff every attack on
        it has an OUT attacker, and OUT iff some attack on it is entirely IN.
        """
        if set(self._labels) != set(af.arguments()):
            return False
        for arg, label in self._labels.items():
            sets = af.attacking_sets(arg)
            all_countered = all(
                any(self._labels[x] is Label.OUT for x in attackers)
                for attackers in sets
            )
            some_in = any(
                all(self._labels[x] is Label.IN for x in attackers)
                for attackers in sets
            )
            if (label is Label.IN) != all_countered:
                return False
            if (label is Label.OUT) != some_in:
                return False
        return True

    def __eq__(self, other):
        if isinstance(other, Labelling):
            return self._labels == other._labels
        return NotImplemented

    def __repr__(self):
        parts = [f"{a.name}={l.value}" for a, l in self._labels.items()]
        return f"Labelling({', '.join(parts)})"
