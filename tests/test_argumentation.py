"""
argsem Test Suite — argumentation core

Tests covering:
- Framework: construction, reference checks, neighbour queries, structure
- Subset Enumerator: ordering, pruning, restart, cancellation
- Semantics Engine: predicates and every brute-force semantics
- Labellings: complete-extension bijection
- Bridge: documents to frameworks and back
"""
import os
import random
import sys
from itertools import islice

import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))


def _af(arguments, attacks=()):
    from argsem import ArgumentationFramework
    return ArgumentationFramework(arguments, attacks)


def _names(extensions):
    return [set(e.names) for e in extensions]


def _random_af(seed, max_args=7, density=0.25):
    rng = random.Random(seed)
    names = [f"a{i}" for i in range(rng.randint(0, max_args))]
    attacks = [(x, y) for x in names for y in names if rng.random() < density]
    return _af(names, attacks)


# ── Framework Tests ────────────────────────────────────────────

class TestFramework:
    def test_arguments_keep_insertion_order(self):
        af = _af(["c", "a", "b"])
        assert [a.name for a in af.arguments()] == ["c", "a", "b"]

    def test_unknown_attack_endpoint_rejected(self):
        from argsem import InvalidReferenceError
        af = _af(["a"])
        with pytest.raises(InvalidReferenceError):
            af.add_attack("a", "b")
        with pytest.raises(InvalidReferenceError):
            af.add_attack(["a", "zz"], "a")
        assert len(af.attacks()) == 0

    def test_invalid_reference_is_value_error(self):
        from argsem import InvalidReferenceError
        assert issubclass(InvalidReferenceError, ValueError)

    def test_self_attack_is_legal(self):
        af = _af(["a"], [("a", "a")])
        assert af.has_self_loops()
        assert af.attackers("a") == frozenset(af.arguments())

    def test_attackers_and_attacked(self):
        from argsem import Argument
        af = _af(["a", "b", "c"], [("a", "b"), ("c", "b")])
        assert af.attackers("b") == {Argument("a"), Argument("c")}
        assert af.attacked("a") == {Argument("b")}
        assert af.attackers("a") == frozenset()

    def test_remove_argument_drops_incident_attacks(self):
        af = _af(["a", "b", "c"], [("a", "b"), ("b", "c")])
        assert af.remove_argument("b")
        assert len(af.attacks()) == 0
        assert af.attackers("c") == frozenset()
        assert af.attacked("a") == frozenset()
        assert "b" not in af

    def test_set_attack(self):
        from argsem import Argument
        af = _af(["a", "b", "c"], [(("a", "b"), "c")])
        a, b = Argument("a"), Argument("b")
        assert not af.is_binary
        assert af.attacks_set(frozenset({a, b}), "c")
        assert not af.attacks_set(frozenset({a}), "c")
        assert af.attacking_sets("c") == {frozenset({a, b})}
        assert af.attacked("a") == {Argument("c")}

    def test_range(self):
        from argsem import Argument
        af = _af(["a", "b", "c"], [("a", "b"), ("b", "c")])
        assert af.range_of(frozenset({Argument("a")})) == {Argument("a"), Argument("b")}

    def test_sccs_in_topological_order(self):
        af = _af(["a", "b", "c", "d"],
                 [("a", "b"), ("b", "c"), ("c", "b"), ("c", "d")])
        sccs = [{x.name for x in c} for c in af.strongly_connected_components()]
        assert sccs == [{"a"}, {"b", "c"}, {"d"}]

    def test_well_founded(self):
        assert _af(["a", "b", "c"], [("a", "b"), ("b", "c")]).is_well_founded()
        assert not _af(["a", "b"], [("a", "b"), ("b", "a")]).is_well_founded()

    def test_restrict_and_copy_on_write(self):
        af = _af(["a", "b", "c"], [("a", "b"), ("b", "c")])
        sub = af.restrict(["b", "c"])
        assert [a.name for a in sub.arguments()] == ["b", "c"]
        assert len(sub.attacks()) == 1
        smaller = af.without("a")
        assert len(smaller) == 2
        assert len(af) == 3

    def test_check_members_rejects_unknown(self):
        from argsem import InvalidReferenceError
        af = _af(["a"])
        with pytest.raises(InvalidReferenceError):
            af.check_members(["a", "ghost"])

    def test_to_dict(self):
        af = _af(["a", "b"], [("a", "b")])
        data = af.to_dict()
        assert data["arguments"] == ["a", "b"]
        assert data["attacks"] == [{"attackers": ["a"], "target": "b"}]
        assert data["stats"]["num_attacks"] == 1

    def test_semantics_parse(self):
        from argsem import Semantics, UnsupportedConfigurationError
        assert Semantics.parse("PR") is Semantics.PREFERRED
        assert Semantics.parse("semi_stable") is Semantics.SEMI_STABLE
        assert Semantics.parse("cf2") is Semantics.CF2
        assert Semantics.STAGE.code == "STG"
        with pytest.raises(UnsupportedConfigurationError):
            Semantics.parse("XYZ")


# ── Subset Enumerator Tests ────────────────────────────────────

class TestSubsetEnumerator:
    def test_smaller_subsets_first(self):
        from argsem import SubsetEnumerator
        order = [sorted(s) for s in SubsetEnumerator(["a", "b", "c"])]
        assert order == [
            [], ["a"], ["b"], ["c"],
            ["a", "b"], ["a", "c"], ["b", "c"],
            ["a", "b", "c"],
        ]

    def test_descending(self):
        from argsem import SubsetEnumerator
        order = [sorted(s) for s in SubsetEnumerator(["a", "b"], descending=True)]
        assert order == [["a", "b"], ["a"], ["b"], []]

    def test_early_termination_and_restart(self):
        from argsem import SubsetEnumerator
        enumerator = SubsetEnumerator(range(20))
        first = list(islice(enumerator, 3))
        again = list(islice(enumerator, 3))
        assert first == again == [frozenset(), frozenset({0}), frozenset({1})]
        assert len(enumerator) == 2 ** 20

    def test_prune_supersets(self):
        from argsem import SubsetEnumerator
        enumerator = SubsetEnumerator(["a", "b", "c"])
        seen = []
        for subset in enumerator:
            seen.append(sorted(subset))
            if subset == {"a"}:
                enumerator.prune(subset)
        assert seen == [[], ["a"], ["b"], ["c"], ["b", "c"]]

    def test_prune_subsets_when_descending(self):
        from argsem import SubsetEnumerator
        enumerator = SubsetEnumerator(["a", "b", "c"], descending=True)
        seen = []
        for subset in enumerator:
            seen.append(sorted(subset))
            if subset == {"a", "b"}:
                enumerator.prune(subset)
        assert ["a"] not in seen and ["b"] not in seen and [] not in seen
        assert ["c"] in seen

    def test_prunes_reset_on_restart(self):
        from argsem import SubsetEnumerator
        enumerator = SubsetEnumerator(["a", "b"])
        for subset in enumerator:
            enumerator.prune(subset)
        assert len(list(enumerator)) == 4

    def test_cancellation(self):
        from argsem import CancellationToken, CancelledError, SubsetEnumerator
        token = CancellationToken()
        iterator = iter(SubsetEnumerator(["a", "b"], cancel=token))
        next(iterator)
        token.cancel()
        with pytest.raises(CancelledError):
            next(iterator)


# ── Semantics Engine Tests ─────────────────────────────────────

class TestSemanticsEngine:
    def _make_engine(self):
        from argsem import SemanticsEngine
        return SemanticsEngine()

    def _ext(self, af, semantics):
        return _names(self._make_engine().extensions(af, semantics))

    def test_single_attack(self):
        """a → b: grounded = {a}, stable = preferred = [{a}]"""
        from argsem import Semantics
        af = _af(["a", "b"], [("a", "b")])
        assert self._ext(af, Semantics.GROUNDED) == [{"a"}]
        assert self._ext(af, Semantics.STABLE) == [{"a"}]
        assert self._ext(af, Semantics.PREFERRED) == [{"a"}]
        assert self._ext(af, Semantics.COMPLETE) == [{"a"}]
        assert self._ext(af, Semantics.ADMISSIBLE) == [set(), {"a"}]
        assert self._ext(af, Semantics.CONFLICT_FREE) == [set(), {"a"}, {"b"}]

    def test_three_cycle(self):
        """Odd cycle: nothing is defensible and no stable extension exists."""
        from argsem import Semantics
        af = _af(["a", "b", "c"], [("a", "b"), ("b", "c"), ("c", "a")])
        assert self._ext(af, Semantics.CONFLICT_FREE) == [set(), {"a"}, {"b"}, {"c"}]
        assert self._ext(af, Semantics.ADMISSIBLE) == [set()]
        assert self._ext(af, Semantics.COMPLETE) == [set()]
        assert self._ext(af, Semantics.GROUNDED) == [set()]
        assert self._ext(af, Semantics.PREFERRED) == [set()]
        assert self._ext(af, Semantics.STABLE) == []
        assert self._ext(af, Semantics.SEMI_STABLE) == [set()]
        assert self._ext(af, Semantics.STAGE) == [{"a"}, {"b"}, {"c"}]
        assert self._ext(af, Semantics.NAIVE) == [{"a"}, {"b"}, {"c"}]
        assert self._ext(af, Semantics.CF2) == [{"a"}, {"b"}, {"c"}]
        assert self._ext(af, Semantics.IDEAL) == [set()]

    def test_self_attacking_argument(self):
        from argsem import Semantics
        af = _af(["a"], [("a", "a")])
        assert self._ext(af, Semantics.CONFLICT_FREE) == [set()]
        assert self._ext(af, Semantics.GROUNDED) == [set()]
        assert self._ext(af, Semantics.STABLE) == []
        assert self._ext(af, Semantics.STAGE) == [set()]
        assert self._ext(af, Semantics.CF2) == [set()]

    def test_empty_framework(self):
        from argsem import Semantics
        af = _af([])
        for semantics in Semantics:
            assert self._ext(af, semantics) == [set()], semantics

    def test_mutual_attack(self):
        """a ↔ b → preferred = [{a}, {b}], grounded = ∅"""
        from argsem import Semantics
        af = _af(["a", "b"], [("a", "b"), ("b", "a")])
        assert self._ext(af, Semantics.PREFERRED) == [{"a"}, {"b"}]
        assert self._ext(af, Semantics.STABLE) == [{"a"}, {"b"}]
        assert self._ext(af, Semantics.COMPLETE) == [set(), {"a"}, {"b"}]
        assert self._ext(af, Semantics.GROUNDED) == [set()]
        assert self._ext(af, Semantics.IDEAL) == [set()]

    def test_grounded_reinstatement(self):
        """a → b → c: a defends c, grounded = {a, c}"""
        engine = self._make_engine()
        af = _af(["a", "b", "c"], [("a", "b"), ("b", "c")])
        assert {x.name for x in engine.grounded_extension(af)} == {"a", "c"}

    def test_ideal_differs_from_grounded(self):
        """a ↔ b with b self-attacking: only {a} is preferred, and it is ideal."""
        from argsem import Semantics
        af = _af(["a", "b"], [("a", "b"), ("b", "a"), ("b", "b")])
        assert self._ext(af, Semantics.GROUNDED) == [set()]
        assert self._ext(af, Semantics.PREFERRED) == [{"a"}]
        assert self._ext(af, Semantics.IDEAL) == [{"a"}]

    def test_semi_stable_follows_stable(self):
        from argsem import Semantics
        af = _af(["a", "b", "c"],
                 [("a", "b"), ("b", "a"), ("b", "c"), ("c", "c")])
        assert self._ext(af, Semantics.PREFERRED) == [{"a"}, {"b"}]
        assert self._ext(af, Semantics.STABLE) == [{"b"}]
        assert self._ext(af, Semantics.SEMI_STABLE) == [{"b"}]
        assert self._ext(af, Semantics.EAGER) == [{"b"}]
        assert self._ext(af, Semantics.IDEAL) == [set()]

    def test_stage_vs_naive(self):
        from argsem import Semantics
        af = _af(["a", "b"], [("a", "b")])
        assert self._ext(af, Semantics.NAIVE) == [{"a"}, {"b"}]
        assert self._ext(af, Semantics.STAGE) == [{"a"}]

    def test_cf2_processes_components_in_order(self):
        """3-cycle feeding d: d survives unless c is accepted."""
        from argsem import Semantics
        af = _af(["a", "b", "c", "d"],
                 [("a", "b"), ("b", "c"), ("c", "a"), ("c", "d")])
        assert self._ext(af, Semantics.CF2) == [{"c"}, {"a", "d"}, {"b", "d"}]
        assert self._ext(af, Semantics.PREFERRED) == [set()]

    def test_cf2_base_case_accepts_single_argument(self):
        from argsem import Semantics
        assert self._ext(_af(["a"]), Semantics.CF2) == [{"a"}]

    def test_cf2_rejects_set_attacks(self):
        from argsem import Semantics, UnsupportedConfigurationError
        af = _af(["a", "b", "c"], [(("a", "b"), "c")])
        with pytest.raises(UnsupportedConfigurationError):
            self._make_engine().extensions(af, Semantics.CF2)

    def test_set_attack_semantics(self):
        from argsem import Semantics
        af = _af(["a", "b", "c"], [(("a", "b"), "c"), ("c", "a")])
        assert self._ext(af, Semantics.GROUNDED) == [{"b"}]
        assert self._ext(af, Semantics.PREFERRED) == [{"a", "b"}, {"b", "c"}]
        assert self._ext(af, Semantics.STABLE) == [{"a", "b"}, {"b", "c"}]

    def test_predicates(self):
        engine = self._make_engine()
        af = _af(["a", "b", "c"], [("a", "b"), ("b", "c")])
        assert engine.is_conflict_free(af, {"a", "c"})
        assert not engine.is_conflict_free(af, {"a", "b"})
        assert engine.is_admissible(af, {"a", "c"})
        assert not engine.is_admissible(af, {"c"})
        assert engine.is_complete(af, {"a", "c"})
        assert not engine.is_complete(af, {"a"})
        assert engine.is_stable(af, {"a", "c"})
        assert engine.defends(af, {"a"}, "c")
        assert not engine.defends(af, set(), "c")
        assert {x.name for x in engine.characteristic(af, {"a"})} == {"a", "c"}

    def test_predicates_reject_unknown_members(self):
        from argsem import InvalidReferenceError
        engine = self._make_engine()
        with pytest.raises(InvalidReferenceError):
            engine.is_admissible(_af(["a"]), {"a", "b"})

    def test_self_attacker_never_conflict_free(self):
        engine = self._make_engine()
        af = _af(["a", "b"], [("a", "a")])
        assert not engine.is_conflict_free(af, {"a"})
        assert engine.is_conflict_free(af, {"b"})

    def test_brute_force_order_is_reproducible(self):
        from argsem import Semantics
        af = _random_af(3)
        first = self._ext(af, Semantics.COMPLETE)
        assert first == self._ext(af, Semantics.COMPLETE)

    def test_cancellation(self):
        from argsem import CancellationToken, CancelledError, Semantics
        token = CancellationToken()
        token.cancel()
        with pytest.raises(CancelledError):
            self._make_engine().extensions(_af(["a", "b"]), Semantics.PREFERRED, token)

    def test_large_framework_warning(self, caplog):
        from argsem import Semantics, SemanticsEngine
        engine = SemanticsEngine(warn_threshold=2)
        engine.extensions(_af(["a", "b", "c"]), Semantics.STABLE)
        assert "Large framework" in caplog.text

    def test_register_custom_semantics(self):
        from argsem import Semantics
        engine = self._make_engine()
        engine.register(Semantics.CF2, lambda af, cancel: [frozenset()])
        assert _names(engine.extensions(_af(["a"]), Semantics.CF2)) == [set()]


# ── Semantic Properties ────────────────────────────────────────

class TestSemanticProperties:
    SEEDS = range(30)

    def _make_engine(self):
        from argsem import SemanticsEngine
        return SemanticsEngine()

    def test_grounded_unique_and_inside_every_complete(self):
        from argsem import Semantics
        engine = self._make_engine()
        for seed in self.SEEDS:
            af = _random_af(seed)
            grounded = engine.extensions(af, Semantics.GROUNDED)
            assert len(grounded) == 1
            for ext in engine.extensions(af, Semantics.COMPLETE):
                assert grounded[0].arguments <= ext.arguments

    def test_stable_extensions_attack_all_outsiders(self):
        from argsem import Semantics
        engine = self._make_engine()
        for seed in self.SEEDS:
            af = _random_af(seed)
            for ext in engine.extensions(af, Semantics.STABLE):
                assert engine.is_conflict_free(af, ext)
                assert af.range_of(ext.arguments) == frozenset(af.arguments())

    def test_preferred_are_maximal_admissible(self):
        from argsem import Semantics
        engine = self._make_engine()
        for seed in self.SEEDS:
            af = _random_af(seed)
            admissible = [e.arguments for e in engine.extensions(af, Semantics.ADMISSIBLE)]
            for ext in engine.extensions(af, Semantics.PREFERRED):
                assert engine.is_admissible(af, ext)
                assert not any(ext.arguments < other for other in admissible)

    def test_stable_inside_semi_stable_inside_preferred(self):
        from argsem import Semantics
        engine = self._make_engine()
        for seed in self.SEEDS:
            af = _random_af(seed)
            stable = {e.arguments for e in engine.extensions(af, Semantics.STABLE)}
            semi = {e.arguments for e in engine.extensions(af, Semantics.SEMI_STABLE)}
            preferred = {e.arguments for e in engine.extensions(af, Semantics.PREFERRED)}
            assert semi <= preferred
            if stable:
                assert semi == stable

    def test_ideal_between_grounded_and_preferred(self):
        from argsem import Semantics
        engine = self._make_engine()
        for seed in self.SEEDS:
            af = _random_af(seed)
            grounded = engine.extensions(af, Semantics.GROUNDED)[0].arguments
            ideal = engine.extensions(af, Semantics.IDEAL)[0].arguments
            assert grounded <= ideal
            assert engine.is_admissible(af, ideal)
            for ext in engine.extensions(af, Semantics.PREFERRED):
                assert ideal <= ext.arguments

    def test_cf2_extensions_are_naive_supersets_of_grounded(self):
        from argsem import Semantics
        engine = self._make_engine()
        for seed in self.SEEDS:
            af = _random_af(seed)
            grounded = engine.extensions(af, Semantics.GROUNDED)[0].arguments
            for ext in engine.extensions(af, Semantics.CF2):
                assert engine.is_conflict_free(af, ext)
                assert grounded <= ext.arguments


# ── Labelling Tests ────────────────────────────────────────────

class TestLabelling:
    def test_labels_from_extension(self):
        from argsem import Extension, Label, Labelling
        af = _af(["a", "b", "c"], [("a", "b")])
        labelling = Labelling.from_extension(af, Extension(af.check_members(["a"])))
        assert labelling["a"] is Label.IN
        assert labelling["b"] is Label.OUT
        assert labelling["c"] is Label.UNDEC
        assert not labelling.is_complete(af)

    def test_complete_extension_round_trip(self):
        from argsem import Labelling, Semantics, SemanticsEngine
        engine = SemanticsEngine()
        for seed in range(30):
            af = _random_af(seed)
            for ext in engine.extensions(af, Semantics.COMPLETE):
                labelling = Labelling.from_extension(af, ext)
                assert labelling.is_complete(af)
                assert labelling.to_extension().arguments == ext.arguments

    def test_complete_labellings_match_complete_extensions(self):
        from argsem import Labelling, Semantics, SemanticsEngine
        engine = SemanticsEngine()
        for seed in range(15):
            af = _random_af(seed, max_args=5)
            complete = {e.arguments for e in engine.extensions(af, Semantics.COMPLETE)}
            for ext in engine.extensions(af, Semantics.CONFLICT_FREE):
                legal = Labelling.from_extension(af, ext).is_complete(af)
                assert legal == (ext.arguments in complete)

    def test_unknown_member_rejected(self):
        from argsem import InvalidReferenceError, Labelling
        with pytest.raises(InvalidReferenceError):
            Labelling.from_extension(_af(["a"]), ["b"])


# ── Bridge Tests ───────────────────────────────────────────────

class TestFrameworkBridge:
    def test_build_from_pairs_and_records(self):
        from argsem import FrameworkBridge
        bridge = FrameworkBridge()
        af = bridge.build_framework({
            "arguments": ["a", "b", "c"],
            "attacks": [["a", "b"], {"attackers": ["a", "b"], "target": "c"}],
        })
        assert len(af) == 3
        assert len(af.attacks()) == 2
        assert not af.is_binary

    def test_unknown_name_rejected(self):
        from argsem import FrameworkBridge, InvalidReferenceError
        with pytest.raises(InvalidReferenceError):
            FrameworkBridge().build_framework(
                {"arguments": ["a"], "attacks": [["a", "b"]]}
            )

    def test_duplicate_names_rejected(self):
        from pydantic import ValidationError
        from argsem import FrameworkBridge
        with pytest.raises(ValidationError):
            FrameworkBridge().build_framework({"arguments": ["a", "a"]})

    def test_document_round_trip(self):
        from argsem import FrameworkBridge
        bridge = FrameworkBridge()
        af = _af(["a", "b", "c"], [("a", "b"), (("b", "c"), "a")])
        rebuilt = bridge.build_framework(bridge.to_document(af))
        assert rebuilt.arguments() == af.arguments()
        assert rebuilt.attacks() == af.attacks()

    def test_build_from_json(self):
        from argsem import FrameworkBridge
        af = FrameworkBridge().build_from_json(
            '{"arguments": ["x", "y"], "attacks": [["x", "y"]]}'
        )
        assert [a.name for a in af.attacked("x")] == ["y"]
