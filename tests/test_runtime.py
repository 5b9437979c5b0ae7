#!/usr/bin/env python3
"""
Tests for the pflow firing engine.

Run with: pytest tests/test_runtime.py -v

Test Organization:
- Construction: indexing requirement
- Petri net mode: arithmetic, capacity, multipliers, callbacks
- Guards: inhibitor arcs
- State machine / workflow modes: cardinality rules
- Queries: read-only helpers used by renderers
"""

import pytest

from pflow.core import NetBuilder, NetRuntime, NetType
from pflow.exceptions import InvalidMultiplierError, NotIndexedError, UnknownTransitionError


# =============================================================================
# Declarations
# =============================================================================

def guarded(builder):
    """t moves p -> out unless inhibitor place q holds a token"""
    p = builder.place("p", 2)
    q = builder.place("q", 1)
    out = builder.place("out", 0)
    t = builder.transition("t", "worker")
    p.tx(t)
    t.tx(out)
    q.guard(t)


def branching(builder):
    """a feeds b, or both b and c, or b while draining c"""
    a = builder.place("a", 1)
    b = builder.place("b", 0)
    c = builder.place("c", 0)

    step = builder.transition("step")
    a.tx(step)
    step.tx(b)

    split = builder.transition("split")
    a.tx(split)
    split.tx(b)
    split.tx(c)

    jump = builder.transition("jump")
    a.tx(jump)
    c.tx(jump)
    jump.tx(b)

    double = builder.transition("double")
    a.tx(double)
    double.tx(b, 2)


def bounded(builder):
    src = builder.place("src", 2)
    dst = builder.place("dst", 0, 1)
    t = builder.transition("t")
    src.tx(t)
    t.tx(dst)


# =============================================================================
# Construction
# =============================================================================

class TestConstruction:

    def test_unindexed_net_rejected(self):
        builder = NetBuilder("raw")
        builder.place("p")
        with pytest.raises(NotIndexedError):
            NetRuntime(builder.spec)

    def test_exposes_schema_and_type(self, simple_net):
        assert simple_net.schema == "simple"
        assert simple_net.type is NetType.PETRI_NET


# =============================================================================
# Petri net mode
# =============================================================================

class TestPetriNet:

    def test_fire_commits_in_place(self, simple_net):
        marking = simple_net.initial_vector()
        res = simple_net.fire(marking, "t")
        assert res.ok
        assert marking == [0, 1]
        assert res.role.label == "default"

    def test_underflow_leaves_marking(self, simple_net):
        marking = [0, 1]
        res = simple_net.fire(marking, "t")
        assert res.ok is False
        assert res.result == [-1, 2]
        assert marking == [0, 1]

    def test_capacity_overflow(self, declare):
        net = NetRuntime(declare(bounded))
        marking = net.initial_vector()
        assert net.fire(marking, "t").ok
        assert marking == [1, 1]
        assert net.fire(marking, "t").ok is False
        assert marking == [1, 1]

    def test_multiplier(self, declare):
        def three(builder):
            p1 = builder.place("p1", 3)
            p2 = builder.place("p2")
            t = builder.transition("t")
            p1.tx(t)
            t.tx(p2)

        net = NetRuntime(declare(three))
        assert net.fire(net.initial_vector(), "t", 4).ok is False
        marking = net.initial_vector()
        assert net.fire(marking, "t", 3).ok
        assert marking == [0, 3]

    def test_multiple_outputs_allowed(self, declare):
        net = NetRuntime(declare(branching))
        marking = net.initial_vector()
        assert net.fire(marking, "split").ok
        assert marking == [0, 1, 1]

    def test_test_fire_does_not_mutate(self, simple_net):
        marking = [1, 0]
        res = simple_net.test_fire(marking, "t")
        assert res.ok and res.result == [0, 1]
        assert marking == [1, 0]

    def test_callbacks(self, simple_net):
        calls = []
        marking = simple_net.initial_vector()
        resolve = lambda res: calls.append(("resolve", list(res.result)))
        reject = lambda res: calls.append(("reject", res.result))
        simple_net.fire(marking, "t", resolve=resolve, reject=reject)
        simple_net.fire(marking, "t", resolve=resolve, reject=reject)
        assert calls == [("resolve", [0, 1]), ("reject", [-1, 2])]

    @pytest.mark.parametrize("method", ["fire", "test_fire", "guard_check", "tx_fails"])
    def test_unknown_action(self, simple_net, method):
        with pytest.raises(UnknownTransitionError):
            getattr(simple_net, method)([1, 0], "missing")

    @pytest.mark.parametrize("multiplier", [0, -1, 1.5, True])
    def test_invalid_multiplier(self, simple_net, multiplier):
        with pytest.raises(InvalidMultiplierError):
            simple_net.fire([1, 0], "t", multiplier)


# =============================================================================
# Guards
# =============================================================================

class TestGuards:

    def test_active_guard_blocks(self, declare):
        net = NetRuntime(declare(guarded))
        marking = net.initial_vector()
        assert net.guard_check(marking, "t") is True
        res = net.test_fire(marking, "t")
        assert res.result is None and res.ok is False
        assert res.role.label == "worker"
        assert net.fire(marking, "t").ok is False
        assert marking == [2, 1, 0]

    def test_inactive_guard(self, declare):
        net = NetRuntime(declare(guarded))
        marking = [2, 0, 0]
        assert net.guard_check(marking, "t") is False
        assert net.fire(marking, "t").ok
        assert marking == [1, 0, 1]

    def test_multiplier_scales_guard(self, declare):
        """One token in q no longer blocks when the guard weight is doubled"""
        net = NetRuntime(declare(guarded))
        marking = net.initial_vector()
        assert net.guard_check(marking, "t", 2) is False
        assert net.fire(marking, "t", 2).ok
        assert marking == [0, 1, 2]

    def test_tx_fails_ignores_guards(self, declare):
        net = NetRuntime(declare(guarded))
        res = net.tx_fails(net.initial_vector(), "t")
        assert res.ok is False
        assert res.result == [1, 1, 1]
        assert net.tx_fails([0, 0, 0], "t").ok is True


# =============================================================================
# State machine mode
# =============================================================================

class TestStateMachine:

    @pytest.fixture
    def net(self, declare):
        return NetRuntime(declare(branching, type=NetType.STATE_MACHINE))

    def test_single_token_move(self, net):
        marking = net.initial_vector()
        assert net.fire(marking, "step").ok
        assert marking == [0, 1, 0]

    def test_two_marked_places_rejected(self, net):
        marking = net.initial_vector()
        res = net.fire(marking, "split")
        assert res.ok is False
        assert res.result == [0, 1, 1]
        assert marking == [1, 0, 0]

    def test_count_above_one_rejected(self, net):
        marking = net.initial_vector()
        assert net.fire(marking, "double").ok is False
        assert marking == [1, 0, 0]

    def test_underflow_still_rejected(self, net):
        marking = net.initial_vector()
        assert net.fire(marking, "jump").ok is False
        assert marking == [1, 0, 0]

    def test_accepted_results_are_elementary(self, net):
        marking = net.initial_vector()
        for action in ["split", "double", "jump", "step", "step"]:
            if net.fire(marking, action).ok:
                assert sum(1 for v in marking if v > 0) <= 1
                assert max(marking) <= 1


# =============================================================================
# Workflow mode
# =============================================================================

class TestWorkflow:

    @pytest.fixture
    def net(self, declare):
        return NetRuntime(declare(branching, type=NetType.WORKFLOW))

    def test_negative_entries_zeroed(self, net):
        marking = net.initial_vector()
        res = net.fire(marking, "jump")
        assert res.ok
        assert res.result == [0, 1, 0]
        assert marking == [0, 1, 0]

    def test_two_marked_places_rejected(self, net):
        marking = net.initial_vector()
        assert net.fire(marking, "split").ok is False
        assert marking == [1, 0, 0]

    def test_count_above_one_rejected(self, net):
        marking = net.initial_vector()
        assert net.fire(marking, "double").ok is False

    def test_guard_blocked_rejected(self, declare):
        net = NetRuntime(declare(guarded, type=NetType.WORKFLOW))
        marking = net.initial_vector()
        res = net.fire(marking, "t")
        assert res.ok is False and res.result is None
        assert marking == [2, 1, 0]


# =============================================================================
# Queries
# =============================================================================

class TestQueries:

    def test_vectors(self, declare):
        net = NetRuntime(declare(bounded))
        assert net.empty_vector() == [0, 0]
        assert net.capacity_vector() == [0, 1]
        net.capacity_vector().append(9)
        assert net.capacity_vector() == [0, 1]

    def test_get_node(self, simple_net):
        assert simple_net.get_node("t").label == "t"
        assert simple_net.get_node("p2").offset == 1
        assert simple_net.get_node("nope") is None

    def test_get_nearby_node(self, simple_net):
        assert simple_net.get_nearby_node(70, 50).label == "p1"
        assert simple_net.get_nearby_node(190, 65).label == "t"
        assert simple_net.get_nearby_node(84, 60) is None

    def test_get_size(self, simple_net):
        assert simple_net.get_size() == (400, 160)
