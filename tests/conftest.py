"""Pytest configuration for pflow tests"""

import pytest

from pflow.common.timebase import CycleClock
from pflow.core import MarkingStream, NetRuntime, NetType, build_net


def simple_declaration(builder):
    """p1 (1 token) -> t -> p2"""
    p1 = builder.place("p1", 1, 0, (60, 60))
    p2 = builder.place("p2", 0, 0, (300, 60))
    t = builder.transition("t", "default", (180, 60))
    p1.tx(t)
    t.tx(p2)


@pytest.fixture
def declare():
    """Build and index a net from a declaration function"""
    def _declare(declaration, schema="test", type=NetType.PETRI_NET, config=None):
        return build_net(declaration, schema, type, config)
    return _declare


@pytest.fixture
def simple_spec():
    return build_net(simple_declaration, "simple")


@pytest.fixture
def simple_net(simple_spec):
    return NetRuntime(simple_spec)


@pytest.fixture
def clock():
    return CycleClock()


@pytest.fixture
def stream(simple_net, clock):
    return MarkingStream([simple_net], timebase=clock)
