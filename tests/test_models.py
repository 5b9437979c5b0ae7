#!/usr/bin/env python3
"""
Tests for the bundled sample declarations.

Run with: pytest tests/test_models.py -v
"""

import pytest

from pflow.core import MarkingStream, build_net
from pflow.declaration import dump_declaration, loads_declaration
from pflow.models import SAMPLES, tic_tac_toe


@pytest.fixture
def game():
    return MarkingStream([build_net(tic_tac_toe, "ticTacToe")])


class TestTicTacToe:

    def test_shape(self):
        spec = build_net(tic_tac_toe, "ticTacToe")
        assert len(spec.places) == 11
        assert len(spec.transitions) == 18
        assert list(spec.roles) == ["X", "O"]
        assert spec.initial_vector() == [1] * 9 + [1, 0]
        assert spec.capacity_vector() == [1] * 11

    def test_move_positions(self):
        spec = build_net(tic_tac_toe, "ticTacToe")
        cell = spec.places["11"].position
        assert (cell.x, cell.y) == (440, 280)
        assert spec.transitions["X11"].position.x == cell.x - 60
        assert spec.transitions["O11"].position.x == cell.x + 60

    def test_turns_alternate(self, game):
        res = game.dispatch("ticTacToe", "X00")
        assert res.ok and res.role.label == "X"
        assert res.marking == [0] + [1] * 8 + [0, 1]

        assert game.dispatch("ticTacToe", "X01").ok is False  # not X's turn
        assert game.dispatch("ticTacToe", "O00").ok is False  # cell taken
        assert game.dispatch("ticTacToe", "O11").ok
        assert game.marking("ticTacToe")[9:] == [1, 0]

    def test_survives_json(self):
        spec = build_net(tic_tac_toe, "ticTacToe")
        reloaded = loads_declaration(dump_declaration(spec))
        assert {t: reloaded.transitions[t].delta for t in reloaded.transitions} == {
            t: spec.transitions[t].delta for t in spec.transitions
        }


@pytest.mark.parametrize("name", sorted(SAMPLES))
def test_samples_build(name):
    assert build_net(SAMPLES[name], name).indexed
