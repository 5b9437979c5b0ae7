#!/usr/bin/env python3
"""
Sample declarations.

Each sample is a declaration function taking a NetBuilder, usable with
``build_net`` or ``@pn.net``.
"""

from .core.builder import NetBuilder


def tic_tac_toe(builder: NetBuilder):
    """Tic-tac-toe: nine board cells, one turn place per player.

    Every move consumes the mover's turn token and a free cell, then hands
    the turn to the other player. Roles X and O partition the moves.
    """
    dx, dy = 220, 140

    board = [
        [builder.place(f"{row}{col}", 1, 1, ((col + 1) * dx, (row + 1) * dy)) for col in range(3)]
        for row in range(3)
    ]

    players = {
        "X": {"turn": builder.place("X", 1, 1, (40, 200)), "role": builder.role("X"), "next": "O", "dx": -60},
        "O": {"turn": builder.place("O", 0, 1, (830, 370)), "role": builder.role("O"), "next": "X", "dx": 60},
    }

    for i, row in enumerate(board):
        for j, cell in enumerate(row):
            for mark, player in players.items():
                position = cell.place.position
                move = builder.transition(
                    f"{mark}{i}{j}", player["role"], (position.x + player["dx"], position.y)
                )
                player["turn"].tx(move)
                cell.tx(move)
                move.tx(players[player["next"]]["turn"])


def counter(builder: NetBuilder):
    """Bounded counter: ``inc`` fills ``count`` up to 3, ``dec`` drains it"""
    pos = builder.config.pos
    count = builder.place("count", 0, 3, pos(2, 1))
    inc = builder.transition("inc", "default", pos(1, 1))
    dec = builder.transition("dec", "default", pos(3, 1))
    inc.tx(count)
    count.tx(dec)


SAMPLES = {
    "ticTacToe": tic_tac_toe,
    "counter": counter,
}
