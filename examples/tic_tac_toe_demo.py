#!/usr/bin/env python3
"""
Tic-tac-toe demo
- Builds the bundled tic-tac-toe net
- Plays a short game through a MarkingStream
- Prints every accepted and rejected move
"""

import logging

from pflow.core import MarkingStream, build_net
from pflow.models import tic_tac_toe

logging.basicConfig(level=logging.INFO, format='%(message)s')
logger = logging.getLogger("tic_tac_toe_demo")


def main():
    spec = build_net(tic_tac_toe, "ticTacToe")
    print("Mermaid Diagram:\n", spec.to_mermaid())

    stream = MarkingStream([spec])
    stream.on_every(lambda s, res: logger.info("[%s] %s -> %s", res.role.label, res.action, res.marking))
    stream.on_fail(lambda s, res: logger.info("[rejected] %s", res.action))

    # X takes the centre, O tries to move twice, X completes a diagonal
    for move in ["X11", "O00", "O01", "X22", "O02", "X00"]:
        stream.dispatch("ticTacToe", move)

    print(f"{len(stream.history)} moves recorded")


if __name__ == '__main__':
    main()
