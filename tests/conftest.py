"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures required for testing multiple layers.
"""

from typing import Callable, Optional

import pytest

from src.core.shared_types import NO_MOVE, Cell, Grid, PlayerID
from src.game.message import MoveMessage

MoveFactory = Callable[..., MoveMessage]


@pytest.fixture
def make_move() -> MoveFactory:
    """Call the inner function with the sender, the target cell and the board after the move"""

    def _create_move(
        sender: Optional[PlayerID],
        target: Cell,
        board: Optional[Grid] = None,
        running: bool = True,
    ) -> MoveMessage:
        if board is None:
            board = [[0, 0, 0], [0, 0, 0], [0, 0, 0]]
            if target != NO_MOVE and sender is not None:
                board[target[0]][target[1]] = sender
        return MoveMessage(sender=sender, target=target, board=board, running=running)

    return _create_move


@pytest.fixture
def control_message() -> MoveMessage:
    """A status message with a board that would be a win, if anyone looked at it."""
    return MoveMessage(
        sender=1,
        target=NO_MOVE,
        board=[[1, 1, 1], [2, 2, 0], [0, 0, 0]],
        notice="resync",
    )
