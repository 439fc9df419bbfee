"""Unit tests for /src/game/message.py"""

from typing import Callable

import pytest
from pydantic import ValidationError

from src.core.shared_types import NO_MOVE
from src.game.message import MoveMessage

MoveFactory = Callable[..., MoveMessage]


# --- CONTROL MESSAGES ---
def test_sentinel_target_is_a_control_message(control_message: MoveMessage) -> None:
    assert control_message.is_control_message()


def test_move_is_not_a_control_message(make_move: MoveFactory) -> None:
    assert not make_move(1, (1, 1)).is_control_message()


def test_paired_notification() -> None:
    """Handshake: nobody sent it, no move, game may begin"""
    message = MoveMessage.paired()
    assert message.sender is None
    assert message.target == NO_MOVE
    assert message.is_control_message()
    assert message.running
    assert message.winner is None
    assert not message.stalemate
    assert message.board == [[0, 0, 0], [0, 0, 0], [0, 0, 0]]


def test_termination_notice() -> None:
    message = MoveMessage.termination_notice("opponent left")
    assert message.is_control_message()
    assert not message.running
    assert message.sender is None
    assert message.notice == "opponent left"


# --- ANNOTATION ---
def test_with_winner_returns_annotated_copy(make_move: MoveFactory) -> None:
    message = make_move(2, (0, 0), board=[[2, 0, 0], [1, 2, 1], [0, 1, 2]])
    annotated = message.with_winner(2)

    assert annotated.winner == 2
    assert not annotated.running
    assert annotated.target == message.target
    assert annotated.board == message.board
    # the message it was copied from is left alone
    assert message.winner is None
    assert message.running


def test_with_stalemate_returns_annotated_copy(make_move: MoveFactory) -> None:
    message = make_move(1, (2, 1), board=[[1, 2, 1], [2, 1, 2], [2, 1, 2]])
    annotated = message.with_stalemate()

    assert annotated.stalemate
    assert not annotated.running
    assert annotated.winner is None
    assert not message.stalemate


def test_messages_are_immutable(make_move: MoveFactory) -> None:
    message = make_move(1, (0, 0))
    with pytest.raises(ValidationError):
        message.winner = 1  # type: ignore[misc]


def test_equality(make_move: MoveFactory) -> None:
    assert make_move(1, (0, 1)) == make_move(1, (0, 1))
    assert make_move(1, (0, 1)) != make_move(1, (0, 2))


def test_describe_mentions_the_move(make_move: MoveFactory) -> None:
    line = make_move(1, (0, 1)).describe()
    assert "target=(0, 1)" in line
    assert "sender=1" in line
    assert "board=010/000/000" in line


def test_describe_control_message(control_message: MoveMessage) -> None:
    assert "control notice='resync'" in control_message.describe()


# --- VALIDATION ---
@pytest.mark.parametrize("target", [(3, 0), (0, 3), (-1, 0), (0, -1), (-2, -2)])
def test_target_outside_board_is_rejected(target: tuple[int, int]) -> None:
    with pytest.raises(ValidationError):
        MoveMessage(sender=1, target=target)


@pytest.mark.parametrize("player", [0, 3, -1])
def test_unknown_sender_is_rejected(player: int) -> None:
    with pytest.raises(ValidationError):
        MoveMessage(sender=player, target=(0, 0))


def test_unknown_winner_is_rejected() -> None:
    with pytest.raises(ValidationError):
        MoveMessage(sender=1, target=(0, 0), winner=9)


def test_move_without_sender_is_rejected() -> None:
    with pytest.raises(ValidationError):
        MoveMessage(target=(1, 1))


def test_control_message_without_sender_is_fine() -> None:
    assert MoveMessage(target=NO_MOVE, running=False).sender is None


def test_board_contents_are_not_checked_here() -> None:
    """Malformed boards are the Board's business (InvalidBoardError), the message just carries them."""
    message = MoveMessage(sender=1, target=(0, 0), board=[[7]])
    assert message.board == [[7]]


@pytest.mark.parametrize("field", ["sender", "winner"])
@pytest.mark.parametrize("value", [True, "1", 1.0])
def test_player_ids_must_be_real_ints(field: str, value: object) -> None:
    with pytest.raises(ValidationError):
        MoveMessage(**{"sender": 1, "target": (0, 0), field: value})


def test_extra_fields_are_kept() -> None:
    message = MoveMessage(target=NO_MOVE, notice="forfeit", forfeited_by=2)
    assert message.model_dump()["forfeited_by"] == 2


def test_received_payload_is_only_kept_for_control_messages(
    make_move: MoveFactory, control_message: MoveMessage
) -> None:
    move = make_move(1, (0, 0))
    move.keep_received_payload(b"{}")
    control_message.keep_received_payload(b"{}")

    assert move.received_payload is None
    assert control_message.received_payload == b"{}"
    # bookkeeping only, does not change what the message is
    assert control_message == control_message.model_copy()


def test_without_verdict(make_move: MoveFactory) -> None:
    claimed = MoveMessage(sender=1, target=(0, 0), winner=1, stalemate=True)
    assert claimed.has_verdict()

    cleared = claimed.without_verdict()
    assert not cleared.has_verdict()
    assert cleared.winner is None
    assert not cleared.stalemate
    assert not make_move(1, (0, 0)).has_verdict()


def test_describe_odd_board() -> None:
    assert "board=5" in MoveMessage(target=NO_MOVE, board=5).describe()
