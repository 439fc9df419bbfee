"""
Wire format of a MoveMessage.

Every frame is a 4-byte big-endian length header, followed by that many bytes of UTF-8 JSON.
"""

import struct

from pydantic import ValidationError

from src.core.exceptions import DecodeError
from src.game.message import MoveMessage

HEADER = struct.Struct(">I")
HEADER_SIZE = HEADER.size
DEFAULT_MAX_FRAME_BYTES = 64 * 1024


def encode_message(message: MoveMessage) -> bytes:
    """Complete frame (header + payload) for a message.

    A control message received from a player goes out with the exact payload it came in with.
    """
    payload = message.received_payload
    if payload is None:
        payload = message.model_dump_json().encode("utf-8")
    return HEADER.pack(len(payload)) + payload


def decode_payload(payload: bytes) -> MoveMessage:
    """Parse the JSON payload of one frame. Anything that is not a valid MoveMessage raises DecodeError."""
    try:
        message = MoveMessage.model_validate_json(payload)
    except ValidationError as exc:
        raise DecodeError(f"Payload is not a valid move message: {exc}") from exc
    message.keep_received_payload(payload)
    return message


def read_frame_length(header: bytes, max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES) -> int:
    """Payload length announced by a frame header."""
    if len(header) != HEADER_SIZE:
        raise DecodeError(f"Frame header must be {HEADER_SIZE} bytes, got {len(header)}")
    (length,) = HEADER.unpack(header)
    if length > max_frame_bytes:
        raise DecodeError(f"Frame of {length} bytes exceeds the limit of {max_frame_bytes}")
    return length
