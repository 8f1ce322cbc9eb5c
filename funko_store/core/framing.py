"""Framing Layer - line-delimited JSON messages over a byte stream.

Invariants:
    - One frame = one JSON value + b"\\n"; no length prefix, no escaping beyond JSON's own
    - FrameBuffer.feed() returns every complete frame in arrival order and keeps the
      unterminated remainder for the next call
    - A frame that fails to decode raises FrameDecodeError for that frame only;
      the buffer is never poisoned
    - No size limit: an unterminated line grows the buffer without bound

Design Decisions:
    - Pure, IO-free buffer: the connection handler owns the socket, this module
      owns byte boundaries, so both client and server share it
    - Compact separators on the wire; pretty printing is a storage concern
"""

import json

from funko_store.core.errors import FrameDecodeError

DELIMITER = b"\n"


def encode_message(payload: dict) -> bytes:
    """Serialize `payload` as one frame."""
    # json.dumps escapes control characters, so the encoded text never holds a raw b"\n"
    text = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    return text.encode("utf-8") + DELIMITER


def decode_frame(frame: bytes) -> dict:
    """Parse one frame (delimiter already stripped) into a JSON object."""
    try:
        text = frame.decode("utf-8")
    except UnicodeDecodeError as e:
        raise FrameDecodeError(f"Frame is not valid UTF-8: {e}") from e
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise FrameDecodeError(f"Invalid JSON frame: {e}") from e
    if not isinstance(payload, dict):
        raise FrameDecodeError(
            f"Frame must hold a JSON object, got {type(payload).__name__}",
        )
    return payload


class FrameBuffer:
    """Per-connection accumulator that splits a byte stream into frames."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    @property
    def pending(self) -> int:
        """Bytes buffered after the last complete frame."""
        return len(self._buffer)

    def feed(self, data: bytes) -> list[bytes]:
        """Append `data` and return every complete frame now available."""
        self._buffer.extend(data)
        frames: list[bytes] = []
        start = 0
        while True:
            index = self._buffer.find(DELIMITER, start)
            if index == -1:
                break
            frames.append(bytes(self._buffer[start:index]))
            start = index + 1
        if start:
            del self._buffer[:start]
        return frames
