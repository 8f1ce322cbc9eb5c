"""Framing Layer - tests for line-delimited frame extraction and JSON decoding.

Tests cover:
    - encode_message emits exactly one trailing newline
    - Newlines inside string fields are escaped, never split a frame
    - Two frames in one chunk come out as two frames, in order
    - Partial frames are held until their delimiter arrives
    - Decode failures affect only the bad frame
"""

import json

import pytest

from funko_store.core.errors import FrameDecodeError
from funko_store.core.framing import FrameBuffer, decode_frame, encode_message


def test_encode_message_appends_single_newline():
    data = encode_message({"tipo": "list", "usuario": "ana"})
    assert data.endswith(b"\n")
    assert data.count(b"\n") == 1
    assert json.loads(data[:-1]) == {"tipo": "list", "usuario": "ana"}


def test_encode_message_escapes_embedded_newlines():
    data = encode_message({"mensaje": "line one\nline two"})
    assert data.count(b"\n") == 1
    assert decode_frame(data[:-1]) == {"mensaje": "line one\nline two"}


def test_encode_message_keeps_non_ascii_as_utf8():
    data = encode_message({"genero": "Animación"})
    assert "Animación".encode("utf-8") in data


def test_two_frames_in_one_chunk_are_split_in_order():
    buffer = FrameBuffer()
    chunk = encode_message({"n": 1}) + encode_message({"n": 2})
    frames = buffer.feed(chunk)
    assert [decode_frame(f) for f in frames] == [{"n": 1}, {"n": 2}]
    assert buffer.pending == 0


def test_partial_frame_is_retained_until_delimiter():
    buffer = FrameBuffer()
    data = encode_message({"tipo": "read", "id": 7})
    assert buffer.feed(data[:5]) == []
    assert buffer.pending == 5
    frames = buffer.feed(data[5:])
    assert len(frames) == 1
    assert decode_frame(frames[0]) == {"tipo": "read", "id": 7}


def test_remainder_after_last_delimiter_is_kept():
    buffer = FrameBuffer()
    frames = buffer.feed(b'{"a":1}\n{"b":')
    assert frames == [b'{"a":1}']
    assert buffer.feed(b"2}\n") == [b'{"b":2}']


def test_chunk_split_one_byte_at_a_time():
    buffer = FrameBuffer()
    data = encode_message({"x": "y"}) * 3
    frames = []
    for i in range(len(data)):
        frames.extend(buffer.feed(data[i:i + 1]))
    assert len(frames) == 3


def test_invalid_json_raises_frame_decode_error():
    with pytest.raises(FrameDecodeError) as exc_info:
        decode_frame(b"{not json")
    assert exc_info.value.code == "MALFORMED_MESSAGE"


def test_non_object_json_is_rejected():
    with pytest.raises(FrameDecodeError):
        decode_frame(b"[1, 2, 3]")


def test_invalid_utf8_is_rejected():
    with pytest.raises(FrameDecodeError):
        decode_frame(b"\xff\xfe")


def test_empty_frame_is_rejected():
    with pytest.raises(FrameDecodeError):
        decode_frame(b"")


def test_bad_frame_does_not_poison_buffer():
    buffer = FrameBuffer()
    frames = buffer.feed(b"garbage\n" + encode_message({"ok": True}))
    assert len(frames) == 2
    with pytest.raises(FrameDecodeError):
        decode_frame(frames[0])
    assert decode_frame(frames[1]) == {"ok": True}
