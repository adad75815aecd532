"""Tests for content sources and part views."""

import io

import pytest

from partflow.exceptions import PartOrderError, TruncatedSourceError
from partflow.sources import (
    FileRangeContent,
    SeekableSource,
    SequentialSource,
    StreamSegmentContent,
)


class TrickleStream(io.RawIOBase):
    """Stream that returns at most 3 bytes per read call."""

    def __init__(self, data: bytes) -> None:
        self._buffer = io.BytesIO(data)

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        return self._buffer.read(min(size, 3) if size >= 0 else 3)


def test_seekable_source_defaults_length_to_file_size(payload_file, payload):
    source = SeekableSource(payload_file)

    assert source.content_length == len(payload)
    assert source.is_seekable


def test_seekable_source_accepts_explicit_length(payload_file):
    assert SeekableSource(payload_file, content_length=10).content_length == 10


def test_seekable_source_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        SeekableSource(tmp_path / "missing.bin")


def test_sequential_source_is_not_seekable():
    source = SequentialSource(io.BytesIO(b"abc"), 3)

    assert not source.is_seekable
    assert source.content_length == 3


def test_file_range_reads_only_its_range(payload_file, payload):
    content = FileRangeContent(payload_file, 40, 30)

    assert content.read(10) == payload[40:50]
    assert content.remaining == 20
    assert content.read() == payload[50:70]
    assert content.read() == b""
    content.close()


def test_file_range_opens_lazily(tmp_path):
    content = FileRangeContent(tmp_path / "not-yet.bin", 0, 5)

    (tmp_path / "not-yet.bin").write_bytes(b"hello world")

    with content:
        assert content.read() == b"hello"


def test_file_range_past_end_of_file_raises(payload_file):
    content = FileRangeContent(payload_file, 240, 20)

    with pytest.raises(TruncatedSourceError) as exc_info:
        content.read()

    assert exc_info.value.expected == 20
    assert exc_info.value.received == 10


def test_iter_chunks_splits_part(payload_file, payload):
    with SeekableSource(payload_file).open_part(0, 100) as content:
        chunks = list(content.iter_chunks(chunk_size=30))

    assert [len(c) for c in chunks] == [30, 30, 30, 10]
    assert b"".join(chunks) == payload[:100]


def test_stream_segments_share_cursor():
    source = SequentialSource(io.BytesIO(b"abcdefghij"), 10)
    first = source.open_part(0, 4)
    second = source.open_part(4, 6)

    assert first.read() == b"abcd"
    assert second.read() == b"efghij"
    assert source.consumed == 10


def test_stream_segment_collects_short_reads():
    content = SequentialSource(TrickleStream(b"0123456789"), 10).open_part(0, 8)

    assert content.read() == b"01234567"


def test_stream_segment_truncated_stream():
    content = SequentialSource(io.BytesIO(b"abc"), 5).open_part(0, 5)

    with pytest.raises(TruncatedSourceError, match="expected 5 bytes, got 3"):
        content.read()


def test_stream_segment_discards_bytes_before_offset():
    source = SequentialSource(TrickleStream(b"0123456789"), 10)
    content = source.open_part(4, 3)

    assert isinstance(content, StreamSegmentContent)
    assert content.offset == 4
    assert content.read(2) == b"45"
    assert content.read() == b"6"
    assert source.consumed == 7


def test_stream_segment_after_skipped_segment():
    source = SequentialSource(io.BytesIO(b"abcdefghij"), 10)
    first = source.open_part(0, 3)
    third = source.open_part(6, 4)

    assert first.read() == b"abc"
    assert third.read() == b"ghij"


def test_stream_segment_read_out_of_order_raises():
    source = SequentialSource(io.BytesIO(b"abcdefghij"), 10)
    first = source.open_part(0, 5)
    second = source.open_part(5, 5)
    assert second.read() == b"fghij"

    with pytest.raises(PartOrderError) as exc_info:
        first.read()

    assert exc_info.value.offset == 0
    assert exc_info.value.consumed == 10


def test_stream_ending_before_offset_raises():
    content = SequentialSource(io.BytesIO(b"abc"), 10).open_part(5, 5)

    with pytest.raises(TruncatedSourceError, match="expected 5 bytes, got 0"):
        content.read()


def test_closing_view_leaves_stream_open():
    stream = io.BytesIO(b"abcdef")

    with SequentialSource(stream, 6).open_part(0, 3) as content:
        content.read()

    assert not stream.closed
    assert stream.read() == b"def"


def test_read_after_close_raises(payload_file):
    content = FileRangeContent(payload_file, 0, 10)
    content.close()

    with pytest.raises(ValueError, match="closed"):
        content.read()
