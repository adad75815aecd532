import io

import pytest
from pydantic import ValidationError

from partflow.config_manager.helpers import (
    build_upload_config,
    calculate_optimal_part_size,
    get_content_length,
    is_upload_parallelizable,
    parse_bytes,
)
from partflow.config_manager.upload_config import UploadConfig
from partflow.const import MAXIMUM_UPLOAD_PARTS, MIN_PART_SIZE
from partflow.sources import SeekableSource, SequentialSource


@pytest.mark.parametrize(
    "value, expected",
    [
        (123, 123),
        ("0b", 0),
        ("1b", 1),
        ("1", 1),
        ("1k", 1024),
        ("1kb", 1024),
        ("2kb", 2 * 1024),
        ("1mb", 1024 * 1024),
        ("300m", 300 * 1024 * 1024),
        ("2gb", 2 * 1024 * 1024 * 1024),
        ("  1kb  ", 1024),
        ("64MB", 64 * 1024 * 1024),
    ],
)
def test_parse_bytes_valid(value, expected: int) -> None:
    assert parse_bytes(value) == expected


@pytest.mark.parametrize(
    "value",
    ["", "   ", "nope", "kb", "1KiB", "1gbps", "-1kb", "1.5gb", "1 kb"],
)
def test_parse_bytes_invalid_raises(value: str) -> None:
    with pytest.raises(ValueError):
        parse_bytes(value)


@pytest.mark.parametrize(
    "content_length, expected",
    [
        (0, MIN_PART_SIZE),
        (100, MIN_PART_SIZE),
        (MIN_PART_SIZE * MAXIMUM_UPLOAD_PARTS, MIN_PART_SIZE),
        (MIN_PART_SIZE * MAXIMUM_UPLOAD_PARTS + 1, MIN_PART_SIZE + 1),
        (100 * 1024**3, -(-100 * 1024**3 // MAXIMUM_UPLOAD_PARTS)),
    ],
)
def test_calculate_optimal_part_size(content_length: int, expected: int) -> None:
    assert calculate_optimal_part_size(content_length, UploadConfig()) == expected


def test_optimal_part_size_respects_part_limit() -> None:
    config = UploadConfig(min_part_size=1, max_parts=10)

    assert calculate_optimal_part_size(95, config) == 10
    assert calculate_optimal_part_size(5, config) == 1


def test_source_helpers(tmp_path) -> None:
    path = tmp_path / "data.bin"
    path.write_bytes(b"12345")
    seekable = SeekableSource(path)
    sequential = SequentialSource(io.BytesIO(b"12345"), None)

    assert get_content_length(seekable) == 5
    assert get_content_length(sequential) is None
    assert is_upload_parallelizable(seekable)
    assert not is_upload_parallelizable(sequential)


def test_build_upload_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("PARTFLOW_MIN_PART_SIZE", "8mb")
    monkeypatch.setenv("PARTFLOW_NUM_WORKERS", "12")
    monkeypatch.setenv("PARTFLOW_BANDWIDTH_LIMIT", "1mb")
    monkeypatch.setenv("PARTFLOW_SHOW_PROGRESS", "yes")

    config = build_upload_config()

    assert config.min_part_size == 8 * 1024 * 1024
    assert config.num_workers == 12
    assert config.bandwidth_limit == 1024 * 1024
    assert config.show_progress is True
    assert config.max_parts == MAXIMUM_UPLOAD_PARTS


def test_build_upload_config_overrides_beat_environment(monkeypatch) -> None:
    monkeypatch.setenv("PARTFLOW_NUM_WORKERS", "12")

    config = build_upload_config(num_workers=2, bandwidth_limit=None)

    assert config.num_workers == 2
    assert config.bandwidth_limit is None


def test_build_upload_config_ignores_invalid_environment(monkeypatch) -> None:
    monkeypatch.setenv("PARTFLOW_NUM_WORKERS", "many")
    monkeypatch.setenv("PARTFLOW_MIN_PART_SIZE", "huge")

    config = build_upload_config()

    assert config == UploadConfig()


@pytest.mark.parametrize(
    "field", ["min_part_size", "max_parts", "num_workers", "bandwidth_limit"]
)
def test_upload_config_rejects_non_positive(field: str) -> None:
    with pytest.raises(ValidationError):
        UploadConfig(**{field: 0})
