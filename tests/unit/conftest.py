"""Shared fixtures for partflow unit tests."""

import asyncio
import io

import pytest
import pytest_asyncio

from partflow.event_emitter import Emitter
from partflow.models import UploadSpec
from partflow.sources import SequentialSource


@pytest_asyncio.fixture
async def emitter():
    """Create an emitter bound to the running test loop."""
    emitter = Emitter(loop=asyncio.get_running_loop())
    yield emitter
    emitter.remove_all_listeners()


@pytest.fixture
def payload() -> bytes:
    """Deterministic 250 byte payload."""
    return bytes(i % 251 for i in range(250))


@pytest.fixture
def payload_file(tmp_path, payload):
    """Write the payload to a file and return its path."""
    path = tmp_path / "payload.bin"
    path.write_bytes(payload)
    return path


@pytest.fixture
def make_spec():
    """Return a builder for UploadSpecs targeting a test bucket."""

    def _make_spec(source, part_size=100, listener=None) -> UploadSpec:
        return UploadSpec(
            bucket="test-bucket",
            key="videos/clip.mp4",
            upload_id="upload-123",
            part_size=part_size,
            source=source,
            progress_listener=listener,
        )

    return _make_spec


@pytest.fixture
def sized_source():
    """Return a builder for sequential sources of a given length."""

    def _sized_source(content_length: int) -> SequentialSource:
        return SequentialSource(io.BytesIO(b"\0" * content_length), content_length)

    return _sized_source
