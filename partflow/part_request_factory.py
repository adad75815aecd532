"""Lazy generator of part descriptors for a multipart upload.

Creating every part of a multi-gigabyte upload up front would allocate
thousands of descriptors long before they are needed. The factory instead
hands out one descriptor per call, skipping parts that a resumed upload has
already completed and remembering how many bytes it skipped so progress can
still add up to the full content length.
"""

import logging
import threading

from partflow.config_manager.helpers import get_content_length
from partflow.exceptions import InvalidConfiguration
from partflow.models import PartDescriptor, ResumeManifest, UploadSpec

logger = logging.getLogger(__name__)


class PartRequestFactory:
    """Thread-safe source of PartDescriptors for one upload attempt.

    All state is guarded by a single lock, so any number of workers may
    pull parts concurrently. Parts of a sequential source read off one
    shared stream and must be consumed in part-number order by the caller.
    """

    def __init__(
        self,
        upload_spec: UploadSpec,
        resume_manifest: ResumeManifest | None = None,
    ) -> None:
        """Initialize the factory.

        Args:
            upload_spec: Upload to split into parts.
            resume_manifest: Parts completed in an earlier attempt.

        Raises:
            InvalidConfiguration: If the part size is not positive or the
                content length is unknown or negative.
        """
        content_length = get_content_length(upload_spec.source)
        if upload_spec.part_size <= 0:
            raise InvalidConfiguration(
                f"part_size must be a positive integer, got {upload_spec.part_size}"
            )
        if content_length is None:
            raise InvalidConfiguration("Content length of the source is unknown")
        if content_length < 0:
            raise InvalidConfiguration(
                f"Content length must not be negative, got {content_length}"
            )

        self._spec = upload_spec
        self._content_length = content_length
        self._completed = (
            resume_manifest.part_numbers() if resume_manifest else frozenset()
        )

        self._lock = threading.Lock()
        self._part_number = 1
        self._offset = 0
        self._remaining_bytes = content_length
        self._pending_skip_bytes = 0
        self._skip_batches: list[int] = []

        if self._completed:
            logger.info(
                "Resuming upload %s with %d parts already completed",
                upload_spec.upload_id,
                len(self._completed),
            )

    @classmethod
    def create(
        cls,
        upload_spec: UploadSpec,
        resume_manifest: ResumeManifest | None = None,
    ) -> "PartRequestFactory":
        """Build a factory for the given upload."""
        return cls(upload_spec, resume_manifest)

    @property
    def content_length(self) -> int:
        """Total bytes of the upload."""
        return self._content_length

    @property
    def part_size(self) -> int:
        """Optimal part size in bytes; only the last part may be smaller."""
        return self._spec.part_size

    @property
    def total_parts(self) -> int:
        """Number of parts in the full logical sequence, skipped ones included."""
        return -(-self._content_length // self._spec.part_size)

    @property
    def pending_skip_bytes(self) -> int:
        """Skipped bytes not yet attached to an emitted part."""
        with self._lock:
            return self._pending_skip_bytes

    def has_remaining(self) -> bool:
        """Return True while bytes remain to be assigned to parts."""
        with self._lock:
            return self._remaining_bytes > 0

    def try_next_part(self) -> PartDescriptor | None:
        """Take the next part to upload.

        Returns:
            The next PartDescriptor, or None once every part has been
            handed out or skipped.
        """
        with self._lock:
            while self._remaining_bytes > 0:
                part_size = min(self._spec.part_size, self._remaining_bytes)
                is_last_part = self._remaining_bytes - part_size == 0

                if self._part_number in self._completed:
                    logger.debug("Skipping completed part %d", self._part_number)
                    self._offset += part_size
                    self._pending_skip_bytes += part_size
                    self._remaining_bytes -= part_size
                    self._part_number += 1
                    continue

                return self._take_part(part_size, is_last_part)

            return None

    def drain_skip_batches(self) -> list[int]:
        """Return and clear the skipped-byte batches flushed so far."""
        with self._lock:
            batches = self._skip_batches
            self._skip_batches = []
            return batches

    def flush_pending_skip_bytes(self) -> int:
        """Return and reset skipped bytes left over once the factory is exhausted.

        Only a fully resumed upload ends with pending skipped bytes, since
        no later part exists to carry them. Returns 0 while parts remain.
        """
        with self._lock:
            if self._remaining_bytes > 0:
                return 0
            pending = self._pending_skip_bytes
            self._pending_skip_bytes = 0
            return pending

    def _take_part(self, part_size: int, is_last_part: bool) -> PartDescriptor:
        # Caller holds the lock
        content = self._spec.source.open_part(self._offset, part_size)

        if self._pending_skip_bytes > 0:
            self._skip_batches.append(self._pending_skip_bytes)
            self._pending_skip_bytes = 0

        descriptor = PartDescriptor(
            bucket=self._spec.bucket,
            key=self._spec.key,
            upload_id=self._spec.upload_id,
            part_number=self._part_number,
            offset=self._offset,
            size=part_size,
            is_last_part=is_last_part,
            content=content,
            progress_listener=self._spec.progress_listener,
        )

        self._offset += part_size
        self._remaining_bytes -= part_size
        self._part_number += 1
        return descriptor
