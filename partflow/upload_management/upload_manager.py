"""Upload manager for running multipart uploads.

This module provides the UploadManager class that runs a pool of asyncio
workers pulling parts from a PartRequestFactory and handing them to a
transport.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol

from partflow.config_manager.helpers import is_upload_parallelizable
from partflow.config_manager.upload_config import UploadConfig
from partflow.event_emitter import Emitter
from partflow.exceptions import UploadFailedError
from partflow.models import CompletedPart, PartDescriptor, ResumeManifest, UploadSpec
from partflow.part_request_factory import PartRequestFactory
from partflow.sampled_logger import make_sampled_logger

from .bandwidth_limiter import BandwidthLimiter

logger = logging.getLogger(__name__)


class PartTransport(Protocol):
    """Sends a single part to the object store."""

    async def upload_part(
        self, part: PartDescriptor, on_progress: Callable[[int], None]
    ) -> str:
        """Upload one part and return its completion token (etag).

        Implementations call on_progress with byte counts as data is sent.
        """
        ...


class _UploadRun:
    """Mutable bookkeeping for a single call to UploadManager.upload."""

    def __init__(self, factory: PartRequestFactory, resumed: ResumeManifest):
        self.factory = factory
        self.completed: dict[int, CompletedPart] = {
            part.part_number: part for part in resumed
        }
        self.stopped = False
        self.failure: tuple[int, Exception] | None = None

    def ordered_parts(self) -> list[CompletedPart]:
        return [self.completed[n] for n in sorted(self.completed)]


class UploadManager:
    """Runs multipart uploads through a pluggable transport.

    Seekable sources are uploaded by ``config.num_workers`` concurrent
    workers. Sequential sources use a single worker so that parts are read
    off the stream in order.
    """

    def __init__(
        self,
        config: UploadConfig,
        transport: PartTransport,
        emitter: Emitter,
    ) -> None:
        """Initialize the upload manager.

        Args:
            config: Upload configuration.
            transport: Transport used to send each part.
            emitter: Emitter to publish upload events on.
        """
        self._config = config
        self._transport = transport
        self._emitter = emitter
        self._bandwidth_limiter = (
            BandwidthLimiter(config.bandwidth_limit)
            if config.bandwidth_limit
            else None
        )
        self._log_part = make_sampled_logger(
            "Uploading part %d (offset=%d, size=%d) of %s",
            log_interval=config.part_log_interval,
            target_logger=logger,
        )

    async def upload(
        self,
        upload_spec: UploadSpec,
        resume_manifest: ResumeManifest | None = None,
    ) -> list[CompletedPart]:
        """Upload every part of the payload that is not already complete.

        Args:
            upload_spec: Upload to perform.
            resume_manifest: Parts completed in an earlier attempt.

        Returns:
            Resumed and newly uploaded parts, ordered by part number.

        Raises:
            InvalidConfiguration: If the upload cannot be split into parts.
            UploadFailedError: If the transport fails for any part.
        """
        resume_manifest = resume_manifest or ResumeManifest()
        factory = PartRequestFactory.create(upload_spec, resume_manifest)
        run = _UploadRun(factory, resume_manifest)

        num_workers = (
            self._config.num_workers
            if is_upload_parallelizable(upload_spec.source)
            else 1
        )
        logger.info(
            "Starting upload %s to %s/%s: %d bytes in %d parts "
            "(%d already complete, %d workers)",
            upload_spec.upload_id,
            upload_spec.bucket,
            upload_spec.key,
            factory.content_length,
            factory.total_parts,
            len(resume_manifest),
            num_workers,
        )

        await asyncio.gather(*(self._worker(run) for _ in range(num_workers)))

        if run.failure is not None:
            failed_part, error = run.failure
            error_message = str(error) or type(error).__name__
            logger.error(
                "Upload %s failed at part %d: %s",
                upload_spec.upload_id,
                failed_part,
                error_message,
            )
            self._emitter.emit(
                Emitter.UPLOAD_FAILED, upload_spec.upload_id, error_message
            )
            raise UploadFailedError(
                failed_part, run.ordered_parts(), error_message
            ) from error

        pending_skip_bytes = factory.flush_pending_skip_bytes()
        if pending_skip_bytes:
            self._emitter.emit(Emitter.BYTES_SKIPPED, None, pending_skip_bytes)

        parts = run.ordered_parts()
        logger.info(
            "Upload %s complete: %d parts", upload_spec.upload_id, len(parts)
        )
        self._emitter.emit(Emitter.UPLOAD_COMPLETE, upload_spec.upload_id, parts)
        return parts

    async def _worker(self, run: _UploadRun) -> None:
        """Pull and upload parts until the factory is exhausted or a part fails."""
        while not run.stopped:
            part = run.factory.try_next_part()
            if part is None:
                return

            for skipped_bytes in run.factory.drain_skip_batches():
                self._emitter.emit(
                    Emitter.BYTES_SKIPPED, part.part_number, skipped_bytes
                )

            try:
                etag = await self._upload_part(part)
            except Exception as e:
                if not run.stopped:
                    run.stopped = True
                    run.failure = (part.part_number, e)
                logger.warning("Part %d failed: %s", part.part_number, e)
                self._emitter.emit(Emitter.PART_FAILED, part.part_number, str(e))
                return
            finally:
                part.content.close()

            run.completed[part.part_number] = CompletedPart(part.part_number, etag)
            self._emitter.emit(Emitter.PART_COMPLETED, part.part_number, etag)

    async def _upload_part(self, part: PartDescriptor) -> str:
        """Throttle and send a single part.

        Returns:
            The completion token returned by the transport.
        """
        self._log_part(
            part.part_number, part.is_last_part, part.offset, part.size, part.key
        )
        self._emitter.emit(
            Emitter.PART_STARTED, part.part_number, part.offset, part.size
        )

        if self._bandwidth_limiter is not None:
            await self._bandwidth_limiter.acquire(part.size)

        def on_progress(bytes_delta: int) -> None:
            self._emitter.emit(Emitter.BYTES_TRANSFERRED, part.part_number, bytes_delta)
            if part.progress_listener is not None:
                part.progress_listener(bytes_delta)

        return await self._transport.upload_part(part, on_progress)
