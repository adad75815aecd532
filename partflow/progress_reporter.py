"""Progress reporting for multipart uploads."""

import logging

from tqdm import tqdm

from partflow.config_manager.upload_config import UploadConfig
from partflow.event_emitter import Emitter

logger = logging.getLogger(__name__)


class ProgressReporter:
    """Track upload progress from live and replayed byte counts.

    Live progress arrives as BYTES_TRANSFERRED events while parts are sent.
    Bytes of parts completed in an earlier attempt arrive as BYTES_SKIPPED
    events, so a resumed upload still reports its full content length.
    """

    def __init__(
        self,
        emitter: Emitter,
        total_bytes: int,
        show_progress: bool = False,
        description: str = "Uploading",
    ) -> None:
        """Subscribe to progress events.

        Args:
            emitter: Emitter the upload manager publishes on.
            total_bytes: Content length of the upload.
            show_progress: Whether to render a progress bar.
            description: Label for the progress bar.
        """
        self.total_bytes = total_bytes
        self.transferred_bytes = 0
        self.skipped_bytes = 0
        self._emitter = emitter
        self._bar = tqdm(
            total=total_bytes,
            desc=description,
            unit="B",
            unit_scale=True,
            disable=not show_progress,
        )
        self._emitter.on(Emitter.BYTES_TRANSFERRED, self._on_bytes_transferred)
        self._emitter.on(Emitter.BYTES_SKIPPED, self._on_bytes_skipped)

    @classmethod
    def from_config(
        cls, emitter: Emitter, total_bytes: int, config: UploadConfig
    ) -> "ProgressReporter":
        """Build a reporter that shows a bar when ``config.show_progress`` is set."""
        return cls(emitter, total_bytes, show_progress=config.show_progress)

    @property
    def reported_bytes(self) -> int:
        return self.transferred_bytes + self.skipped_bytes

    @property
    def is_complete(self) -> bool:
        return self.reported_bytes == self.total_bytes

    def _on_bytes_transferred(self, part_number: int, bytes_delta: int) -> None:
        if bytes_delta <= 0:
            logger.warning(
                "Ignoring progress of %d bytes for part %s", bytes_delta, part_number
            )
            return
        self.transferred_bytes += bytes_delta
        self._bar.update(bytes_delta)

    def _on_bytes_skipped(self, part_number: int | None, skipped_bytes: int) -> None:
        if skipped_bytes <= 0:
            logger.warning(
                "Ignoring %d skipped bytes before part %s", skipped_bytes, part_number
            )
            return
        if part_number is None:
            logger.info("Reporting %d bytes of a fully resumed upload", skipped_bytes)
        else:
            logger.info(
                "Reporting %d previously uploaded bytes before part %d",
                skipped_bytes,
                part_number,
            )
        self.skipped_bytes += skipped_bytes
        self._bar.update(skipped_bytes)

    def close(self) -> None:
        """Unsubscribe from the emitter and close the progress bar."""
        self._emitter.remove_listener(
            Emitter.BYTES_TRANSFERRED, self._on_bytes_transferred
        )
        self._emitter.remove_listener(Emitter.BYTES_SKIPPED, self._on_bytes_skipped)
        self._bar.close()

    def __enter__(self) -> "ProgressReporter":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
