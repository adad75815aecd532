"""Event emitter for signalling between upload components."""

import asyncio
import logging
from typing import Any

from pyee.asyncio import AsyncIOEventEmitter

logger = logging.getLogger(__name__)


class Emitter(AsyncIOEventEmitter):
    """Event emitter shared by the components of one upload.

    Instances are created by the caller and passed to each component that
    needs them.
    """

    # Upload manager -> listeners
    PART_STARTED = "PART_STARTED"
    # (part_number, offset, size)

    # Upload manager -> Progress reporter
    BYTES_TRANSFERRED = "BYTES_TRANSFERRED"
    # (part_number, bytes_delta)

    # Upload manager -> Progress reporter
    BYTES_SKIPPED = "BYTES_SKIPPED"
    # (part_number | None, skipped_bytes)
    # part_number is None for bytes flushed after a fully resumed upload

    # Upload manager -> listeners
    PART_COMPLETED = "PART_COMPLETED"
    # (part_number, etag)

    # Upload manager -> listeners
    PART_FAILED = "PART_FAILED"
    # (part_number, error_message)

    # Upload manager -> listeners
    UPLOAD_COMPLETE = "UPLOAD_COMPLETE"
    # (upload_id, parts: list[CompletedPart])

    # Upload manager -> listeners
    UPLOAD_FAILED = "UPLOAD_FAILED"
    # (upload_id, error_message)

    def __init__(self, *, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Initialize the event emitter.

        Args:
            loop: The event loop to use for async event handlers.
        """
        super().__init__(loop=loop)

    def emit(self, event: str, *args: Any, **kwargs: Any) -> bool:
        """Emit an event with logging.

        Args:
            event: The event name to emit.
            *args: Positional arguments to pass to handlers.
            **kwargs: Keyword arguments to pass to handlers.

        Returns:
            True if the event had listeners, False otherwise.
        """
        if logger.isEnabledFor(logging.DEBUG):
            formatted_args = []
            for arg in args:
                if isinstance(arg, list):
                    formatted_args.append(f"<list of {len(arg)} items>")
                else:
                    r = repr(arg)
                    formatted_args.append(f"{r[:100]}..." if len(r) > 100 else r)
            logger.debug("EVENT %s: %s", event, ", ".join(formatted_args))
        return super().emit(event, *args, **kwargs)
