"""Exception classes for the multipart upload workflow."""

from partflow.models import CompletedPart


class PartflowError(Exception):
    """Base error for partflow."""


class InvalidConfiguration(PartflowError):
    """Raised when an upload cannot be split into parts as configured."""


class TruncatedSourceError(PartflowError):
    """Raised when a sequential source ends before a part was fully read."""

    def __init__(self, expected: int, received: int):
        """Initialize TruncatedSourceError.

        Args:
            expected: Number of bytes the part should contain.
            received: Number of bytes the stream actually produced.
        """
        super().__init__(
            f"Stream ended early: expected {expected} bytes, got {received}"
        )
        self.expected = expected
        self.received = received


class PartOrderError(PartflowError):
    """Raised when parts of a sequential source are read out of order."""

    def __init__(self, offset: int, consumed: int):
        """Initialize PartOrderError.

        Args:
            offset: Stream offset the part needed to read from.
            consumed: Bytes already consumed from the stream.
        """
        super().__init__(
            f"Cannot read from offset {offset}: stream already consumed "
            f"{consumed} bytes"
        )
        self.offset = offset
        self.consumed = consumed


class UploadFailedError(PartflowError):
    """Raised when a part transfer fails during an upload.

    Carries every part completed so far so the caller can build a
    ResumeManifest for the next attempt.
    """

    def __init__(
        self,
        part_number: int,
        completed_parts: list[CompletedPart],
        message: str,
    ):
        """Initialize UploadFailedError.

        Args:
            part_number: Part whose transfer failed.
            completed_parts: Parts completed before the failure, ordered.
            message: Description of the failure.
        """
        super().__init__(f"Part {part_number} failed: {message}")
        self.part_number = part_number
        self.completed_parts = completed_parts
