"""Pydantic models for partflow upload configuration."""

from pydantic import BaseModel, Field

from partflow.const import (
    DEFAULT_NUM_WORKERS,
    MAXIMUM_UPLOAD_PARTS,
    MIN_PART_SIZE,
    PART_LOG_INTERVAL,
)


class UploadConfig(BaseModel):
    """Configuration options for multipart uploads.

    Attributes:
        min_part_size: smallest part size to use, in bytes.
        max_parts: maximum number of parts the object store accepts.
        num_workers: concurrent part uploads for seekable sources.
        bandwidth_limit: maximum aggregate upload rate in bytes per second,
            or None for no limit.
        show_progress: render a progress bar while uploading.
        part_log_interval: log every Nth part at debug level.
    """

    min_part_size: int = Field(default=MIN_PART_SIZE, gt=0)
    max_parts: int = Field(default=MAXIMUM_UPLOAD_PARTS, gt=0)
    num_workers: int = Field(default=DEFAULT_NUM_WORKERS, gt=0)
    bandwidth_limit: int | None = Field(default=None, gt=0)
    show_progress: bool = False
    part_log_interval: int = Field(default=PART_LOG_INTERVAL, gt=0)
