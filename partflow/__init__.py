from .config_manager.upload_config import UploadConfig
from .event_emitter import Emitter
from .exceptions import (
    InvalidConfiguration,
    PartflowError,
    PartOrderError,
    TruncatedSourceError,
    UploadFailedError,
)
from .models import CompletedPart, PartDescriptor, ResumeManifest, UploadSpec
from .part_request_factory import PartRequestFactory
from .progress_reporter import ProgressReporter
from .sources import SeekableSource, SequentialSource
from .upload_management.upload_manager import PartTransport, UploadManager

__version__ = "0.3.0"

__all__ = [
    "CompletedPart",
    "Emitter",
    "InvalidConfiguration",
    "PartDescriptor",
    "PartRequestFactory",
    "PartTransport",
    "PartflowError",
    "PartOrderError",
    "ProgressReporter",
    "ResumeManifest",
    "SeekableSource",
    "SequentialSource",
    "TruncatedSourceError",
    "UploadConfig",
    "UploadFailedError",
    "UploadManager",
    "UploadSpec",
]
