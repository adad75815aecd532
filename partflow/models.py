"""Models used by the upload pipeline."""

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from partflow.sources import ContentSource, PartContent

ProgressListener = Callable[[int], None]


@dataclass(frozen=True)
class CompletedPart:
    """A part accepted by the object store.

    Attributes:
        part_number: 1-based part number.
        etag: Completion token returned by the store for this part.
    """

    part_number: int
    etag: str


class ResumeManifest:
    """Parts completed in an earlier attempt at the same upload session.

    Records are kept in ascending part-number order. When a part number is
    given twice the first record wins.
    """

    def __init__(self, parts: Iterable[CompletedPart] = ()) -> None:
        by_number: dict[int, CompletedPart] = {}
        for part in parts:
            by_number.setdefault(part.part_number, part)
        self._parts = tuple(by_number[n] for n in sorted(by_number))

    @property
    def parts(self) -> tuple[CompletedPart, ...]:
        return self._parts

    def part_numbers(self) -> frozenset[int]:
        """Return the set of completed part numbers."""
        return frozenset(part.part_number for part in self._parts)

    def __contains__(self, part_number: object) -> bool:
        return any(part.part_number == part_number for part in self._parts)

    def __iter__(self) -> Iterator[CompletedPart]:
        return iter(self._parts)

    def __len__(self) -> int:
        return len(self._parts)

    def __repr__(self) -> str:
        numbers = [part.part_number for part in self._parts]
        return f"ResumeManifest(part_numbers={numbers})"


@dataclass(frozen=True)
class UploadSpec:
    """Everything needed to split one multipart upload into parts.

    Attributes:
        bucket: Target bucket.
        key: Target object key.
        upload_id: Multipart upload session identifier.
        part_size: Optimal part size in bytes.
        source: Payload to upload.
        progress_listener: Called with byte counts as part data is sent.
    """

    bucket: str
    key: str
    upload_id: str
    part_size: int
    source: "ContentSource"
    progress_listener: ProgressListener | None = None


@dataclass(frozen=True)
class PartDescriptor:
    """One part of a multipart upload, ready to hand to a transport."""

    bucket: str
    key: str
    upload_id: str
    part_number: int
    offset: int
    size: int
    is_last_part: bool
    content: "PartContent"
    progress_listener: ProgressListener | None = None
