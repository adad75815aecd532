"""Upload a file in parts to a local directory, optionally resuming.

Each part is written as ``part-00001.bin`` etc. and its MD5 is used as the
completion token. Re-running with ``--resume`` skips parts already present.
"""

import argparse
import asyncio
import hashlib
import logging
import uuid
from collections.abc import Callable
from pathlib import Path

import partflow as pf
from partflow.config_manager.helpers import (
    build_upload_config,
    calculate_optimal_part_size,
    parse_bytes,
)


class LocalDirectoryTransport:
    """Stores each part as a file in a directory."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory
        self.directory.mkdir(parents=True, exist_ok=True)

    def part_path(self, part_number: int) -> Path:
        return self.directory / f"part-{part_number:05d}.bin"

    async def upload_part(
        self, part: pf.PartDescriptor, on_progress: Callable[[int], None]
    ) -> str:
        md5 = hashlib.md5()
        with open(self.part_path(part.part_number), "wb") as f:
            for chunk in part.content.iter_chunks():
                f.write(chunk)
                md5.update(chunk)
                on_progress(len(chunk))
                await asyncio.sleep(0)
        return md5.hexdigest()

    def completed_parts(self) -> pf.ResumeManifest:
        parts = []
        for path in sorted(self.directory.glob("part-*.bin")):
            part_number = int(path.stem.split("-")[1])
            parts.append(
                pf.CompletedPart(part_number, hashlib.md5(path.read_bytes()).hexdigest())
            )
        return pf.ResumeManifest(parts)


async def main(args: argparse.Namespace) -> None:
    config = build_upload_config(
        num_workers=args.workers, bandwidth_limit=args.bandwidth
    )
    transport = LocalDirectoryTransport(Path(args.output))
    source = pf.SeekableSource(args.file)
    part_size = args.part_size or calculate_optimal_part_size(
        source.content_length, config
    )
    spec = pf.UploadSpec(
        bucket="local",
        key=Path(args.file).name,
        upload_id=str(uuid.uuid4()),
        part_size=part_size,
        source=source,
    )
    manifest = transport.completed_parts() if args.resume else None

    emitter = pf.Emitter(loop=asyncio.get_running_loop())
    with pf.ProgressReporter.from_config(emitter, source.content_length, config):
        parts = await pf.UploadManager(config, transport, emitter).upload(
            spec, manifest
        )
    print(f"Uploaded {len(parts)} parts to {args.output}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("file", help="File to upload")
    parser.add_argument("output", help="Directory to write parts to")
    parser.add_argument("--part-size", type=parse_bytes, default=None)
    parser.add_argument("--workers", type=int, default=None)
    parser.add_argument("--bandwidth", type=parse_bytes, default=None)
    parser.add_argument("--resume", action="store_true")
    asyncio.run(main(parser.parse_args()))
