import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO
from uuid import uuid4

log = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class UploadTooLarge(Exception):
    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"upload exceeds {limit} bytes")


@dataclass(frozen=True)
class StagedFile:
    key: str
    size: int


class LocalStorage:
    """
        Files kept on the local disk under server-chosen names.

        Methods are blocking; async callers run them in the threadpool.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def path(self, *, key: str) -> Path:
        # keys are always uuid hex, never client supplied
        return self.root / Path(key).name

    def exists(self, *, key: str) -> bool:
        return self.path(key=key).is_file()

    def stage(self, source: BinaryIO, *, max_bytes: int) -> StagedFile:
        """Copy `source` into the store, giving up past `max_bytes`."""
        self.ensure_root()
        key = uuid4().hex
        target = self.path(key=key)
        size = 0
        try:
            with open(target, "xb") as out:
                while True:
                    chunk = source.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > max_bytes:
                        raise UploadTooLarge(max_bytes)
                    out.write(chunk)
        except BaseException:
            target.unlink(missing_ok=True)
            raise
        return StagedFile(key=key, size=size)

    def delete(self, *, key: str) -> None:
        """Raises FileNotFoundError when the file is already gone."""
        self.path(key=key).unlink()

    def discard(self, *, key: str) -> None:
        try:
            self.delete(key=key)
        except FileNotFoundError:
            pass
        except OSError:
            log.exception(f"[storage] could not remove staged file {key}")
