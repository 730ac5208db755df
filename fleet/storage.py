"""Directory-backed object storage for vehicle photos, license images and logos."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Iterable, Union

from .result import Err, ErrorKind, Ok, Result

logger = logging.getLogger(__name__)


@dataclass
class FileRef:
    """A stored object as returned by list()."""

    name: str
    path: str
    size: int
    updated_at: str


class ObjectStorage:
    """
    Stores objects under a root directory, addressed by '/'-separated keys.

    Public URLs are public_base_url + key; the web app serves them.
    """

    def __init__(self, root: Union[str, Path], public_base_url: str = "/storage"):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    def _resolve(self, key: str) -> Path:
        """Map a key to a file under root. Raises ValueError for unsafe keys."""
        parts = PurePosixPath(key.strip("/")).parts
        if not parts or any(p in ("..", ".") for p in parts):
            raise ValueError(f"Invalid object path: {key!r}")
        return self.root.joinpath(*parts)

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{key.strip('/')}"

    def upload(self, key: str, data: bytes, upsert: bool = False) -> Result:
        """Store an object and return its public URL."""
        try:
            target = self._resolve(key)
        except ValueError as e:
            return Err(ErrorKind.VALIDATION, str(e))
        if target.exists() and not upsert:
            return Err(ErrorKind.VALIDATION, f"Object already exists: {key}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            logger.error("Upload of %s failed: %s", key, e)
            return Err(ErrorKind.STORAGE, f"Upload failed: {e}")
        logger.info("Stored %s (%d bytes)", key, len(data))
        return Ok(self.public_url(key))

    def list(self, prefix: str = "") -> Result:
        """Objects directly under a folder prefix, sorted by name."""
        folder = self.root
        if prefix.strip("/"):
            try:
                folder = self._resolve(prefix)
            except ValueError as e:
                return Err(ErrorKind.VALIDATION, str(e))
        if not folder.is_dir():
            return Ok([])
        refs = []
        for path in sorted(folder.iterdir()):
            if not path.is_file():
                continue
            stat = path.stat()
            refs.append(
                FileRef(
                    name=path.name,
                    path=path.relative_to(self.root).as_posix(),
                    size=stat.st_size,
                    updated_at=datetime.fromtimestamp(stat.st_mtime, timezone.utc).isoformat(
                        timespec="seconds"
                    ),
                )
            )
        return Ok(refs)

    def open(self, key: str) -> Result:
        """Read an object's bytes."""
        try:
            target = self._resolve(key)
        except ValueError as e:
            return Err(ErrorKind.VALIDATION, str(e))
        if not target.is_file():
            return Err(ErrorKind.NOT_FOUND, f"Object not found: {key}")
        return Ok(target.read_bytes())

    def remove(self, keys: Iterable[str]) -> Result:
        """Delete objects. Missing keys are ignored. Returns how many were removed."""
        targets = []
        for key in keys:
            try:
                targets.append(self._resolve(key))
            except ValueError as e:
                return Err(ErrorKind.VALIDATION, str(e))
        removed = 0
        for target in targets:
            if target.is_file():
                try:
                    target.unlink()
                except OSError as e:
                    logger.error("Removing %s failed: %s", target, e)
                    return Err(ErrorKind.STORAGE, f"Remove failed: {e}")
                removed += 1
        return Ok(removed)
