"""
Local filesystem storage for uploaded files.

The storage root is a flat directory: every file lives at
``<root>/<generated name>`` and the generated name is the only handle
callers use afterwards.
"""

import logging
import mimetypes
import os
import shutil
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, List, Optional, Tuple, Union

from uploads_api.errors import ErrorKind, FilesApiError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
COPY_CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class StoredFile:
    """A file held in the storage root."""
    name: str
    size: int
    mimetype: str
    path: Path
    original_name: Optional[str] = None


def extension_of(original_name: Optional[str]) -> str:
    """Extension of the original file name, leading dot included, case preserved."""
    if not original_name:
        return ""
    return os.path.splitext(os.path.basename(original_name))[1]


def guess_content_type(name: str) -> str:
    content_type, _ = mimetypes.guess_type(name)
    return content_type or DEFAULT_CONTENT_TYPE


class LocalFileStorage:
    """Create, stat, delete and read files under a single root directory."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def ensure_root(self) -> Path:
        """Create the root (and missing parents). Safe to call concurrently."""
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def scan(self) -> List[str]:
        """Names of the files currently stored, sorted."""
        if not self.root.is_dir():
            return []
        return sorted(entry.name for entry in self.root.iterdir() if entry.is_file())

    def is_writable(self) -> bool:
        return self.root.is_dir() and os.access(self.root, os.W_OK)

    @staticmethod
    def generate_name(original_name: Optional[str]) -> str:
        """Random 128-bit identifier followed by the original extension."""
        return f"{uuid.uuid4()}{extension_of(original_name)}"

    def resolve(self, name: str) -> Path:
        """
        Join the root with a single path segment.

        Names that would escape the root or address a subdirectory are rejected.
        """
        if (
            not name
            or name in (".", "..")
            or "/" in name
            or "\\" in name
            or "\x00" in name
        ):
            raise FilesApiError(ErrorKind.INVALID_PARAMETER, f"Invalid file name: {name!r}")
        return self.root / name

    def store(self, stream: BinaryIO, original_name: Optional[str], mimetype: str) -> StoredFile:
        """
        Write ``stream`` under a freshly generated name.

        :param stream: readable binary stream positioned anywhere; it is rewound first.
        :param original_name: client-supplied file name, used only for its extension.
        :param mimetype: the declared content type, returned as-is.
        :return: the stored file with its on-disk size.
        """
        self.ensure_root()
        name = self.generate_name(original_name)
        path = self.root / name

        if stream.seekable():
            stream.seek(0)
        # "xb" refuses to replace an existing file
        with open(path, "xb") as destination:
            try:
                shutil.copyfileobj(stream, destination, COPY_CHUNK_SIZE)
            except BaseException:
                # never leave a partial file behind
                path.unlink(missing_ok=True)
                raise

        size = path.stat().st_size
        logger.info(
            f"Stored file {name} (originalname={original_name} size={size} mimetype={mimetype})"
        )
        return StoredFile(
            name=name,
            size=size,
            mimetype=mimetype,
            path=path,
            original_name=original_name,
        )

    def stat(self, name: str) -> int:
        """Size in bytes of a stored file."""
        path = self.resolve(name)
        try:
            if not path.is_file():
                raise FilesApiError(ErrorKind.FILE_NOT_FOUND, "The specified file does not exist")
            return path.stat().st_size
        except PermissionError:
            raise FilesApiError(ErrorKind.PERMISSION_DENIED, "Access to the file is denied")

    def delete(self, name: str) -> int:
        """Remove a stored file and return the size it had."""
        path = self.resolve(name)
        size = self.stat(name)
        try:
            path.unlink()
        except FileNotFoundError:
            # removed by a concurrent request between stat and unlink
            raise FilesApiError(ErrorKind.FILE_NOT_FOUND, "The specified file does not exist")
        except PermissionError:
            raise FilesApiError(ErrorKind.PERMISSION_DENIED, "Access to the file is denied")

        logger.info(f"Deleted file {name} (size={size})")
        return size

    def open(self, name: str) -> Tuple[StoredFile, BinaryIO]:
        """
        Open a stored file for reading.

        The caller owns the returned handle and must close it.
        """
        path = self.resolve(name)
        if not path.is_file():
            raise FilesApiError(ErrorKind.FILE_NOT_FOUND, "The requested file does not exist")
        try:
            handle = open(path, "rb")
        except FileNotFoundError:
            raise FilesApiError(ErrorKind.FILE_NOT_FOUND, "The requested file does not exist")
        except PermissionError:
            raise FilesApiError(ErrorKind.PERMISSION_DENIED, "Access to the file is denied")

        size = os.fstat(handle.fileno()).st_size
        stored = StoredFile(name=name, size=size, mimetype=guess_content_type(name), path=path)
        return stored, handle
