"""Local disk backend"""
import datetime
import os
import pathlib
import typing as t

import zirconium as zr
from autoinject import injector

from .base import BaseFileSystem, BaseFile, Location
from .exceptions import ObjectNotFoundError, wrap_local_errors


class LocalFileSystem(BaseFileSystem):
    """File system for a local disk or mounted network drive.

        Volumes have no meaning on a local disk and are always stored as an empty string.
    """

    config: zr.ApplicationConfig = None

    @injector.construct
    def __init__(self):
        super().__init__()

    def scheme(self) -> str:
        return "file"

    def name(self) -> str:
        return "local file system"

    def validate_volume(self, volume: t.Optional[str]) -> str:
        return ""

    def _build_file(self, location: Location, name: str) -> "LocalFile":
        return LocalFile(location, name)


class LocalFile(BaseFile):
    """File on a local disk.

        The native file handle is opened lazily (read-write, created if missing) the
        first time it is needed and is kept until close() or delete().
    """

    def __init__(self, location: Location, name: str):
        super().__init__(location, name)
        self._handle: t.Optional[t.BinaryIO] = None

    def local_path(self) -> pathlib.Path:
        return pathlib.Path(self.path())

    @wrap_local_errors
    def _open(self) -> t.BinaryIO:
        if self._handle is None:
            path = self.local_path()
            path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(path, os.O_RDWR | os.O_CREAT, 0o666)
            self._handle = os.fdopen(fd, "r+b")
        return self._handle

    @wrap_local_errors
    def read(self, size: int = -1) -> bytes:
        # Reading must not create the file
        if self._handle is None and not self.exists():
            raise ObjectNotFoundError(f"Cannot read [{self}], it does not exist")
        return self._open().read(size)

    @wrap_local_errors
    def write(self, data: bytes) -> int:
        return self._open().write(data)

    @wrap_local_errors
    def seek(self, offset: int, whence: int = 0) -> int:
        return self._open().seek(offset, whence)

    @wrap_local_errors
    def tell(self) -> int:
        return self._open().tell()

    @wrap_local_errors
    def truncate(self, size: t.Optional[int] = None) -> int:
        return self._open().truncate(size)

    @wrap_local_errors
    def close(self):
        if self._handle is None:
            return
        handle = self._handle
        self._handle = None
        handle.close()

    def abort(self):
        self.close()

    @wrap_local_errors
    def exists(self) -> bool:
        return self.local_path().is_file()

    @wrap_local_errors
    def size(self) -> int:
        return self.local_path().stat().st_size

    @wrap_local_errors
    def last_modified(self) -> datetime.datetime:
        return datetime.datetime.fromtimestamp(self.local_path().stat().st_mtime, datetime.timezone.utc)

    @wrap_local_errors
    def delete(self):
        self.close()
        self.local_path().unlink()
        self._log.debug(f"Deleted [{self}]")
