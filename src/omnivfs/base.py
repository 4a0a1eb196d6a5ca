"""Backend independent FileSystem, Location and File contracts.

    A file system identifies one storage medium and builds locations and files on it.
    A location is a directory-like scope (volume + path, always ending in a slash) and
    a file is a single object inside a location. Every file exposes the same
    read/write/seek/close interface whether it lives on a local disk or in a remote
    object store, and can be copied or moved to any other file regardless of its backend.
"""
import abc
import datetime
import posixpath
import typing as t

import zirconium as zr
import zrlog

from .exceptions import InvalidArgumentError, ObjectNotFoundError, PartialMoveError
from .util import (
    DEFAULT_CHUNK_SIZE, clean_path, ensure_trailing_slash, file_uri, join_path, location_uri,
    touch_copy, validate_file_path, validate_location_path,
)


class BaseFileSystem(abc.ABC):

    config: zr.ApplicationConfig = None

    # Whether new_file() and new_location() need a non-empty volume
    requires_volume: bool = False

    def __init__(self):
        self._log = zrlog.get_logger(f"omnivfs.{self.scheme()}")

    def __str__(self):
        return self.name()

    @abc.abstractmethod
    def scheme(self) -> str:
        """Get the URI scheme that identifies this backend."""
        raise NotImplementedError

    @abc.abstractmethod
    def name(self) -> str:
        """Get a human readable name for this backend."""
        raise NotImplementedError

    def chunk_size(self) -> int:
        """Get the buffer size used when streaming content between files."""
        return self.config.as_int(("omnivfs", "chunk_size"), default=DEFAULT_CHUNK_SIZE)

    def validate_volume(self, volume: t.Optional[str]) -> str:
        """Check the volume and return the value to store on the location."""
        if self.requires_volume and not volume:
            raise InvalidArgumentError(f"A volume is required for [{self.scheme()}]", 1020)
        return volume or ""

    def new_file(self, volume: t.Optional[str], path: str) -> "BaseFile":
        """Build a file from a volume and an absolute path. No I/O is performed."""
        volume = self.validate_volume(volume)
        validate_file_path(path)
        path = clean_path(path)
        dir_name, file_name = posixpath.split(path)
        if not file_name:
            raise InvalidArgumentError(f"File path [{path}] has no file name", 1021)
        return self._build_file(Location(self, volume, ensure_trailing_slash(dir_name)), file_name)

    def new_location(self, volume: t.Optional[str], path: str) -> "Location":
        """Build a location from a volume and an absolute path ending in a slash."""
        volume = self.validate_volume(volume)
        validate_location_path(path)
        return Location(self, volume, clean_path(path))

    @abc.abstractmethod
    def _build_file(self, location: "Location", name: str) -> "BaseFile":
        raise NotImplementedError


class Location:
    """A directory-like scope within one file system.

        Locations compare equal when their URIs match. Two file system instances for
        the same scheme (for example S3 with different credentials) therefore give
        equal locations for the same bucket and path.
    """

    def __init__(self, file_system: "BaseFileSystem", volume: str, path: str):
        self._file_system = file_system
        self._volume = volume
        self._path = path

    def __str__(self):
        return self.uri()

    def __repr__(self):
        return f"<Location {self.uri()}>"

    def __eq__(self, other):
        if not isinstance(other, Location):
            return NotImplemented
        return self.uri() == other.uri()

    def __hash__(self):
        return hash(self.uri())

    def file_system(self) -> "BaseFileSystem":
        return self._file_system

    def volume(self) -> str:
        return self._volume

    def path(self) -> str:
        return self._path

    def uri(self) -> str:
        return location_uri(self)

    def new_file(self, relative_name: str) -> "BaseFile":
        """Build a file relative to this location."""
        return self._file_system.new_file(self._volume, join_path(self._path, relative_name))

    def new_location(self, relative_path: str) -> "Location":
        """Build a location relative to this location."""
        return self._file_system.new_location(self._volume, ensure_trailing_slash(join_path(self._path, relative_path)))


class BaseFile(abc.ABC):
    """One addressable object.

        Read, write and seek work on lazily acquired local resources that are
        released by close(). Files are not safe for concurrent use.
    """

    def __init__(self, location: Location, name: str):
        self._location = location
        self._name = name
        self._log = zrlog.get_logger(f"omnivfs.{location.file_system().scheme()}.file")

    def __str__(self):
        return self.uri()

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.uri()}>"

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def name(self) -> str:
        return self._name

    def location(self) -> "Location":
        return self._location

    def file_system(self) -> "BaseFileSystem":
        return self._location.file_system()

    def path(self) -> str:
        return self._location.path() + self._name

    def uri(self) -> str:
        return file_uri(self)

    @abc.abstractmethod
    def read(self, size: int = -1) -> bytes:
        """Read up to size bytes from the current offset (all remaining bytes by default)."""
        raise NotImplementedError

    @abc.abstractmethod
    def write(self, data: bytes) -> int:
        """Write data at the current offset, returning the number of bytes written."""
        raise NotImplementedError

    @abc.abstractmethod
    def seek(self, offset: int, whence: int = 0) -> int:
        """Move the current offset, returning the new absolute offset."""
        raise NotImplementedError

    @abc.abstractmethod
    def tell(self) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    def truncate(self, size: t.Optional[int] = None) -> int:
        """Truncate the file to size bytes (the current offset by default)."""
        raise NotImplementedError

    @abc.abstractmethod
    def close(self):
        """Commit any pending changes and release local resources. Safe to call repeatedly."""
        raise NotImplementedError

    @abc.abstractmethod
    def abort(self):
        """Release local resources without committing pending changes."""
        raise NotImplementedError

    @abc.abstractmethod
    def exists(self) -> bool:
        raise NotImplementedError

    @abc.abstractmethod
    def size(self) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    def last_modified(self) -> datetime.datetime:
        raise NotImplementedError

    @abc.abstractmethod
    def delete(self):
        raise NotImplementedError

    def copy_to_file(self, target: "BaseFile"):
        """Copy this file's content over the target file."""
        self._copy_to(target)

    def copy_to_location(self, location: "Location") -> "BaseFile":
        """Copy this file into a location, keeping its name."""
        target = location.new_file(self._name)
        self._copy_to(target)
        return target

    def move_to_file(self, target: "BaseFile"):
        """Copy this file over the target file, then delete this file."""
        self._copy_to(target)
        self._delete_after_copy(target)

    def move_to_location(self, location: "Location") -> "BaseFile":
        """Move this file into a location, keeping its name.

            Within the same file system, this file is updated in place to refer to the
            new location and is returned. Otherwise the file built in the new location
            is returned, since this file cannot address another backend.
        """
        target = self.copy_to_location(location)
        self._delete_after_copy(target)
        if location.file_system() is not self.file_system():
            return target
        self._location = location
        return self

    def _copy_to(self, target: "BaseFile"):
        if target.uri() == self.uri():
            self._log.debug(f"Copy of [{self}] onto itself, nothing to do")
            self.close()
            return
        # Pending writes are committed so both copy paths see the same content
        self.close()
        if not self.exists():
            raise ObjectNotFoundError(f"Cannot copy [{self}], it does not exist")
        if self._native_copy(target):
            self._log.debug(f"Copied [{self}] to [{target}] using native copy")
            return
        self._log.debug(f"Copying [{self}] to [{target}] by streaming")
        try:
            touch_copy(target, self, self.file_system().chunk_size())
        except Exception:
            self.abort()
            target.abort()
            raise
        self.close()
        target.close()

    def _native_copy(self, target: "BaseFile") -> bool:
        """Override to copy to the target without streaming through this process.

            Return False when the target cannot be handled natively.
        """
        return False

    def _delete_after_copy(self, target: "BaseFile"):
        if target.uri() == self.uri():
            return
        try:
            self.delete()
        except Exception as ex:
            self._log.warning(f"Copied [{self}] to [{target}] but the source could not be deleted")
            raise PartialMoveError(self, target) from ex
