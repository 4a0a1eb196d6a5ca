"""Shared implementation for object store backends.

    Object stores only support reading and writing whole objects. ObjectStoreFile
    turns that into a seekable, writable file by staging the object in a local
    temporary file:

    - the first read(), write(), seek(), tell() or truncate() creates the staging
      buffer and, if the object exists, downloads it into the buffer (once);
    - later calls operate on the buffer directly; any write marks it dirty;
    - close() uploads the buffer if it is dirty and always releases it.

    Each backend provides an ObjectStoreClient, the small set of whole-object calls
    the staging buffer needs, and classifies its SDK's errors into
    ObjectNotFoundError and BackendError.
"""
import abc
import dataclasses
import datetime
import tempfile
import typing as t

from .base import BaseFileSystem, BaseFile, Location
from .exceptions import InvalidArgumentError, ObjectNotFoundError


@dataclasses.dataclass
class ObjectStat:
    """Object metadata returned by a head call."""

    size: t.Optional[int] = None
    last_modified: t.Optional[datetime.datetime] = None


class ObjectStoreClient(abc.ABC):
    """Whole-object operations against one object store."""

    @abc.abstractmethod
    def get(self, bucket: str, key: str, fileobj: t.BinaryIO):
        """Write the object's content into fileobj."""
        raise NotImplementedError

    @abc.abstractmethod
    def put(self, bucket: str, key: str, fileobj: t.BinaryIO):
        """Replace the object's content with the content of fileobj (read from its current offset)."""
        raise NotImplementedError

    @abc.abstractmethod
    def head(self, bucket: str, key: str) -> ObjectStat:
        raise NotImplementedError

    @abc.abstractmethod
    def delete(self, bucket: str, key: str):
        raise NotImplementedError

    def supports_native_copy(self) -> bool:
        return False

    def native_copy(self, src_bucket: str, src_key: str, dst_bucket: str, dst_key: str):
        """Copy an object within the store without downloading it."""
        raise NotImplementedError

    @staticmethod
    def is_not_found(ex: Exception) -> bool:
        """Check if an SDK exception means the object does not exist."""
        return False


class ObjectStoreFileSystem(BaseFileSystem):
    """Base class for file systems backed by an object store. The volume is the bucket name."""

    requires_volume = True

    def __init__(self, client: t.Optional[ObjectStoreClient] = None):
        super().__init__()
        self._client = client

    def client(self) -> ObjectStoreClient:
        """Get the backend client, building it from configuration on first use."""
        if self._client is None:
            self._client = self._build_client()
        return self._client

    @abc.abstractmethod
    def _build_client(self) -> ObjectStoreClient:
        raise NotImplementedError

    def staging_dir(self) -> t.Optional[str]:
        """Directory for staging buffers; None uses the system temp directory."""
        return self.config.as_str(("omnivfs", "staging_dir"), default=None)

    def validate_volume(self, volume: t.Optional[str]) -> str:
        volume = super().validate_volume(volume)
        if "/" in volume:
            raise InvalidArgumentError(f"Bucket name [{volume}] cannot contain a slash", 1022)
        return volume

    def _build_file(self, location: Location, name: str) -> "ObjectStoreFile":
        return ObjectStoreFile(location, name)


class ObjectStoreFile(BaseFile):
    """File stored as an object, accessed through a local staging buffer."""

    def __init__(self, location: Location, name: str):
        super().__init__(location, name)
        self._staging: t.Optional[t.BinaryIO] = None
        self._dirty = False

    def bucket(self) -> str:
        return self._location.volume()

    def key(self) -> str:
        return self.path().lstrip("/")

    def _client(self) -> ObjectStoreClient:
        return self.file_system().client()

    def _staging_buffer(self) -> t.BinaryIO:
        if self._staging is None:
            buffer = tempfile.TemporaryFile(dir=self.file_system().staging_dir())
            try:
                if self.exists():
                    self._log.debug(f"Downloading [{self}] to staging buffer")
                    self._client().get(self.bucket(), self.key(), buffer)
                    buffer.seek(0)
            except Exception:
                buffer.close()
                raise
            self._staging = buffer
            self._dirty = False
        return self._staging

    def read(self, size: int = -1) -> bytes:
        return self._staging_buffer().read(size)

    def write(self, data: bytes) -> int:
        buffer = self._staging_buffer()
        self._dirty = True
        return buffer.write(data)

    def seek(self, offset: int, whence: int = 0) -> int:
        return self._staging_buffer().seek(offset, whence)

    def tell(self) -> int:
        return self._staging_buffer().tell()

    def truncate(self, size: t.Optional[int] = None) -> int:
        buffer = self._staging_buffer()
        self._dirty = True
        return buffer.truncate(size)

    def close(self):
        if self._staging is None:
            return
        buffer = self._staging
        dirty = self._dirty
        self._staging = None
        self._dirty = False
        try:
            if dirty:
                self._log.debug(f"Uploading staging buffer to [{self}]")
                buffer.seek(0)
                self._client().put(self.bucket(), self.key(), buffer)
        finally:
            buffer.close()

    def abort(self):
        if self._staging is not None:
            self._staging.close()
            self._staging = None
        self._dirty = False

    def exists(self) -> bool:
        try:
            self._client().head(self.bucket(), self.key())
            return True
        except ObjectNotFoundError:
            return False

    def size(self) -> int:
        return self._client().head(self.bucket(), self.key()).size

    def last_modified(self) -> datetime.datetime:
        return self._client().head(self.bucket(), self.key()).last_modified

    def delete(self):
        self._client().delete(self.bucket(), self.key())
        self._log.debug(f"Deleted [{self}]")
        self.abort()

    def _native_copy(self, target: BaseFile) -> bool:
        if target.file_system().scheme() != self.file_system().scheme():
            return False
        if not isinstance(target, ObjectStoreFile):
            return False
        client = self._client()
        if not client.supports_native_copy():
            return False
        client.native_copy(self.bucket(), self.key(), target.bucket(), target.key())
        target.abort()
        return True
