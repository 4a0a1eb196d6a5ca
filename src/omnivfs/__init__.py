"""
    A virtual file system over local disks and object stores.

    Files are obtained from a FileSystem (by volume and absolute path), from a Location
    (by relative name) or from the FileSystemRegistry (by URI), and all expose the same
    operations: read/write/seek/close, exists/size/last_modified, delete, and
    copy/move to any other file or location on any backend.

    Object stores (s3://, gs://) have no random access, so their files stage the
    object in a local temporary file on first access and upload it again on close()
    if it was written to. Local files (file://) use a native file handle directly.

    Copies between two files of the same object store use the store's server-side
    copy; anything else is streamed through read() and write().

    Paths follow a strict convention: location paths always end with a slash and
    file paths never do, so that

        s3://bucket/some/path/        is a location, and
        s3://bucket/some/path/a.txt   is a file whose path() is /some/path/a.txt
"""
from .base import BaseFileSystem, BaseFile, Location
from .exceptions import VFSError, InvalidArgumentError, ObjectNotFoundError, BackendError, PartialMoveError
from .local import LocalFileSystem, LocalFile
from .object_store import ObjectStoreClient, ObjectStoreFileSystem, ObjectStoreFile, ObjectStat
from .registry import FileSystemRegistry
from .util import touch_copy
