"""Scheme-based lookup of file systems."""
import threading
import typing as t

import zrlog
from autoinject import injector

from .base import BaseFileSystem, BaseFile, Location
from .exceptions import InvalidArgumentError
from .util import parse_uri


@injector.injectable_global
class FileSystemRegistry:
    """Maps URI schemes to file system factories.

        Backends are registered once during start-up (see omnivfs.boot.init_omnivfs()).
        Each scheme gets a single file system instance, built the first time it is
        requested and shared afterwards.

        file:///tmp/data.csv         -> LocalFileSystem
        s3://BUCKET/path/to/data.csv -> S3FileSystem
        gs://BUCKET/path/to/data.csv -> GSFileSystem
    """

    def __init__(self):
        self._factories: dict[str, t.Callable[[], BaseFileSystem]] = {}
        self._instances: dict[str, BaseFileSystem] = {}
        self._lock = threading.Lock()
        self._log = zrlog.get_logger("omnivfs.registry")

    def register(self, scheme: str, factory: t.Callable[[], BaseFileSystem]):
        """Register a factory for a scheme, replacing any previous registration."""
        self._log.debug(f"Registering file system for scheme [{scheme}]")
        with self._lock:
            self._factories[scheme] = factory
            self._instances.pop(scheme, None)

    def schemes(self) -> list[str]:
        return sorted(self._factories.keys())

    def file_system(self, scheme: str) -> BaseFileSystem:
        """Get the file system registered for a scheme."""
        if scheme in self._instances:
            return self._instances[scheme]
        if scheme not in self._factories:
            raise InvalidArgumentError(f"No file system registered for scheme [{scheme}]", 1030)
        with self._lock:
            if scheme not in self._instances:
                self._instances[scheme] = self._factories[scheme]()
            return self._instances[scheme]

    def new_file_from_uri(self, uri: str) -> BaseFile:
        """Build a file from a URI like s3://bucket/path/to/file.txt"""
        scheme, volume, path = parse_uri(uri)
        return self.file_system(scheme).new_file(volume, path)

    def new_location_from_uri(self, uri: str) -> Location:
        """Build a location from a URI like s3://bucket/path/to/dir/"""
        scheme, volume, path = parse_uri(uri)
        return self.file_system(scheme).new_location(volume, path)
