"""Path, URI and streaming helpers shared by every backend."""
from __future__ import annotations
import posixpath
import re
import typing as t
from urllib.parse import urlsplit

from .exceptions import InvalidArgumentError

if t.TYPE_CHECKING:
    from .base import BaseFile, Location


DEFAULT_CHUNK_SIZE = 4194304

_REPEATED_SLASHES = re.compile("/{2,}")


def ensure_leading_slash(path: str) -> str:
    return path if path.startswith("/") else f"/{path}"


def ensure_trailing_slash(path: str) -> str:
    return path if path.endswith("/") else f"{path}/"


def clean_path(path: str) -> str:
    """Collapse repeated separators and resolve '.' and '..' segments.

        A trailing separator is kept, so directory paths stay directory paths.
    """
    is_dir = path.endswith("/")
    cleaned = posixpath.normpath(_REPEATED_SLASHES.sub("/", path))
    if cleaned == "/" or cleaned == ".":
        return "/" if path.startswith("/") else ""
    if is_dir:
        cleaned += "/"
    return cleaned


def validate_file_path(path: str):
    if not path:
        raise InvalidArgumentError("File path is empty", 1000)
    if not path.startswith("/"):
        raise InvalidArgumentError(f"File path [{path}] is not absolute", 1001)
    if path.endswith("/"):
        raise InvalidArgumentError(f"File path [{path}] refers to a directory", 1002)


def validate_location_path(path: str):
    if not path:
        raise InvalidArgumentError("Location path is empty", 1003)
    if not path.startswith("/"):
        raise InvalidArgumentError(f"Location path [{path}] is not absolute", 1004)
    if not path.endswith("/"):
        raise InvalidArgumentError(f"Location path [{path}] must end with a slash", 1005)


def join_path(location_path: str, relative_path: str) -> str:
    """Join a relative path onto a location path."""
    if not relative_path:
        raise InvalidArgumentError("Relative path is empty", 1006)
    if relative_path.startswith("/"):
        raise InvalidArgumentError(f"Relative path [{relative_path}] must not be absolute", 1007)
    return clean_path(ensure_trailing_slash(location_path) + relative_path)


def file_uri(file: BaseFile) -> str:
    return f"{file.location().file_system().scheme()}://{file.location().volume()}{file.path()}"


def location_uri(location: Location) -> str:
    return f"{location.file_system().scheme()}://{location.volume()}{location.path()}"


def parse_uri(uri: str) -> tuple[str, str, str]:
    """Split a URI into (scheme, volume, path)."""
    if "://" not in uri:
        raise InvalidArgumentError(f"[{uri}] is not a valid URI", 1010)
    pieces = urlsplit(uri)
    if not pieces.scheme:
        raise InvalidArgumentError(f"[{uri}] has no scheme", 1011)
    path = pieces.path or "/"
    return pieces.scheme, pieces.netloc, path


def read_in_chunks(readable, chunk_size: int = DEFAULT_CHUNK_SIZE) -> t.Iterable[bytes]:
    """Read from a readable object until it is exhausted."""
    x = readable.read(chunk_size)
    while x:
        yield x
        x = readable.read(chunk_size)


def touch_copy(target: BaseFile, source: BaseFile, chunk_size: int = None) -> int:
    """Stream the content of source into target, returning the number of bytes copied.

        Both files are rewound first and the target is truncated, so the target ends up
        holding exactly the source's bytes. Write is always called at least once, so an
        empty source still materializes the target on backends that only create objects
        when something was written.
    """
    if chunk_size is None:
        chunk_size = DEFAULT_CHUNK_SIZE
    source.seek(0)
    target.seek(0)
    target.truncate()
    copied = 0
    written = False
    for chunk in read_in_chunks(source, chunk_size):
        target.write(chunk)
        copied += len(chunk)
        written = True
    if not written:
        target.write(b"")
    return copied
