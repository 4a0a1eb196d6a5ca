"""Errors raised by omnivfs."""
from __future__ import annotations
import functools
import typing as t

if t.TYPE_CHECKING:
    from .base import BaseFile


class VFSError(Exception):
    """Super-type of all errors raised by omnivfs code"""

    def __init__(self, msg: str, code_space: str = "GEN", code_number: int = None, is_recoverable: bool = False):
        self.internal_code = "" if code_number is None else f"{code_space}-{code_number}"
        super().__init__(f"{msg} [{self.internal_code}]")
        self.is_recoverable = is_recoverable


class InvalidArgumentError(VFSError):
    """Malformed path, volume or URI."""

    def __init__(self, msg: str, code_number: int = None):
        super().__init__(msg, "ARG", code_number)


class BackendError(VFSError):
    """Any failure reported by a storage backend."""

    def __init__(self, msg: str, code_number: int = None, is_recoverable: bool = False):
        super().__init__(msg, "BACKEND", code_number, is_recoverable)


class ObjectNotFoundError(BackendError):
    """The object does not exist on the backend."""

    def __init__(self, msg: str, code_number: int = 1404):
        super().__init__(msg, code_number)


class PartialMoveError(VFSError):
    """The copy half of a move succeeded but the source could not be deleted.

        Both the source and the destination exist afterwards.
    """

    def __init__(self, source: BaseFile, destination: BaseFile):
        super().__init__(
            f"Copied [{source}] to [{destination}] but could not delete the source",
            "MOVE",
            1000,
            is_recoverable=True
        )
        self.source = source
        self.destination = destination


def wrap_local_errors(cb):
    """Converts typical local file-system errors into VFSErrors with recoverable set properly."""

    @functools.wraps(cb)
    def _inner(*args, **kwargs):
        try:
            return cb(*args, **kwargs)
        except VFSError:
            raise
        except FileNotFoundError as ex:
            raise ObjectNotFoundError(f"Local file not found: {ex.filename}") from ex
        except PermissionError as ex:
            raise BackendError(f"Access to local file denied: {ex.filename}", 1003, True) from ex
        except IsADirectoryError as ex:
            raise BackendError(f"Local file is a directory: {ex.filename}", 1004) from ex
        except NotADirectoryError as ex:
            raise BackendError(f"Local directory is not a directory: {ex.filename}", 1005) from ex
        except OSError as ex:
            raise BackendError(f"Exception processing local file: {ex.__class__.__name__}: {str(ex)}", 1000) from ex

    return _inner
