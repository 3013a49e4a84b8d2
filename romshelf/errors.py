"""Errors raised while importing DAT catalogs."""

from __future__ import annotations

from typing import Optional


class DatImportError(Exception):
    """Base class for every failure that aborts a catalog import."""

    path: Optional[str] = None

    def __str__(self) -> str:
        message = super().__str__()
        if self.path:
            return f"{self.path}: {message}"
        return message


class MalformedMarkup(DatImportError):
    def __init__(self, offset: int, reason: str = "malformed markup"):
        super().__init__(f"{reason} at offset {offset}")
        self.offset = offset
        self.reason = reason


class MissingTitle(DatImportError):
    def __init__(self, offset: int):
        super().__init__(f"game element without a name attribute at offset {offset}")
        self.offset = offset


class EmptyReleaseImages(DatImportError):
    def __init__(self, title: str, offset: int):
        super().__init__(f"game {title!r} at offset {offset} has no rom entries")
        self.title = title
        self.offset = offset


class UnknownConsole(DatImportError):
    def __init__(self, name: str):
        super().__init__(f"no console registered with name {name!r}")
        self.name = name


class StorageError(DatImportError):
    def __init__(self, cause: BaseException):
        super().__init__(f"database write failed: {cause}")
        self.cause = cause
