"""Error taxonomy for the report catalog."""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for catalog failures."""


class InvalidFormat(CatalogError):
    """Raw report JSON is not one of the accepted shapes."""


class NotFound(CatalogError):
    """A report blob does not exist (or has already been hard-deleted)."""


class NotFoundInDeletedList(CatalogError):
    """Restore was requested for a report with no deletion record."""


class FilenameCollision(CatalogError):
    """A rename target is already occupied by another blob."""

    def __init__(self, source: str, target: str) -> None:
        super().__init__(f"Cannot rename {source} -> {target}: target already exists")
        self.source = source
        self.target = target


class IOFailure(CatalogError):
    """Reading or writing a blob failed."""
