"""Custom exception classes for the Controller."""

from fsck.exceptions import PathNotFoundError


class NamespaceException(Exception):
    """
    Base exception class for all namespace service errors.
    """
    pass


class InvalidPathError(NamespaceException):
    """
    Raised when a path is not absolute or contains relative segments.
    """
    pass


class EntryNotFoundError(NamespaceException, PathNotFoundError):
    """
    Raised when a requested file or directory does not exist.

    Also a PathNotFoundError, so the checker sees the in-process namespace
    and the remote client report missing entries the same way.
    """

    def __init__(self, path: str):
        PathNotFoundError.__init__(self, path, f"No such file or directory: {path}")


class EntryExistsError(NamespaceException):
    """
    Raised when creating an entry whose path is already taken.
    """
    pass


class EntryNotDirectoryError(NamespaceException):
    """
    Raised when a directory operation targets a file.
    """
    pass


class EntryIsDirectoryError(NamespaceException):
    """
    Raised when a file operation targets a directory.
    """
    pass


class UnknownBlockError(NamespaceException):
    """
    Raised when a block ID is not known to the namespace.
    """
    pass


class UnknownNodeError(NamespaceException):
    """
    Raised when a storage node ID is not registered.
    """
    pass
