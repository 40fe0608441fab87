"""Exception classes raised by the namespace checker."""

from typing import Optional


class FsckError(Exception):
    """
    Base exception class for all checker errors.
    """
    pass


class PathNotFoundError(FsckError):
    """
    Raised when a path does not resolve on the namespace service.
    """

    def __init__(self, path: str, message: Optional[str] = None):
        super().__init__(message or f"Path '{path}' does not exist")
        self.path = path


class MalformedBlockError(FsckError):
    """
    Raised when a block record violates metadata invariants (e.g., negative length).

    This is a metadata-integrity fault, not a health condition.
    """

    def __init__(self, path: str, block_id: str, length: int):
        super().__init__(
            f"Malformed block {block_id} in '{path}': declared length {length} is negative"
        )
        self.path = path
        self.block_id = block_id
        self.length = length


class MetadataUnavailableError(FsckError):
    """
    Raised when the namespace service is unreachable or times out.
    """
    pass


class QuarantineError(FsckError):
    """
    Raised when a corrupt file cannot be moved into the quarantine directory.
    """
    pass


class InvalidArgumentError(FsckError, ValueError):
    """
    Raised on caller misuse (negative counts, unsupported option combinations).
    """
    pass


class ConvergenceTimeoutError(FsckError):
    """
    Raised when a polled condition does not hold within the allowed attempts.
    """
    pass
