"""
Review errors — typed failures surfaced by the pending change store.
"""

from __future__ import annotations


class ReviewError(Exception):
    """Base class for every failure raised by the review engine."""


class NoSuchPendingChange(ReviewError, KeyError):
    """No diff is registered for the requested path."""

    def __init__(self, path: str) -> None:
        super().__init__(path)
        self.path = path

    def __str__(self) -> str:
        return f"No pending change for {self.path}"


class HunkIndexOutOfRange(ReviewError, IndexError):
    """A hunk or conflict index does not exist for the path."""

    def __init__(self, path: str, index: int, size: int, what: str = "hunk") -> None:
        super().__init__(path, index)
        self.path = path
        self.index = index
        self.size = size
        self.what = what

    def __str__(self) -> str:
        return (
            f"{self.what.capitalize()} index {self.index} out of range for "
            f"{self.path} ({self.size} {self.what}(s))"
        )


class ConflictUnresolvedError(ReviewError):
    """Acceptance attempted while conflicts remain. Resolve and retry."""

    def __init__(self, path: str, count: int) -> None:
        super().__init__(path, count)
        self.path = path
        self.count = count

    def __str__(self) -> str:
        return f"{self.count} unresolved conflict(s) in {self.path}"


class WriteFailure(ReviewError):
    """The file-write collaborator failed; the diff was left untouched."""

    def __init__(self, path: str, cause: BaseException) -> None:
        super().__init__(path, cause)
        self.path = path
        self.cause = cause

    def __str__(self) -> str:
        return f"Write failed for {self.path}: {self.cause}"


class ChangeAlreadyFinalized(ReviewError):
    """The diff was already accepted or rejected as a whole."""

    def __init__(self, path: str, status: str) -> None:
        super().__init__(path, status)
        self.path = path
        self.status = status

    def __str__(self) -> str:
        return f"Change for {self.path} is already {self.status}"


class InvalidResolution(ReviewError, ValueError):
    """Unknown conflict resolution name."""
