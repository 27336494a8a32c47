"""Exception hierarchy shared by the domain services and the adapters."""

from __future__ import annotations

from collections.abc import Sequence


class MBBotError(RuntimeError):
    """Base class for all errors raised while maintaining catalog entities."""


class NotFoundError(MBBotError):
    """Raised when an identifier has no corresponding entity."""


class TransientError(MBBotError):
    """Raised for network failures and server-side errors that may succeed later."""


class ScrapeError(MBBotError):
    """Raised when an entity payload cannot be extracted from an edit page."""


class LoginError(MBBotError):
    """Raised when the editor session cannot authenticate."""


class ReconciliationError(MBBotError):
    """Raised when a relationship change cannot be expressed as an edit."""


class NoChangeError(ReconciliationError):
    """Raised when the original and desired relationship are identical."""


class InvalidStateError(ReconciliationError):
    """Raised when a creation request references an existing relationship."""


class DirectionError(ReconciliationError):
    """Raised when a new relationship's endpoints violate the entity type ordering."""


class UnsupportedUpdateError(ReconciliationError):
    """Raised when a relationship differs only in fields the editor cannot change."""


class EditSubmissionError(MBBotError):
    """Raised when the server rejects or garbles an edit submission."""


class PartialBatchFailure(EditSubmissionError):
    """Raised when a relationship batch fails after some of its edits succeeded."""

    def __init__(
        self,
        *,
        index: int,
        edit_type: int,
        response: int,
        completed: Sequence[int] = (),
    ) -> None:
        super().__init__(
            f"relationship edit {index} with type {edit_type} failed: {response} "
            f"({len(completed)} earlier edit(s) succeeded)"
        )
        self.index = index
        self.edit_type = edit_type
        self.response = response
        self.completed = list(completed)
