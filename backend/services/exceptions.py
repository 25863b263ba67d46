"""Exceptions raised by the link/sync workflow and user services.

Gateway failures live in :mod:`integrations.exceptions`; these cover
the workflow's own outcomes. Every class names the recovery path the
UI should offer via ``recovery``.
"""

from integrations.exceptions import RecoveryAction


class WorkflowError(Exception):
    """Base exception for link/sync workflow failures."""

    recovery = RecoveryAction.NONE

    def __init__(self, message: str, user_id: str | None = None):
        self.user_id = user_id
        super().__init__(message)


class UserNotFoundError(WorkflowError):
    """No user exists with the given id."""

    pass


class NoCredentialError(WorkflowError):
    """The user has never linked a bank (or the link was cleared)."""

    recovery = RecoveryAction.RELINK


class SyncInProgressError(WorkflowError):
    """Another link or sync is already running for this user."""

    recovery = RecoveryAction.RETRY_SYNC


class OwnershipConflictError(WorkflowError):
    """An external account id is already owned by a different user."""

    def __init__(self, message: str, user_id: str | None = None, external_id: str = ""):
        self.external_id = external_id
        super().__init__(message, user_id)


class PersistenceError(WorkflowError):
    """A store write failed.

    ``during_link`` is True when the failure happened while saving a freshly
    exchanged credential; the public token is spent by then, so the whole
    link must be redone. Otherwise only the sync needs retrying.
    """

    def __init__(self, message: str, user_id: str | None = None, during_link: bool = False):
        self.during_link = during_link
        super().__init__(message, user_id)

    @property
    def recovery(self) -> RecoveryAction:
        return RecoveryAction.RELINK if self.during_link else RecoveryAction.RETRY_SYNC


class SyncError(WorkflowError):
    """Balances could not be synced after a successful link.

    The credential is already saved; a later refresh can finish the job.
    """

    recovery = RecoveryAction.RETRY_SYNC


class DuplicateEmailError(WorkflowError):
    """Sign-up with an email that is already registered."""

    pass


class InvalidCredentialsError(WorkflowError):
    """Unknown email or wrong password."""

    pass
