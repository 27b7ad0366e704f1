"""Exception types shared across Task Watch.

Each collaborator raises exactly one of these so the check cycle can decide
whether to abort, skip or carry on:

- AuthError: no usable Google credential. Fatal to the process.
- FetchError: the task list could not be read. The cycle is skipped.
- DeliveryError: one message was not delivered. Siblings still go out.
- StorageError: the notification state could not be read or written.
"""


class TaskWatchError(Exception):
    """Base class for Task Watch errors."""


class AuthError(TaskWatchError):
    pass


class FetchError(TaskWatchError):
    pass


class DeliveryError(TaskWatchError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class StorageError(TaskWatchError):
    pass
