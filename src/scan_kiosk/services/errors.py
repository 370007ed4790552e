"""Exceptions shared by the ledger and metrics backends."""


class StorageError(RuntimeError):
    """Raised when the backing store cannot complete an operation.

    Wraps database driver errors, filesystem errors and unreadable state
    documents. Nothing is retried; the request that hit it fails.
    """
