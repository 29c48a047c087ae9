"""Exceptions raised by the activity and notification stores."""


class StoreError(Exception):
    """Base error for failures talking to the backing store."""


class StoreWriteError(StoreError):
    """An insert or update could not be persisted."""


class StoreReadError(StoreError):
    """Records could not be read from the store."""


class SubscriptionError(StoreError):
    """The realtime subscription could not be established or broke."""


class NotificationNotFoundError(StoreError):
    """The requested notification does not exist."""


class NotificationPermissionError(StoreError):
    """The caller is not the recipient of the notification."""


class InvalidActivityMetadataError(ValueError):
    """Metadata does not match the shape required by its activity type."""


__all__ = [
    "StoreError",
    "StoreWriteError",
    "StoreReadError",
    "SubscriptionError",
    "NotificationNotFoundError",
    "NotificationPermissionError",
    "InvalidActivityMetadataError",
]
