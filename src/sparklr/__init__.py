"""Client SDK for the Sparklr social network."""

from .cache import EntityCache
from .client import SparklrResponse, WebClient
from .connection import Connection
from .exceptions import NoDataFoundError, SparklrError, ValidationError
from .models import (
    ActionResult,
    Comment,
    Memo,
    Notification,
    NotificationType,
    Post,
    User,
)

__all__ = [
    "ActionResult",
    "Comment",
    "Connection",
    "EntityCache",
    "Memo",
    "NoDataFoundError",
    "Notification",
    "NotificationType",
    "Post",
    "SparklrError",
    "SparklrResponse",
    "User",
    "ValidationError",
    "WebClient",
]
