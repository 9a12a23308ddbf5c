"""Domain entities returned by the SDK.

Posts and Users are identity objects: a Connection keeps one canonical
instance per id, so equality and hashing are by identity. Build them with
the factories in :mod:`sparklr.parser` rather than calling the
constructors directly.
"""

from __future__ import annotations

import asyncio
import enum
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from .exceptions import ValidationError

if TYPE_CHECKING:
    from .connection import Connection

T = TypeVar("T")

MAX_MESSAGE_LENGTH = 500


class ActionResult(enum.Enum):
    SUCCESS = "success"
    FAILED = "failed"
    UNSUPPORTED = "unsupported"


class NotificationType(enum.IntEnum):
    UNKNOWN = 0
    LIKE = 1
    COMMENT = 2
    MENTION = 3
    FOLLOW = 4
    REPOST = 5

    @classmethod
    def _missing_(cls, value):
        return cls.UNKNOWN


class Memo(Generic[T]):
    """A lazily loaded value that is either unresolved or resolved.

    ``get`` runs the loader on the first call only; concurrent first calls
    wait for the same load. A failed load leaves the memo unresolved.
    """

    def __init__(self) -> None:
        self._resolved = False
        self._value: T | None = None
        self._lock: asyncio.Lock | None = None

    @property
    def resolved(self) -> bool:
        return self._resolved

    @property
    def value(self) -> T:
        if not self._resolved:
            raise LookupError("Value has not been loaded yet")
        return self._value

    async def get(self, loader: Callable[[], Awaitable[T]]) -> T:
        if self._resolved:
            return self._value
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            if not self._resolved:
                self._value = await loader()
                self._resolved = True
        return self._value

    def __repr__(self) -> str:
        if self._resolved:
            return f"Memo(resolved={self._value!r})"
        return "Memo(unresolved)"


@dataclass(eq=False)
class User:
    id: int
    handle: str
    name: str = ""
    avatar_id: str | None = None
    bio: str = ""
    following: bool = False

    @classmethod
    async def get_by_id(cls, user_id: int, connection: Connection) -> User:
        return await connection.get_user_by_id(user_id)


@dataclass(eq=False)
class Comment:
    id: int
    post_id: int
    author: User
    content: str
    timestamp: int

    def __lt__(self, other: Comment) -> bool:
        # Oldest first; the id breaks timestamp ties
        return (self.timestamp, self.id) < (other.timestamp, other.id)


@dataclass(eq=False)
class Post:
    id: int
    author: User
    network: str
    type: int
    meta: str
    timestamp: int
    is_public: bool
    content: str
    original_post_id: int | None = None
    via_user: User | None = None
    comment_count: int = 0
    modified_timestamp: int = -1  # -1: never modified
    comments: Memo[tuple[Comment, ...]] = field(
        default_factory=Memo, init=False, repr=False
    )
    original_post: Memo[Post] = field(
        default_factory=Memo, init=False, repr=False
    )

    @property
    def has_original_post(self) -> bool:
        return self.original_post_id is not None

    @classmethod
    async def get_by_id(cls, post_id: int, connection: Connection) -> Post:
        """Return the post with the given id, fetching it on a cache miss."""
        cached = connection.posts.lookup(post_id)
        if cached is not None:
            return cached
        return await connection.get_post_by_id(post_id)

    async def get_comments(self, connection: Connection) -> tuple[Comment, ...]:
        """Return this post's comments, oldest first.

        The first call fetches them; later calls return the same tuple
        without touching the network, even if the server has new comments.
        """

        async def load() -> tuple[Comment, ...]:
            comments = await connection.get_comments_for_post(self.id)
            return tuple(sorted(comments))

        return await self.comments.get(load)

    async def get_original_post(self, connection: Connection) -> Post | None:
        """Return the post this one reposts, or None if it is not a repost."""
        if not self.has_original_post:
            return None
        return await self.original_post.get(
            lambda: Post.get_by_id(self.original_post_id, connection)
        )

    @staticmethod
    async def submit(
        message: str, connection: Connection, network: str | None = None
    ) -> bool:
        """Submit a new text post, optionally to a specific network.

        Raises:
            ValidationError: If the message is longer than 500 characters.
                Nothing is sent in that case.
        """
        if len(message) > MAX_MESSAGE_LENGTH:
            raise ValidationError(
                f"The message exceeds {MAX_MESSAGE_LENGTH} characters",
                length=len(message),
            )
        return await connection.send_post_without_image(message, network)

    def toggle_like(self) -> ActionResult:
        return ActionResult.UNSUPPORTED

    def comment(self, text: str) -> ActionResult:
        return ActionResult.UNSUPPORTED

    def compare_to(self, other: Post) -> int:
        """Negative if self sorts first (is newer), 0 on equal timestamps."""
        if self.timestamp > other.timestamp:
            return -1
        if self.timestamp < other.timestamp:
            return 1
        return 0

    def __lt__(self, other: Post) -> bool:
        # Newest first
        return self.timestamp > other.timestamp


@dataclass(eq=False)
class Notification:
    id: int
    from_user: User
    to_user: User
    type: NotificationType
    time: int
    body: str
    action: str

    @classmethod
    async def get_all(cls, connection: Connection) -> list[Notification]:
        return await connection.get_notifications()
