"""Turn raw API payloads into cached domain entities.

Every entity that references a user only carries the user id, so building
a Post, Comment or Notification may fetch users. Those nested lookups run
one after another in payload order, and a failure aborts the whole build
without caching anything for the outer entity.
"""

import logging
from typing import TYPE_CHECKING

from .models import Comment, Notification, NotificationType, Post, User

if TYPE_CHECKING:
    from .connection import Connection

logger = logging.getLogger(__name__)


def build_user(dto: dict) -> User:
    """Build an uncached User from a ``user/{id}`` payload."""
    return User(
        id=int(dto["user"]),
        handle=dto.get("handle", ""),
        name=dto.get("name") or dto.get("handle", ""),
        avatar_id=dto.get("avatarid"),
        bio=dto.get("bio") or "",
        following=bool(dto.get("following", False)),
    )


async def instantiate_user(user_id: int, connection: "Connection") -> User:
    """Return the canonical User for an id, fetching it on a miss."""
    return await connection.get_user_by_id(user_id)


async def build_post(dto: dict, connection: "Connection") -> Post:
    """Build an uncached Post, resolving its users first."""
    post_id = int(dto["id"])

    via = dto.get("via")
    via_user = None
    if via is not None:
        via_user = await instantiate_user(int(via), connection)
    author = await instantiate_user(int(dto["from"]), connection)

    origid = dto.get("origid")
    commentcount = dto.get("commentcount")
    modified = dto.get("modified")

    logger.debug("Built post %d by user %d", post_id, author.id)
    return Post(
        id=post_id,
        author=author,
        network=dto.get("network") or "",
        type=int(dto.get("type") or 0),
        meta=dto.get("meta") or "",
        timestamp=int(dto.get("time") or 0),
        is_public=dto.get("public") == 1,
        content=dto.get("message") or "",
        original_post_id=int(origid) if origid is not None else None,
        via_user=via_user,
        comment_count=int(commentcount) if commentcount is not None else 0,
        modified_timestamp=int(modified) if modified is not None else -1,
    )


async def instantiate_post(dto: dict, connection: "Connection") -> Post:
    """Return the canonical Post for a ``post/{id}`` payload.

    A cached post is returned as-is without resolving the payload's users.
    """
    return await connection.posts.get_or_create(
        int(dto["id"]), lambda: build_post(dto, connection)
    )


async def instantiate_comment(dto: dict, connection: "Connection") -> Comment:
    author = await instantiate_user(int(dto["from"]), connection)
    return Comment(
        id=int(dto["id"]),
        post_id=int(dto["postid"]),
        author=author,
        content=dto.get("message") or "",
        timestamp=int(dto.get("time") or 0),
    )


async def instantiate_notification(
    dto: dict, connection: "Connection"
) -> Notification:
    """Build a fresh Notification. Notifications are never cached."""
    from_user = await instantiate_user(int(dto["from"]), connection)
    to_user = await instantiate_user(int(dto["to"]), connection)
    return Notification(
        id=int(dto["id"]),
        from_user=from_user,
        to_user=to_user,
        type=NotificationType(int(dto.get("type") or 0)),
        time=int(dto.get("time") or 0),
        body=dto.get("body") or "",
        action=dto.get("action") or "",
    )
