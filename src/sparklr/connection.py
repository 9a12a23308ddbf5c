"""A session with the Sparklr API.

The connection owns the transport and the identity caches for posts and
users. Caches start empty and are cleared when the connection closes, so
two connections never share entities.
"""

import logging

from .cache import EntityCache
from .client import DEFAULT_TIMEOUT, SparklrResponse, WebClient
from .config import SparklrConfig
from .exceptions import NoDataFoundError
from .models import Comment, Notification, Post, User
from .parser import (
    build_user,
    instantiate_comment,
    instantiate_notification,
    instantiate_post,
)

logger = logging.getLogger(__name__)


class Connection:
    def __init__(self, web_client: WebClient):
        self.web_client = web_client
        self.posts: EntityCache[int, Post] = EntityCache("post")
        self.users: EntityCache[int, User] = EntityCache("user")

    @classmethod
    def from_config(cls, config: SparklrConfig) -> "Connection":
        return cls(
            WebClient(
                base_url=config.base_url,
                session_token=config.session,
                timeout=config.timeout or DEFAULT_TIMEOUT,
            )
        )

    async def _get_data(self, path: str) -> SparklrResponse:
        result = await self.web_client.get_json_response(path)
        if not result.ok:
            raise NoDataFoundError(path, result.code)
        return result

    async def _get_entity_dto(self, path: str, id_field: str, expected_id: int) -> dict:
        """Fetch a single-entity payload and check it is the one requested."""
        result = await self._get_data(path)
        payload = result.payload or {}
        if payload.get(id_field) is None or int(payload[id_field]) != expected_id:
            raise NoDataFoundError(
                path,
                result.code,
                reason=f"payload has {id_field}={payload.get(id_field)!r}",
            )
        return payload

    async def get_post_by_id(self, post_id: int) -> Post:
        """Fetch a post, or return the cached one if it is already known."""

        async def fetch() -> Post:
            dto = await self._get_entity_dto(f"post/{post_id}", "id", post_id)
            return await instantiate_post(dto, self)

        return await self.posts.get_or_create(post_id, fetch)

    async def get_user_by_id(self, user_id: int) -> User:
        """Fetch a user, or return the cached one if it is already known."""

        async def fetch() -> User:
            dto = await self._get_entity_dto(f"user/{user_id}", "user", user_id)
            return build_user(dto)

        return await self.users.get_or_create(user_id, fetch)

    async def get_comments_for_post(self, post_id: int) -> list[Comment]:
        """Fetch the comments of a post in the order the server sent them."""
        result = await self._get_data(f"comments/{post_id}")
        comments = []
        for dto in result.payload or []:
            comments.append(await instantiate_comment(dto, self))
        logger.debug("Fetched %d comments for post %d", len(comments), post_id)
        return comments

    async def get_notifications(self) -> list[Notification]:
        """Fetch all notifications for the session user.

        Either every notification is built or the call fails; there is no
        partial result.
        """
        result = await self._get_data("notifications")
        notifications = []
        for dto in result.payload or []:
            notifications.append(await instantiate_notification(dto, self))
        logger.info("Fetched %d notifications", len(notifications))
        return notifications

    async def send_post_without_image(
        self, message: str, network: str | None = None
    ) -> bool:
        """Submit a text post. Returns True if the server accepted it."""
        body: dict = {"message": message}
        if network:
            body["network"] = network
        result = await self.web_client.post_json_response("post", body)
        if result.ok:
            logger.info("Submitted post (%d chars)", len(message))
        return result.ok

    def clear_caches(self) -> None:
        self.posts.clear()
        self.users.clear()

    async def close(self) -> None:
        self.clear_caches()
        await self.web_client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()
