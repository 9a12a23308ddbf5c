"""Tests for the connection's per-resource fetch operations."""

import asyncio

import httpx
import pytest
import respx
from helpers import api_url, notification_payload, post_payload, user_payload

from sparklr.client import WebClient
from sparklr.config import SparklrConfig
from sparklr.connection import Connection
from sparklr.exceptions import NoDataFoundError
from sparklr.models import Notification, Post, User


def mock_users(*user_ids: int) -> None:
    for user_id in user_ids:
        respx.get(api_url(f"user/{user_id}")).mock(
            return_value=httpx.Response(200, json=user_payload(user_id))
        )


class TestNotifications:
    @pytest.mark.asyncio
    @respx.mock
    async def test_maps_every_notification_in_order(self, connection):
        mock_users(1, 2, 3)
        respx.get(api_url("notifications")).mock(
            return_value=httpx.Response(
                200,
                json=[
                    notification_payload(5, 1, 2),
                    notification_payload(3, 3, 2),
                    notification_payload(9, 1, 3),
                ],
            )
        )

        notifications = await Notification.get_all(connection)

        assert [n.id for n in notifications] == [5, 3, 9]
        assert notifications[0].from_user is notifications[2].from_user
        assert notifications[0].to_user is notifications[1].to_user

    @pytest.mark.asyncio
    @respx.mock
    async def test_users_resolved_in_document_order(self, connection):
        mock_users(1, 2, 3)
        respx.get(api_url("notifications")).mock(
            return_value=httpx.Response(
                200,
                json=[notification_payload(1, 2, 1), notification_payload(2, 3, 1)],
            )
        )

        await connection.get_notifications()

        paths = [call.request.url.path for call in respx.calls]
        assert paths == [
            "/api/notifications",
            "/api/user/2",
            "/api/user/1",
            "/api/user/3",
        ]

    @pytest.mark.asyncio
    @respx.mock
    async def test_404_raises_no_data_found(self, connection):
        respx.get(api_url("notifications")).mock(return_value=httpx.Response(404))

        with pytest.raises(NoDataFoundError) as exc_info:
            await connection.get_notifications()

        assert exc_info.value.status_code == 404
        assert exc_info.value.path == "notifications"
        assert len(connection.users) == 0

    @pytest.mark.asyncio
    @respx.mock
    async def test_failed_user_fails_whole_fetch(self, connection):
        mock_users(1)
        respx.get(api_url("user/2")).mock(return_value=httpx.Response(500))
        respx.get(api_url("notifications")).mock(
            return_value=httpx.Response(
                200,
                json=[notification_payload(1, 1, 1), notification_payload(2, 2, 1)],
            )
        )

        with pytest.raises(NoDataFoundError):
            await connection.get_notifications()

    @pytest.mark.asyncio
    @respx.mock
    async def test_empty_list(self, connection):
        respx.get(api_url("notifications")).mock(
            return_value=httpx.Response(200, json=[])
        )
        assert await connection.get_notifications() == []

    @pytest.mark.asyncio
    @respx.mock
    async def test_notifications_are_not_cached(self, connection):
        mock_users(1, 2)
        route = respx.get(api_url("notifications")).mock(
            return_value=httpx.Response(200, json=[notification_payload(7, 1, 2)])
        )

        (first,) = await connection.get_notifications()
        (second,) = await connection.get_notifications()

        assert route.call_count == 2
        assert first is not second
        assert first.id == second.id == 7
        assert first.from_user is second.from_user


class TestPosts:
    @pytest.mark.asyncio
    @respx.mock
    async def test_get_by_id_fetches_then_caches(self, connection):
        mock_users(1)
        route = respx.get(api_url("post/3")).mock(
            return_value=httpx.Response(200, json=post_payload(3))
        )

        first = await Post.get_by_id(3, connection)
        second = await Post.get_by_id(3, connection)

        assert first is second
        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_get_by_id_missing_post(self, connection):
        respx.get(api_url("post/404")).mock(return_value=httpx.Response(404))

        with pytest.raises(NoDataFoundError):
            await Post.get_by_id(404, connection)
        assert connection.posts.lookup(404) is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_concurrent_get_by_id_fetches_once(self, connection):
        mock_users(1)
        route = respx.get(api_url("post/8")).mock(
            return_value=httpx.Response(200, json=post_payload(8))
        )

        results = await asyncio.gather(*(Post.get_by_id(8, connection) for _ in range(3)))

        assert route.call_count == 1
        assert all(p is results[0] for p in results)

    @pytest.mark.asyncio
    @respx.mock
    async def test_user_get_by_id(self, connection):
        mock_users(6)
        user = await User.get_by_id(6, connection)
        assert user is connection.users.lookup(6)
        assert user.handle == "user6"

    @pytest.mark.asyncio
    @respx.mock
    async def test_post_payload_for_other_id_is_rejected(self, connection):
        mock_users(1)
        respx.get(api_url("post/5")).mock(
            return_value=httpx.Response(200, json=post_payload(7))
        )
        respx.get(api_url("post/7")).mock(
            return_value=httpx.Response(200, json=post_payload(7))
        )

        with pytest.raises(NoDataFoundError) as exc_info:
            await Post.get_by_id(5, connection)

        assert exc_info.value.path == "post/5"
        assert connection.posts.lookup(5) is None
        assert connection.posts.lookup(7) is None

        post = await Post.get_by_id(7, connection)
        assert post.id == 7
        assert connection.posts.lookup(7) is post
        assert len(connection.posts) == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_user_payload_for_other_id_is_rejected(self, connection):
        respx.get(api_url("user/2")).mock(
            return_value=httpx.Response(200, json=user_payload(3))
        )

        with pytest.raises(NoDataFoundError):
            await User.get_by_id(2, connection)

        assert len(connection.users) == 0


class TestLifecycle:
    @pytest.mark.asyncio
    @respx.mock
    async def test_connections_do_not_share_caches(self):
        mock_users(1)
        async with Connection(WebClient(base_url=api_url(""))) as a:
            async with Connection(WebClient(base_url=api_url(""))) as b:
                ua = await User.get_by_id(1, a)
                ub = await User.get_by_id(1, b)
                assert ua is not ub

    @pytest.mark.asyncio
    @respx.mock
    async def test_close_clears_caches(self):
        mock_users(1)
        conn = Connection(WebClient(base_url=api_url("")))
        await User.get_by_id(1, conn)
        assert len(conn.users) == 1

        await conn.close()

        assert len(conn.users) == 0
        assert len(conn.posts) == 0

    @pytest.mark.asyncio
    @respx.mock
    async def test_clear_caches_forces_refetch(self, connection):
        route = respx.get(api_url("user/1")).mock(
            return_value=httpx.Response(200, json=user_payload(1))
        )

        first = await User.get_by_id(1, connection)
        connection.clear_caches()
        second = await User.get_by_id(1, connection)

        assert first is not second
        assert route.call_count == 2

    def test_from_config(self):
        config = SparklrConfig(
            session="1,token", base_url="https://example.test/api", timeout=5.0
        )
        conn = Connection.from_config(config)
        assert conn.web_client.base_url == "https://example.test/api/"

    @pytest.mark.asyncio
    @respx.mock
    async def test_clear_during_fetch_leaves_cache_empty(self, connection):
        requested = asyncio.Event()
        release = asyncio.Event()

        async def stalled(request):
            requested.set()
            await release.wait()
            return httpx.Response(200, json=user_payload(1))

        respx.get(api_url("user/1")).mock(side_effect=stalled)

        task = asyncio.create_task(connection.get_user_by_id(1))
        await requested.wait()
        connection.clear_caches()
        release.set()
        user = await task

        assert user.id == 1
        assert len(connection.users) == 0
        assert connection.users.pending == 0
