"""Payload builders shared by the tests."""

BASE_URL = "https://sparklr.test/api/"


def api_url(path: str) -> str:
    return BASE_URL + path


def user_payload(user_id: int, handle: str = "", **extra) -> dict:
    payload = {
        "user": user_id,
        "handle": handle or f"user{user_id}",
        "name": extra.pop("name", f"User {user_id}"),
        "avatarid": "1400000000",
        "bio": "",
        "following": False,
    }
    payload.update(extra)
    return payload


def post_payload(post_id: int, author_id: int = 1, **extra) -> dict:
    payload = {
        "id": post_id,
        "from": author_id,
        "network": "everyone",
        "type": 0,
        "meta": "",
        "time": 1400000000,
        "public": 1,
        "message": f"Post number {post_id}",
    }
    payload.update(extra)
    return payload


def comment_payload(comment_id: int, post_id: int, author_id: int, time: int) -> dict:
    return {
        "id": comment_id,
        "postid": post_id,
        "from": author_id,
        "message": f"Comment {comment_id}",
        "time": time,
    }


def notification_payload(
    notification_id: int, from_id: int, to_id: int, type_: int = 2
) -> dict:
    return {
        "id": notification_id,
        "from": from_id,
        "to": to_id,
        "type": type_,
        "time": 1400000100 + notification_id,
        "body": f"Notification {notification_id}",
        "action": f"/post/{notification_id}",
    }
