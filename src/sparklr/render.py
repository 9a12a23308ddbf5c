"""Render posts, comments and notifications as plain text for the terminal."""

from datetime import datetime, timezone

from .models import Comment, Notification, Post, User


def format_timestamp(timestamp: int) -> str:
    """Format a unix timestamp (seconds) as ``YYYY-MM-DD HH:MM UTC``."""
    moment = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    return moment.strftime("%Y-%m-%d %H:%M UTC")


def _user_label(user: User) -> str:
    if user.name and user.name != user.handle:
        return f"@{user.handle} ({user.name})"
    return f"@{user.handle}"


def render_post(
    post: Post,
    comments: tuple[Comment, ...] | None = None,
    original: Post | None = None,
) -> str:
    lines: list[str] = []

    header = f"#{post.id} {_user_label(post.author)}"
    if post.network:
        header += f" in /{post.network}"
    lines.append(header)
    lines.append(format_timestamp(post.timestamp))
    if post.modified_timestamp != -1:
        lines.append(f"(edited {format_timestamp(post.modified_timestamp)})")
    lines.append("")

    for text_line in post.content.strip().split("\n"):
        lines.append(f"  {text_line}")
    lines.append("")

    if post.via_user is not None:
        lines.append(f"Reposted via {_user_label(post.via_user)}")
    if original is not None:
        lines.append(f"Original: #{original.id} by {_user_label(original.author)}")
        for text_line in original.content.strip().split("\n"):
            lines.append(f"  > {text_line}")

    lines.append(f"{post.comment_count} comment(s)")

    if comments:
        lines.append("")
        for comment in comments:
            lines.append(render_comment(comment))

    return "\n".join(lines)


def render_comment(comment: Comment) -> str:
    return (
        f"- {_user_label(comment.author)} "
        f"[{format_timestamp(comment.timestamp)}]: {comment.content}"
    )


def render_notification(notification: Notification) -> str:
    kind = notification.type.name.lower()
    line = (
        f"[{format_timestamp(notification.time)}] {kind} from "
        f"{_user_label(notification.from_user)}"
    )
    if notification.body:
        line += f": {notification.body}"
    return line
