"""Command line client for a Quillpost server.

Typical usage:
  quillpost login alice@example.com secret1
  quillpost list --search python
  quillpost show 12
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from quillpost.client.api import DEFAULT_BASE_URL, ApiClientError, BlogApiClient
from quillpost.client.session import SessionStore

Handler = Callable[[BlogApiClient, argparse.Namespace], Awaitable[None]]


def say(msg: str) -> None:
    print(msg)


def fail(msg: str) -> None:
    print(f"[quillpost][FAIL] {msg}", file=sys.stderr)


def _format_post_line(post: dict[str, Any]) -> str:
    author = post.get("author", {}).get("name", "?")
    return (
        f"#{post['id']:<5} {post['title']}  by {author}"
        f"  [{post['likes_count']} likes, {post['comments_count']} comments]"
    )


async def cmd_register(api: BlogApiClient, args: argparse.Namespace) -> None:
    user = await api.register(args.name, args.email, args.password)
    say(f"Registered and signed in as {user['name']} <{user['email']}>")


async def cmd_login(api: BlogApiClient, args: argparse.Namespace) -> None:
    user = await api.login(args.email, args.password)
    say(f"Signed in as {user['name']} <{user['email']}>")


async def cmd_logout(api: BlogApiClient, args: argparse.Namespace) -> None:
    api.logout()
    say("Signed out")


async def cmd_whoami(api: BlogApiClient, args: argparse.Namespace) -> None:
    if not api.session.is_authenticated:
        say("Not signed in")
        return
    user = await api.me()
    say(f"{user['name']} <{user['email']}> (id {user['id']})")
    if user.get("bio"):
        say(user["bio"])


async def cmd_list(api: BlogApiClient, args: argparse.Namespace) -> None:
    if args.mine:
        result = await api.my_posts(status=args.status, page=args.page, limit=args.limit)
    else:
        result = await api.list_posts(
            page=args.page,
            limit=args.limit,
            search=args.search,
            sort_by=args.sort_by,
            order=args.order,
        )
    for post in result["items"]:
        say(_format_post_line(post))
    pagination = result["pagination"]
    say(f"page {pagination['page']}/{max(pagination['pages'], 1)} ({pagination['total']} total)")


async def cmd_show(api: BlogApiClient, args: argparse.Namespace) -> None:
    post = await api.get_post(args.post_id)
    say(post["title"])
    say(f"by {post['author']['name']} | status {post['status']} | cover {post['cover_image']}")
    say("")
    say(post["content"])
    say("")
    liked = " (you like this)" if post.get("is_liked") else ""
    say(f"{post['likes_count']} likes{liked}, {post['comments_count']} comments")
    for comment in post.get("comments", []):
        say(f"  - {comment['author']['name']}: {comment['content']}")


async def cmd_like(api: BlogApiClient, args: argparse.Namespace) -> None:
    state = await api.toggle_like(args.post_id)
    verb = "Liked" if state["is_liked"] else "Unliked"
    say(f"{verb} post {args.post_id} ({state['likes_count']} likes)")


async def cmd_comment(api: BlogApiClient, args: argparse.Namespace) -> None:
    comment = await api.add_comment(args.post_id, args.content)
    say(f"Added comment #{comment['id']} to post {args.post_id}")


async def cmd_analytics(api: BlogApiClient, args: argparse.Namespace) -> None:
    totals = await api.analytics(args.user_id)
    say(f"posts    {totals['total_blogs']}")
    say(f"likes    {totals['total_likes']}")
    say(f"comments {totals['total_comments']}")
    say(f"views    {totals['total_views']}")
    if args.user_id is None:
        counts = await api.status_counts()
        say(f"published {counts['published']}, drafts {counts['draft']}")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="quillpost", description="Quillpost command line client")
    p.add_argument(
        "--base-url",
        default=os.environ.get("QUILLPOST_API_URL", DEFAULT_BASE_URL),
        help="API root, e.g. http://localhost:5000/api",
    )
    p.add_argument("--session-file", default=None, help="Where to keep the login token")
    sub = p.add_subparsers(dest="command", required=True)

    register = sub.add_parser("register", help="Create an account")
    register.add_argument("name")
    register.add_argument("email")
    register.add_argument("password")
    register.set_defaults(handler=cmd_register)

    login = sub.add_parser("login", help="Sign in")
    login.add_argument("email")
    login.add_argument("password")
    login.set_defaults(handler=cmd_login)

    sub.add_parser("logout", help="Forget the stored token").set_defaults(handler=cmd_logout)
    sub.add_parser("whoami", help="Show the signed-in user").set_defaults(handler=cmd_whoami)

    listing = sub.add_parser("list", help="List posts")
    listing.add_argument("--page", type=int, default=1)
    listing.add_argument("--limit", type=int, default=10)
    listing.add_argument("--search")
    listing.add_argument("--sort-by", default="createdAt")
    listing.add_argument("--order", choices=("asc", "desc"), default="desc")
    listing.add_argument("--mine", action="store_true", help="List your own posts, drafts included")
    listing.add_argument("--status", choices=("published", "draft"))
    listing.set_defaults(handler=cmd_list)

    show = sub.add_parser("show", help="Show one post with its comments")
    show.add_argument("post_id", type=int)
    show.set_defaults(handler=cmd_show)

    like = sub.add_parser("like", help="Like or unlike a post")
    like.add_argument("post_id", type=int)
    like.set_defaults(handler=cmd_like)

    comment = sub.add_parser("comment", help="Comment on a post")
    comment.add_argument("post_id", type=int)
    comment.add_argument("content")
    comment.set_defaults(handler=cmd_comment)

    analytics = sub.add_parser("analytics", help="Show engagement totals")
    analytics.add_argument("--user-id", type=int, default=None)
    analytics.set_defaults(handler=cmd_analytics)
    return p


async def _run(
    args: argparse.Namespace,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    store = SessionStore(args.session_file)
    handler: Handler = args.handler
    async with BlogApiClient(args.base_url, store=store, transport=transport) as api:
        try:
            await handler(api, args)
        except ApiClientError as exc:
            fail(exc.message)
            return 1
    return 0


def main(
    argv: list[str] | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    args = build_parser().parse_args(argv)
    return asyncio.run(_run(args, transport))


if __name__ == "__main__":
    sys.exit(main())
