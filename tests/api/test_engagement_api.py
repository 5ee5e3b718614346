"""Tests for like and comment endpoints."""

from fastapi import status
from fastapi.testclient import TestClient

from quillpost.core.settings import settings
from quillpost.models import Comment, Post


def test_like_toggles(client: TestClient, make_post, reader_headers) -> None:
    post = make_post()

    liked = client.post(f"/api/blogs/{post.id}/like", headers=reader_headers)
    assert liked.status_code == status.HTTP_200_OK
    assert liked.json()["message"] == "Blog liked successfully"
    assert liked.json()["data"] == {"is_liked": True, "likes_count": 1}

    unliked = client.post(f"/api/blogs/{post.id}/like", headers=reader_headers)
    assert unliked.json()["message"] == "Blog unliked successfully"
    assert unliked.json()["data"] == {"is_liked": False, "likes_count": 0}


def test_likes_from_two_users_are_counted(
    client: TestClient, make_post, author_headers, reader_headers
) -> None:
    post = make_post()
    client.post(f"/api/blogs/{post.id}/like", headers=author_headers)
    response = client.post(f"/api/blogs/{post.id}/like", headers=reader_headers)
    assert response.json()["data"]["likes_count"] == 2

    detail = client.get(f"/api/blogs/{post.id}", headers=reader_headers).json()["data"]
    assert detail["likes_count"] == 2
    assert detail["is_liked"] is True


def test_like_status_does_not_mutate(client: TestClient, make_post, reader_headers) -> None:
    post = make_post()
    before = client.get(f"/api/blogs/{post.id}/like-status", headers=reader_headers)
    assert before.json()["data"] == {"is_liked": False, "likes_count": 0}

    client.post(f"/api/blogs/{post.id}/like", headers=reader_headers)
    after = client.get(f"/api/blogs/{post.id}/like-status", headers=reader_headers)
    assert after.json()["data"] == {"is_liked": True, "likes_count": 1}
    again = client.get(f"/api/blogs/{post.id}/like-status", headers=reader_headers)
    assert again.json()["data"] == {"is_liked": True, "likes_count": 1}


def test_like_requires_auth(client: TestClient, make_post) -> None:
    post = make_post()
    response = client.post(f"/api/blogs/{post.id}/like")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_like_missing_post(client: TestClient, reader_headers) -> None:
    response = client.post("/api/blogs/9999/like", headers=reader_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_like_hidden_draft_is_not_found(client: TestClient, make_post, reader_headers) -> None:
    draft = make_post(status="draft", cover_image=settings.placeholder_cover_url)
    response = client.post(f"/api/blogs/{draft.id}/like", headers=reader_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_add_and_list_comments(
    client: TestClient, make_post, reader, reader_headers, author_headers
) -> None:
    post = make_post()
    first = client.post(
        f"/api/blogs/{post.id}/comments",
        json={"content": "  Lovely write-up  "},
        headers=reader_headers,
    )
    assert first.status_code == status.HTTP_201_CREATED
    comment = first.json()["data"]
    assert comment["content"] == "Lovely write-up"
    assert comment["author"] == {"id": reader.id, "name": reader.name, "avatar": None}

    second = client.post(
        f"/api/blogs/{post.id}/comments",
        json={"content": "Thanks for reading"},
        headers=author_headers,
    )
    assert second.status_code == status.HTTP_201_CREATED

    listing = client.get(f"/api/blogs/{post.id}/comments").json()["data"]
    assert [c["id"] for c in listing] == [second.json()["data"]["id"], comment["id"]]

    detail = client.get(f"/api/blogs/{post.id}").json()["data"]
    assert detail["comments_count"] == 2


def test_comment_content_is_validated(client: TestClient, make_post, reader_headers) -> None:
    post = make_post()
    blank = client.post(
        f"/api/blogs/{post.id}/comments",
        json={"content": "   "},
        headers=reader_headers,
    )
    assert blank.status_code == status.HTTP_400_BAD_REQUEST

    too_long = client.post(
        f"/api/blogs/{post.id}/comments",
        json={"content": "x" * 501},
        headers=reader_headers,
    )
    assert too_long.status_code == status.HTTP_400_BAD_REQUEST
    assert too_long.json()["message"].startswith("content:")


def test_comment_on_missing_post(client: TestClient, reader_headers) -> None:
    response = client.post(
        "/api/blogs/9999/comments",
        json={"content": "Hello?"},
        headers=reader_headers,
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["message"] == "Blog not found"


def test_comment_requires_auth(client: TestClient, make_post) -> None:
    post = make_post()
    response = client.post(f"/api/blogs/{post.id}/comments", json={"content": "Anonymous"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_update_own_comment(client: TestClient, make_post, reader_headers) -> None:
    post = make_post()
    created = client.post(
        f"/api/blogs/{post.id}/comments",
        json={"content": "Frist"},
        headers=reader_headers,
    ).json()["data"]

    response = client.put(
        f"/api/blogs/comments/{created['id']}",
        json={"content": "First"},
        headers=reader_headers,
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["content"] == "First"


def test_update_comment_forbidden_for_others(
    client: TestClient, db_session, make_post, reader_headers, author_headers
) -> None:
    post = make_post()
    created = client.post(
        f"/api/blogs/{post.id}/comments",
        json={"content": "Mine alone"},
        headers=reader_headers,
    ).json()["data"]

    response = client.put(
        f"/api/blogs/comments/{created['id']}",
        json={"content": "Edited by someone else"},
        headers=author_headers,
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["message"] == "Not authorized to update this comment"
    assert db_session.get(Comment, created["id"]).content == "Mine alone"


def test_delete_comment_restores_counter(
    client: TestClient, db_session, make_post, reader_headers
) -> None:
    post = make_post()
    created = client.post(
        f"/api/blogs/{post.id}/comments",
        json={"content": "Short-lived"},
        headers=reader_headers,
    ).json()["data"]
    assert client.get(f"/api/blogs/{post.id}").json()["data"]["comments_count"] == 1

    response = client.delete(f"/api/blogs/comments/{created['id']}", headers=reader_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"] is None

    detail = client.get(f"/api/blogs/{post.id}").json()["data"]
    assert detail["comments_count"] == 0
    assert detail["comments"] == []


def test_delete_comment_never_drives_counter_negative(
    client: TestClient, db_session, make_post, reader, reader_headers
) -> None:
    post = make_post(comments_count=0)
    orphan_count = Comment(content="Counted elsewhere", author_id=reader.id, post_id=post.id)
    db_session.add(orphan_count)
    db_session.commit()

    response = client.delete(f"/api/blogs/comments/{orphan_count.id}", headers=reader_headers)
    assert response.status_code == status.HTTP_200_OK

    db_session.expire_all()
    assert db_session.get(Post, post.id).comments_count == 0


def test_delete_comment_forbidden_for_others(
    client: TestClient, make_post, reader_headers, author_headers
) -> None:
    post = make_post()
    created = client.post(
        f"/api/blogs/{post.id}/comments",
        json={"content": "Stays put"},
        headers=reader_headers,
    ).json()["data"]

    response = client.delete(f"/api/blogs/comments/{created['id']}", headers=author_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["message"] == "Not authorized to delete this comment"


def test_missing_comment(client: TestClient, reader_headers) -> None:
    response = client.delete("/api/blogs/comments/9999", headers=reader_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["message"] == "Comment not found"
