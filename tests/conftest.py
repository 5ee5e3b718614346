# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-quillpost")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_CREATE_TABLES"] = "false"

from quillpost.api.dependencies import get_media_client_dep  # noqa: E402
from quillpost.core.security import create_access_token, hash_password  # noqa: E402
from quillpost.db.session import Base  # noqa: E402
from quillpost.db.session import get_db as app_get_session  # noqa: E402
from quillpost.main import app as fastapi_app  # noqa: E402
from quillpost.models import Post, PostStatus, User  # noqa: E402
from quillpost.services.media import MediaHostError, UploadedImage  # noqa: E402

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "secret123"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
LONG_CONTENT = "This post body is comfortably longer than twenty characters."

_COVER_COUNTER = count(1)


class FakeMediaClient:
    """In-memory stand-in for the image host."""

    enabled = True

    def __init__(self) -> None:
        self.images: dict[str, bytes] = {}
        self.uploads: list[str] = []
        self.deleted: list[str] = []
        self.fail_upload = False
        self.fail_delete = False

    def seed(self) -> str:
        """Store an image directly and return its URL."""
        public_id = f"blog-covers/seed{next(_COVER_COUNTER)}"
        self.images[public_id] = PNG_BYTES
        return f"https://media.test/image/upload/v1/{public_id}.png"

    async def upload_image(
        self,
        content: bytes,
        *,
        filename: str,
        content_type: str,
        folder: str | None = None,
    ) -> UploadedImage:
        if self.fail_upload:
            raise MediaHostError("upload refused")
        public_id = f"{folder or 'blog-covers'}/cover{next(_COVER_COUNTER)}"
        self.images[public_id] = content
        self.uploads.append(public_id)
        return UploadedImage(
            url=f"https://media.test/image/upload/v1/{public_id}.png",
            public_id=public_id,
        )

    async def delete_image(self, public_id: str) -> bool:
        if self.fail_delete:
            raise MediaHostError("destroy refused")
        self.deleted.append(public_id)
        return self.images.pop(public_id, None) is not None

    async def close(self) -> None:
        return None


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def media() -> FakeMediaClient:
    return FakeMediaClient()


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI, db_session: Session, media: FakeMediaClient
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_media_client_dep] = lambda: media
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_media_client_dep, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def _create_user(db_session: Session, name: str, email: str) -> User:
    user = User(name=name, email=email, password_hash=hash_password(TEST_PASSWORD))
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture()
def author(db_session: Session) -> User:
    """Primary user, who writes the posts under test."""
    return _create_user(db_session, "Alice Author", "alice@example.com")


@pytest.fixture()
def reader(db_session: Session) -> User:
    """Second user, who reads, likes and comments."""
    return _create_user(db_session, "Bob Reader", "bob@example.com")


@pytest.fixture()
def author_headers(author: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(author.id)}"}


@pytest.fixture()
def reader_headers(reader: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(reader.id)}"}


@pytest.fixture()
def cover_file() -> dict[str, tuple[str, bytes, str]]:
    """Multipart ``files`` mapping carrying a small PNG cover."""
    return {"coverImage": ("cover.png", PNG_BYTES, "image/png")}


@pytest.fixture()
def make_post(
    db_session: Session, author: User, media: FakeMediaClient
) -> Callable[..., Post]:
    """Factory persisting posts directly, bypassing the HTTP layer."""

    def _make_post(**overrides: Any) -> Post:
        fields: dict[str, Any] = {
            "title": "A post worth reading",
            "content": LONG_CONTENT,
            "cover_image": media.seed(),
            "author_id": author.id,
            "status": PostStatus.PUBLISHED.value,
        }
        fields.update(overrides)
        post = Post(**fields)
        db_session.add(post)
        db_session.commit()
        db_session.refresh(post)
        return post

    return _make_post
