"""Tests for persisted client sessions."""

import stat

from quillpost.client.session import ClientSession, SessionStore


def test_load_without_file_is_empty(tmp_path) -> None:
    session = SessionStore(tmp_path / "missing.json").load()
    assert session.token is None
    assert session.is_authenticated is False
    assert session.user_id is None


def test_save_then_load(tmp_path) -> None:
    store = SessionStore(tmp_path / "nested" / "session.json")
    store.save(ClientSession(token="abc", user={"id": 7, "name": "Alice"}))

    restored = store.load()
    assert restored.token == "abc"
    assert restored.user_id == 7
    assert restored.is_authenticated


def test_corrupt_file_is_discarded(tmp_path) -> None:
    path = tmp_path / "session.json"
    path.write_text("{not json", encoding="utf-8")
    assert SessionStore(path).load() == ClientSession()


def test_clear_removes_file(tmp_path) -> None:
    path = tmp_path / "session.json"
    store = SessionStore(path)
    store.save(ClientSession(token="abc"))
    store.clear()
    assert not path.exists()
    store.clear()


def test_merge_user_overlays_fields() -> None:
    session = ClientSession(token="abc", user={"id": 1, "name": "Old", "bio": "kept"})
    session.merge_user({"name": "New"})
    assert session.user == {"id": 1, "name": "New", "bio": "kept"}


def test_env_override_for_path(tmp_path, monkeypatch) -> None:
    target = tmp_path / "from-env.json"
    monkeypatch.setenv("QUILLPOST_SESSION_FILE", str(target))
    assert SessionStore().path == target


def test_saved_file_is_private(tmp_path) -> None:
    path = tmp_path / "session.json"
    path.write_text("{}", encoding="utf-8")
    path.chmod(0o644)

    SessionStore(path).save(ClientSession(token="abc"))
    assert stat.S_IMODE(path.stat().st_mode) == 0o600
    assert SessionStore(path).load().token == "abc"
