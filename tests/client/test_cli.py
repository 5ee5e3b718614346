"""Tests for the command line client."""

import httpx
import pytest

from quillpost.client import cli
from quillpost.client.session import ClientSession, SessionStore


def test_parser_requires_a_command() -> None:
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])


def test_list_options_parse() -> None:
    args = cli.build_parser().parse_args(
        ["list", "--search", "tea", "--sort-by", "title", "--order", "asc"]
    )
    assert args.handler is cli.cmd_list
    assert (args.search, args.sort_by, args.order, args.page) == ("tea", "title", "asc", 1)


def test_logout_clears_session(tmp_path, capsys) -> None:
    path = tmp_path / "session.json"
    SessionStore(path).save(ClientSession(token="abc", user={"id": 1}))

    assert cli.main(["--session-file", str(path), "logout"]) == 0
    assert not path.exists()
    assert "Signed out" in capsys.readouterr().out


def test_whoami_when_signed_out(tmp_path, capsys) -> None:
    path = tmp_path / "session.json"
    assert cli.main(["--session-file", str(path), "whoami"]) == 0
    assert "Not signed in" in capsys.readouterr().out


def test_unreachable_server_exits_nonzero(tmp_path, capsys) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    path = tmp_path / "session.json"
    code = cli.main(
        ["--base-url", "http://api.test/api", "--session-file", str(path), "show", "1"],
        transport=httpx.MockTransport(refuse),
    )
    assert code == 1
    assert "[quillpost][FAIL]" in capsys.readouterr().err


def test_failure_envelope_is_reported(tmp_path, capsys) -> None:
    def missing(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/blogs/42"
        return httpx.Response(
            404, json={"success": False, "message": "Blog not found", "data": None}
        )

    path = tmp_path / "session.json"
    code = cli.main(
        ["--base-url", "http://api.test/api", "--session-file", str(path), "show", "42"],
        transport=httpx.MockTransport(missing),
    )
    assert code == 1
    assert "[quillpost][FAIL] Blog not found" in capsys.readouterr().err
