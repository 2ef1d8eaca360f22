import pytest

from aer import __version__, cli
from aer.errors import UploadFailedError


@pytest.fixture(autouse=True)
def cli_env(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    monkeypatch.setenv("AER_TOKEN", "aer_user_123")
    monkeypatch.setenv("NO_COLOR", "1")


def run(monkeypatch, *args):
    monkeypatch.setattr("sys.argv", ["aer", *args])
    return cli.main()


def test_help(monkeypatch, capsys):
    assert run(monkeypatch, "--help") == 0
    assert "aer find <query>" in capsys.readouterr().out


def test_version(monkeypatch, capsys):
    assert run(monkeypatch, "--version") == 0
    assert capsys.readouterr().out.strip() == f"aer {__version__}"


def test_text_is_captured(monkeypatch, capsys):
    captured = []

    async def fake_upload(artifact, settings=None, client=None, notifier=None):
        captured.append((artifact, settings))
        return {"success": True, "id": "ctx_1"}

    monkeypatch.setattr("aer.upload.upload_artifact", fake_upload)

    assert run(monkeypatch, "Notes", "from", "review") == 0
    assert capsys.readouterr().out.strip() == "ctx_1"
    artifact, settings = captured[0]
    assert artifact == "Notes from review"
    assert settings.auth_token == "aer_user_123"


def test_summary_command(monkeypatch):
    captured = []

    async def fake_upload(artifact, settings=None, client=None, notifier=None):
        captured.append(artifact)
        return {"success": True}

    monkeypatch.setattr("aer.upload.upload_artifact", fake_upload)

    assert run(monkeypatch, "summary", "short", "note") == 0
    assert captured[0]["summaryOnly"] is True
    assert captured[0]["plaintext"] == "short note"


def test_upload_failure_exit_code(monkeypatch, capsys):
    async def failing_upload(artifact, settings=None, client=None, notifier=None):
        raise UploadFailedError(413, "too large")

    monkeypatch.setattr("aer.upload.upload_artifact", failing_upload)

    assert run(monkeypatch, "some text") == 1
    assert "Upload failed (413): too large" in capsys.readouterr().err


def test_file_command_missing_file(monkeypatch, capsys, tmp_path):
    assert run(monkeypatch, "file", str(tmp_path / "nope.txt")) == 1
    assert "cannot read" in capsys.readouterr().err


def test_filter_command(monkeypatch, capsys, tmp_path):
    path = tmp_path / "capture.txt"
    path.write_text("Redis caching strategy for the api layer\n\nNew chat", encoding="utf-8")

    assert run(monkeypatch, "filter", str(path)) == 0
    out = capsys.readouterr().out
    assert "Redis caching strategy" in out
    assert "New chat" not in out


def test_find_requires_query(monkeypatch, capsys):
    assert run(monkeypatch, "find") == 1
    assert "Usage" in capsys.readouterr().err


def test_find_without_token_reports_missing_token(monkeypatch, capsys):
    monkeypatch.delenv("AER_TOKEN")

    assert run(monkeypatch, "find", "redis") == 1
    err = capsys.readouterr().err
    assert "No authentication token configured" in err
    assert "Invalid token format" not in err


def test_find_full_prints_best_match(monkeypatch, capsys):
    from aer.crypto import derive_key, encrypt

    key = derive_key("aer_user_123")

    async def fake_search(query, settings, client=None):
        return [
            {"title": "Best", "url": "https://x.example", "encryptedContent": encrypt("full body", key).model_dump()},
            {"title": "Other", "encryptedContent": encrypt("other body", key).model_dump()},
        ]

    monkeypatch.setattr("aer.search.assist_search", fake_search)

    assert run(monkeypatch, "find", "redis", "--full") == 0
    out = capsys.readouterr().out
    assert out.startswith("redis\n\nContext from Aer: full content\nURL: https://x.example\n\nfull body")
    assert "other body" not in out
