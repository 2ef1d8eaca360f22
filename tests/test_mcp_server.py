import pytest

from aer.crypto import derive_key, encrypt
from aer.errors import SearchFailedError
from aer_mcp import server


@pytest.fixture(autouse=True)
def mcp_env(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    monkeypatch.setenv("AER_TOKEN", "aer_user_123")


@pytest.mark.asyncio
async def test_unknown_tool():
    [content] = await server.call_tool("aer_nope", {})
    assert content.text == "Unknown tool: aer_nope"


@pytest.mark.asyncio
async def test_upload_requires_text():
    [content] = await server.call_tool("aer_upload", {"text": "   "})
    assert content.text == "Error: Empty text"


@pytest.mark.asyncio
async def test_upload_passes_title_and_url(monkeypatch):
    captured = []

    async def fake_upload(artifact, settings=None, client=None, notifier=None):
        captured.append(artifact)
        return {"success": True}

    monkeypatch.setattr(server, "upload_artifact", fake_upload)

    [content] = await server.call_tool("aer_upload", {"text": "note", "title": "T", "url": "https://x.example"})

    assert content.text.startswith("Uploaded:")
    assert captured[0] == {
        "content": "note",
        "metadata": {"context": "mcp"},
        "title": "T",
        "url": "https://x.example",
    }


@pytest.mark.asyncio
async def test_search_lists_ranked_results(monkeypatch):
    key = derive_key("aer_user_123")

    async def fake_search(query, settings, client=None):
        return [{"title": "Redis notes", "_score": 26, "encryptedSummary": encrypt("cache tips", key).model_dump()}]

    monkeypatch.setattr(server, "assist_search", fake_search)

    [content] = await server.call_tool("aer_search", {"query": "redis"})
    assert content.text == "[26.0] Redis notes\n  cache tips"


@pytest.mark.asyncio
async def test_search_failure_is_reported(monkeypatch):
    async def failing_search(query, settings, client=None):
        raise SearchFailedError("HTTP 503")

    monkeypatch.setattr(server, "assist_search", failing_search)

    [content] = await server.call_tool("aer_search", {"query": "redis"})
    assert content.text.startswith("Error:")
    assert "HTTP 503" in content.text


@pytest.mark.asyncio
@pytest.mark.parametrize("tool, args", [
    ("aer_upload", {"text": None}),
    ("aer_upload_summary", {"text": None}),
    ("aer_search", {"query": None}),
])
async def test_null_arguments_are_treated_as_empty(tool, args):
    [content] = await server.call_tool(tool, args)
    assert content.text.startswith("Error: Empty")


@pytest.mark.asyncio
async def test_search_without_token(monkeypatch):
    monkeypatch.delenv("AER_TOKEN")

    [content] = await server.call_tool("aer_search", {"query": "redis"})
    assert "No authentication token configured" in content.text


@pytest.mark.asyncio
async def test_search_full_returns_decrypted_contexts(monkeypatch):
    key = derive_key("aer_user_123")

    async def fake_search(query, settings, client=None):
        return [
            {"title": "Redis notes", "_score": 26, "encryptedContent": encrypt("all the notes", key).model_dump()},
            {"title": "Locked", "_score": 3, "encryptedContent": {"ciphertext": "bad", "nonce": "bad"}},
        ]

    monkeypatch.setattr(server, "assist_search", fake_search)

    [content] = await server.call_tool("aer_search", {"query": "redis", "full": True})
    assert content.text == (
        "[26.0] Redis notes\nContext from Aer: full content\nall the notes"
        "\n\n---\n\n"
        "[3.0] Locked\nUnable to decrypt this context"
    )
