"""
Ingress module for Aer.

Builds artifacts from the things a user can capture: selected text, a page,
a link, an image, a local file, or a relayed capture request. Artifacts go
straight into normalize() and the uploader.
"""

from pathlib import Path
from typing import Any

# Relay request fields, checked in order; plain strings become content
REQUEST_FIELDS = (
    ("content", "content"),
    ("plaintext", "plaintext"),
    ("encryptedContent", "encryptedContent"),
    ("text", "content"),
    ("message", "content"),
    ("body", "content"),
)

# Hosts of known AI assistants
SOURCE_HOSTS = (
    (("gemini.google.com", "ai.google.com"), "gemini"),
    (("claude.ai",), "claude"),
    (("chatgpt.com", "openai.com"), "chatgpt"),
    (("perplexity.ai",), "perplexity"),
    (("copilot.microsoft.com",), "copilot"),
    (("github.com",), "github"),
)

RESTRICTED_SCHEMES = (
    "chrome://",
    "edge://",
    "about:",
    "view-source:",
    "chrome-extension://",
    "file://",
)


def detect_source(url: str | None) -> str | None:
    """Name the assistant a URL belongs to, if any."""
    lowered = (url or "").lower()
    for hosts, name in SOURCE_HOSTS:
        if any(host in lowered for host in hosts):
            return name
    return None


def is_restricted_url(url: str | None) -> bool:
    """Pages that cannot be captured from (browser internals, local files)."""
    if not url:
        return True
    return url.lower().startswith(RESTRICTED_SCHEMES)


def page_text(title: str, url: str, text: str | None = None) -> str:
    """Header plus body for a page; a Page:/URL: stub when there is no body."""
    if text:
        return f"Title: {title}\nURL: {url}\n\n{text}"
    return f"Page: {title}\nURL: {url}"


def page_artifact(title: str, url: str, text: str | None = None, context: str = "page") -> dict[str, Any]:
    """Artifact for a full page capture."""
    metadata: dict[str, Any] = {"pageUrl": url, "tabTitle": title, "context": context}
    if source := detect_source(url):
        metadata["source"] = source
    return {"content": page_text(title, url, text), "metadata": metadata}


def link_artifact(link_url: str, page_url: str | None = None) -> dict[str, Any]:
    """Artifact for a captured link."""
    return {"content": f"Link: {link_url}", "metadata": {"pageUrl": page_url, "context": "link"}}


def image_artifact(src_url: str, page_url: str | None = None) -> dict[str, Any]:
    """Artifact for a captured image reference."""
    return {"content": f"Image: {src_url}", "metadata": {"pageUrl": page_url, "context": "image"}}


def summary_artifact(plain: str, metadata: dict[str, Any] | None = None) -> dict[str, Any]:
    """Artifact for a summary-only upload."""
    return {
        "plaintext": (plain or "").strip(),
        "summaryOnly": True,
        "metadata": {"context": "summary", **(metadata or {})},
    }


def file_artifact(path: Path) -> dict[str, Any]:
    """
    Artifact for a local UTF-8 text file.

    Raises:
        OSError: the file cannot be read
        UnicodeDecodeError: the file is not UTF-8 text
    """
    text = path.read_text(encoding="utf-8")
    return {
        "content": text,
        "fileName": path.name,
        "fileType": path.suffix.lstrip(".") or "txt",
        "metadata": {"context": "file"},
    }


def artifact_from_request(request: dict[str, Any]) -> Any:
    """
    Pull the artifact out of a relayed capture request.

    `data` is taken as-is; known fields are wrapped; otherwise the whole
    request minus its `action` is the artifact.
    """
    if "data" in request:
        return request["data"]
    for field, target in REQUEST_FIELDS:
        if field in request:
            return {target: request[field]}
    return {k: v for k, v in request.items() if k != "action"}
