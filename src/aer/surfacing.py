"""
Surfacing module for Aer.

Turns ranked search results into something a person can read: a preview
per result (decrypting locally where possible), the full context to paste
into a prompt, and a terminal listing.
"""

import os
from typing import Any
from urllib.parse import urlparse

from aer.crypto import PLAIN_NONCE, decrypt

PREVIEW_PLACEHOLDER = "[Encrypted content – cannot preview]"
CONTENT_PREVIEW_CHARS = 180
STUB_MAX_LINES = 3
DUPLICATE_CHECK_CHARS = 40


# ANSI color codes
class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    BLUE = "\033[34m"
    WHITE = "\033[37m"

    BRIGHT_YELLOW = "\033[93m"
    BRIGHT_CYAN = "\033[96m"

    @classmethod
    def enabled(cls) -> bool:
        """Check if colors should be enabled."""
        # Disable if NO_COLOR is set
        if os.environ.get("NO_COLOR"):
            return False
        return True


def c(text: str, *codes: str) -> str:
    """Apply color codes to text if colors are enabled."""
    if not Colors.enabled():
        return text
    return "".join(codes) + text + Colors.RESET


def resolve_preview(item: dict[str, Any], key_b64: str | None) -> str:
    """
    Best preview for a result.

    Order: server plaintext preview, decrypted summary, decrypted content
    (truncated). Anything that cannot be opened falls through to a
    placeholder.
    """
    plain = _plain_preview(item)
    if plain:
        return plain

    if key_b64:
        summary = decrypt(item.get("encryptedSummary"), key_b64)
        if summary:
            return summary

        content = decrypt(item.get("encryptedContent"), key_b64)
        if content:
            suffix = "…" if len(content) > CONTENT_PREVIEW_CHARS else ""
            return content[:CONTENT_PREVIEW_CHARS] + suffix

    return PREVIEW_PLACEHOLDER


def _plain_preview(item: dict[str, Any]) -> str:
    preview_plain = item.get("previewPlain")
    if isinstance(preview_plain, dict) and preview_plain.get("nonce") == PLAIN_NONCE:
        return str(preview_plain.get("ciphertext") or "")
    return ""


def looks_like_stub(text: str) -> bool:
    """A Page:/Title: header with little or no body."""
    return text.startswith(("Page:", "Title:")) and len(text.strip().split("\n")) <= STUB_MAX_LINES


def full_context(item: dict[str, Any], key_b64: str | None, query: str = "") -> str | None:
    """
    Full decrypted context for a result, ready to paste into a prompt.

    A stub body (just Page/URL lines) is extended with the summary or the
    server preview unless that text is already in it. The query and a
    URL/Tags header go on top.

    Returns:
        The composed text, or None when nothing could be decrypted.
    """
    full = ""
    summary = ""
    if key_b64:
        full = decrypt(item.get("encryptedContent"), key_b64) or ""
        summary = decrypt(item.get("encryptedSummary"), key_b64) or ""
    extra = summary or _plain_preview(item)

    if extra:
        if not full:
            full = extra
        elif looks_like_stub(full) and extra[:DUPLICATE_CHECK_CHARS] not in full:
            full = f"{full}\n\n{extra}"

    if not full:
        return None

    header = []
    if item.get("url"):
        header.append(f"URL: {item['url']}")
    tags = item.get("tags")
    if isinstance(tags, list) and tags:
        header.append("Tags: " + ", ".join(str(t) for t in tags))
    header_block = "\n".join(header) + "\n\n" if header else ""

    prefix = f"{query}\n\n" if query else ""
    return f"{prefix}Context from Aer: full content\n{header_block}{full}".strip()


def result_meta(item: dict[str, Any]) -> str:
    """Up to three tags and the URL host."""
    parts = []
    tags = item.get("tags")
    if isinstance(tags, list) and tags:
        parts.append("#" + " #".join(str(t) for t in tags[:3]))
    url = item.get("url")
    if url:
        host = urlparse(str(url)).hostname
        if host:
            parts.append(host)
    return "  ·  ".join(parts)


def format_results(query: str, ranked: list[dict[str, Any]], key_b64: str | None = None) -> str:
    """Format ranked results as a colored listing."""
    if not ranked:
        return c(f"No contexts matching '{query}'.", Colors.DIM)

    lines = []

    # Header
    lines.append(c(f"━━━ SEARCH: {query} ━━━", Colors.BOLD, Colors.BLUE))
    lines.append("")

    for i, item in enumerate(ranked, 1):
        title = (item.get("title") or "(untitled)")[:60]
        score = item.get("_score", 0)

        num_str = c(f"{i:>3}", Colors.BOLD, Colors.WHITE)
        score_str = c(f"{score:>6.1f}", Colors.BRIGHT_YELLOW)
        lines.append(f"{num_str}  {score_str}  {c(title, Colors.BRIGHT_CYAN)}")

        meta = result_meta(item)
        if meta:
            lines.append(f"{'':13}{c(meta, Colors.DIM)}")

        preview = " ".join(resolve_preview(item, key_b64).split())
        lines.append(f"{'':13}{preview[:200]}")
        lines.append("")

    return "\n".join(lines).rstrip()
