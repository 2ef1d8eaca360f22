"""
Relevance filter for long captures.

Captured pages drag in navigation chrome: sidebars, history lists, menus.
The first half of a capture (by characters) is taken as the anchor and
kept verbatim; every later block must earn its place by sharing vocabulary
with the anchor or matching a tag.
"""

import logging
import re
from collections import Counter

import httpx

from aer.config import Settings

logger = logging.getLogger(__name__)

KEYWORD_LIMIT = 40
KEEP_THRESHOLD = 4

KEYWORD_WEIGHT = 2
TAG_WEIGHT = 5
MENU_PENALTY = 6
CHROME_PENALTY = 8
ROLE_BONUS = 2

SHORT_LINE_TOKENS = 5
SHORT_LINE_RATIO = 0.6

STOP_WORDS = frozenset({
    "the", "and", "for", "that", "with", "this", "you", "are", "was", "from",
    "have", "has", "not", "but", "all", "any", "can", "your", "our", "use",
    "using", "will", "into", "about", "over", "under", "more", "less", "than",
    "then", "when", "what", "why", "how", "they", "them", "their", "there",
    "here", "who", "which", "also", "like", "just", "onto", "out", "in", "on",
    "to", "of", "a", "an", "as", "is", "it", "be", "or", "if", "at", "by",
    "we", "i",
})

BLOCK_SPLIT = re.compile(r"\n\s*\n+")
TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")
NEW_CHAT = re.compile(r"^new chat$", re.IGNORECASE)
CHROME_WORDS = re.compile(r"history|extensions|apps|explore|settings", re.IGNORECASE)
ROLE_MARKER = re.compile(r"^(user|assistant|model)[:\-]", re.IGNORECASE | re.MULTILINE)


def tokenize(text: str) -> list[str]:
    """Lowercase alphanumeric runs longer than two characters."""
    return [w for w in TOKEN_SPLIT.split((text or "").lower()) if len(w) > 2]


def top_tokens(text: str, limit: int = 30) -> list[str]:
    """Most frequent non-stop-word tokens; ties keep first-seen order."""
    counts = Counter(w for w in tokenize(text) if w not in STOP_WORDS)
    return [word for word, _ in counts.most_common(limit)]


def split_blocks(text: str) -> list[str]:
    """Split on blank lines into trimmed, non-empty blocks."""
    return [b.strip() for b in BLOCK_SPLIT.split(text) if b.strip()]


def anchor_cutoff(blocks: list[str], total_chars: int) -> int:
    """
    Number of leading blocks that form the anchor.

    Block lengths accumulate until they reach half of total_chars; the block
    that crosses the line is part of the anchor.
    """
    acc = 0
    for i, block in enumerate(blocks):
        acc += len(block)
        if acc >= total_chars / 2:
            return i + 1
    return len(blocks)


def score_block(block: str, keywords: set[str], tags: set[str]) -> int:
    """Score a non-anchor block against the anchor keywords and tags."""
    score = 0
    lowered = block.lower()

    score += KEYWORD_WEIGHT * sum(1 for t in tokenize(block) if t in keywords)
    score += TAG_WEIGHT * sum(1 for tag in tags if tag and tag in lowered)

    # Menus and side rails: mostly very short lines
    lines = [line for line in block.split("\n") if line]
    short_lines = sum(1 for line in lines if len(tokenize(line)) <= SHORT_LINE_TOKENS)
    if short_lines >= max(1, int(len(lines) * SHORT_LINE_RATIO)):
        score -= MENU_PENALTY

    if NEW_CHAT.match(block) or CHROME_WORDS.search(block):
        score -= CHROME_PENALTY

    if ROLE_MARKER.search(block):
        score += ROLE_BONUS

    return score


def filter_by_first_half(text: str, tags: list[str] | None = None, title: str = "") -> str:
    """
    Drop blocks of a capture that look unrelated to its first half.

    Args:
        text: The captured text
        tags: Optional tags; each one found in a block adds to its score
        title: Page title (reserved, not scored)

    Returns:
        Anchor blocks plus kept blocks, in order, joined with blank lines.
        Blank input is returned unchanged.
    """
    raw = text or ""
    if not raw.strip():
        return raw

    blocks = split_blocks(raw)
    cutoff = anchor_cutoff(blocks, len(raw))
    anchor_text = "\n\n".join(blocks[:cutoff])
    keywords = set(top_tokens(anchor_text, KEYWORD_LIMIT))
    tag_set = {t.lower() for t in (tags or [])}

    kept = list(blocks[:cutoff])
    for block in blocks[cutoff:]:
        if score_block(block, keywords, tag_set) >= KEEP_THRESHOLD:
            kept.append(block)

    deduped = [b for i, b in enumerate(kept) if i == 0 or b != kept[i - 1]]
    return "\n\n".join(deduped)


async def filter_with_server_tags(
    text: str,
    title: str,
    settings: Settings,
    client: httpx.AsyncClient | None = None,
) -> str:
    """
    Filter a capture using tags the server suggests for its first half.

    Best effort: any failure returns the original text.
    """
    from aer.tagging import fetch_tags

    raw = text or ""
    if not raw.strip():
        return raw

    try:
        first_half = raw[: max(200, len(raw) // 2)]
        tags = await fetch_tags(first_half, title or "", settings, client=client)
        return filter_by_first_half(raw, tags, title or "")
    except Exception as e:
        logger.warning(f"Relevance filter failed, keeping original text: {e}")
        return text
