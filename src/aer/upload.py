"""
Upload orchestration for Aer.

normalize → validate → derive key → encrypt → preview → POST.

Content never leaves the machine in cleartext except for a short preview
(at most 1200 characters) that the server uses for enrichment and does
not store. Summary-only uploads encrypt just the first 500 characters.
"""

import json
import logging
import time
from typing import Any

import httpx

from aer.config import Settings, load_settings
from aer.crypto import encrypt, key_for_settings
from aer.errors import MissingContentError, UploadFailedError
from aer.notify import DesktopNotifier, Notifier
from aer.payload import has_content, normalize, to_json
from aer.transport import post_json

logger = logging.getLogger(__name__)

UPLOAD_PATH = "/api/context/upload"
PREVIEW_LIMIT = 1200
SUMMARY_LIMIT = 500


def now_ms() -> int:
    """Current time as Unix epoch milliseconds."""
    return int(time.time() * 1000)


def source_text(payload: dict[str, Any]) -> str:
    """
    Text to encrypt: non-empty plaintext, else content, else empty.

    Non-string values are serialized to JSON.
    """
    for field in ("plaintext", "content"):
        value = payload.get(field)
        if not value:
            continue
        return value if isinstance(value, str) else to_json(value)
    return ""


def bounded_preview(text: str, limit: int = PREVIEW_LIMIT) -> str:
    """Trimmed prefix of text, at most limit characters."""
    return text.strip()[:limit]


def parse_result(body: str) -> Any:
    """Parse an upload response body; non-JSON bodies become a success message."""
    try:
        return json.loads(body)
    except ValueError:
        return {"success": True, "message": body}


class Uploader:
    """Encrypts captured artifacts and sends them to the Aer API."""

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
        notifier: Notifier | None = None,
    ):
        self.settings = settings or load_settings()
        self.client = client
        self.notifier = notifier or DesktopNotifier()

    def prepare(self, artifact: Any) -> dict[str, Any]:
        """
        Build the wire payload for an artifact.

        Returns a new dict; the artifact itself is never modified.

        Raises:
            MissingContentError: nothing to upload after normalization
            UnauthenticatedError: no token configured
            InvalidTokenFormatError: token is not aer_{userId}
        """
        payload = normalize(artifact)
        if not payload.get("timestamp"):
            payload["timestamp"] = now_ms()

        if not has_content(payload):
            raise MissingContentError()

        key = key_for_settings(self.settings)

        source = source_text(payload)
        summary_only = bool(payload.get("summaryOnly"))

        if not payload.get("encryptedContent") and source:
            payload["encryptedContent"] = encrypt(source, key).model_dump()

        if not summary_only:
            # Full cleartext never leaves; only the bounded preview below does
            payload.pop("plaintext", None)
            payload.pop("content", None)

            # Transient preview for server-side enrichment, not stored
            preview = bounded_preview(source)
            if preview:
                payload["plaintext"] = preview

        # Must run last: overwrites the full-content encryption above
        if summary_only:
            self._apply_summary_only(payload, source, key)

        return payload

    def _apply_summary_only(self, payload: dict[str, Any], source: str, key: str) -> None:
        """Shrink encrypted fields to a short summary and ensure a preview."""
        if payload.get("encryptedContent") and source:
            short = source.strip()[:SUMMARY_LIMIT]
            payload["encryptedContent"] = encrypt(short, key).model_dump()
            payload["encryptedSummary"] = encrypt(short, key).model_dump()

        # The server rejects summary-only uploads without a plaintext preview
        existing = payload.get("plaintext")
        existing = existing.strip() if isinstance(existing, str) else ""
        preview = existing[:PREVIEW_LIMIT] or bounded_preview(source)
        if preview:
            payload["plaintext"] = preview

    async def upload(self, artifact: Any) -> Any:
        """
        Prepare and send an artifact.

        Emits exactly one notification, success or failure.

        Returns:
            The parsed response body.
        """
        try:
            payload = self.prepare(artifact)
            logger.info(
                f"Uploading payload with fields {sorted(payload)} "
                f"(summaryOnly={bool(payload.get('summaryOnly'))})"
            )

            response = await post_json(
                self.settings,
                self.settings.endpoint(UPLOAD_PATH),
                payload,
                client=self.client,
            )
            logger.info(f"Upload response status: {response.status_code}")

            if not response.is_success:
                raise UploadFailedError(response.status_code, response.text)

            result = parse_result(response.text)

        except Exception as e:
            logger.error(f"Upload failed: {e}")
            self.notifier.notify("Upload Failed", str(e))
            raise

        self.notifier.notify("Upload Successful", "Data uploaded to Aer successfully!")
        return result


async def upload_artifact(
    artifact: Any,
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
    notifier: Notifier | None = None,
) -> Any:
    """Convenience function to upload a single artifact."""
    uploader = Uploader(settings=settings, client=client, notifier=notifier)
    return await uploader.upload(artifact)
