"""Firebase Storage implementation of FileStorage."""

from __future__ import annotations

from urllib.parse import quote

from taskpilot_cli.adapters.firebase.client import FirebaseClient
from taskpilot_cli.models import BackendError
from taskpilot_cli.repositories import FileStorage


class FirebaseFileStorage(FileStorage):
    """Uploads objects to the project's storage bucket.

    The returned URL embeds the object's download token, so it can be
    fetched without further authentication.
    """

    def __init__(
        self,
        client: FirebaseClient,
        bucket: str,
        endpoint: str = "https://firebasestorage.googleapis.com/v0",
    ):
        self.client = client
        self.bucket = bucket
        self.endpoint = endpoint.rstrip("/")

    def download_url(self, name: str, token: str | None) -> str:
        url = f"{self.endpoint}/b/{self.bucket}/o/{quote(name, safe='')}?alt=media"
        if token:
            url += f"&token={token}"
        return url

    async def upload(self, path: str, content: bytes, content_type: str) -> str:
        response = await self.client.call(
            f"Upload of {path} failed",
            "POST",
            f"{self.endpoint}/b/{self.bucket}/o",
            params={"uploadType": "media", "name": path},
            content=content,
            headers={"Content-Type": content_type or "application/octet-stream"},
        )
        body = response.json()
        name = body.get("name")
        if not name:
            raise BackendError(f"Upload of {path} failed: no object name returned")
        tokens = body.get("downloadTokens") or ""
        return self.download_url(name, tokens.split(",")[0] or None)
