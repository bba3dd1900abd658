"""Tests for Firebase Storage uploads."""

from urllib.parse import parse_qs

import httpx
import pytest

from taskpilot_cli.adapters.firebase import FirebaseClient, FirebaseFileStorage
from taskpilot_cli.models import AuthenticationError, BackendError


def make_storage(handler):
    client = FirebaseClient("key", retry=0, transport=httpx.MockTransport(handler))
    return FirebaseFileStorage(client, bucket="demo.appspot.com")


@pytest.mark.asyncio
async def test_upload_returns_tokenized_download_url():
    def handler(request):
        assert request.method == "POST"
        assert request.url.path == "/v0/b/demo.appspot.com/o"
        assert parse_qs(request.url.query.decode()) == {
            "uploadType": ["media"],
            "name": ["projects/p1/notes.txt"],
        }
        assert request.headers["Content-Type"] == "text/plain"
        assert request.content == b"hello"
        return httpx.Response(
            200, json={"name": "projects/p1/notes.txt", "downloadTokens": "tok1,tok2"}
        )

    url = await make_storage(handler).upload("projects/p1/notes.txt", b"hello", "text/plain")

    assert url == (
        "https://firebasestorage.googleapis.com/v0/b/demo.appspot.com/o/"
        "projects%2Fp1%2Fnotes.txt?alt=media&token=tok1"
    )


@pytest.mark.asyncio
async def test_upload_without_token():
    storage = make_storage(lambda request: httpx.Response(200, json={"name": "a.txt"}))

    url = await storage.upload("a.txt", b"", "")

    assert url.endswith("/o/a.txt?alt=media")


@pytest.mark.asyncio
async def test_upload_without_name_fails():
    storage = make_storage(lambda request: httpx.Response(200, json={}))

    with pytest.raises(BackendError):
        await storage.upload("a.txt", b"", "text/plain")


@pytest.mark.asyncio
async def test_rejected_upload():
    storage = make_storage(lambda request: httpx.Response(403, json={"error": {"message": "denied"}}))

    with pytest.raises(AuthenticationError, match="denied"):
        await storage.upload("a.txt", b"", "text/plain")
