"""Cloud Firestore implementation of DocumentStore (REST API)."""

from __future__ import annotations

from typing import Any

from taskpilot_cli.adapters.firebase.client import FirebaseClient
from taskpilot_cli.adapters.firebase.codec import decode_fields, encode_fields, encode_value
from taskpilot_cli.models import NotFoundError
from taskpilot_cli.repositories import Document, DocumentStore
from taskpilot_cli.utils.logger import get_logger

logger = get_logger(__name__)

PAGE_SIZE = 300


def document_from_rest(payload: dict[str, Any]) -> Document:
    """Build a Document from a REST document resource."""
    return Document(
        id=payload["name"].rsplit("/", 1)[-1],
        data=decode_fields(payload.get("fields", {})),
        revision=payload.get("updateTime"),
    )


class FirestoreDocumentStore(DocumentStore):
    """Document store backed by a hosted Firestore database.

    The document's ``updateTime`` serves as its revision; conditional
    updates send it as the ``currentDocument.updateTime`` precondition.
    """

    def __init__(
        self,
        client: FirebaseClient,
        project_id: str,
        endpoint: str = "https://firestore.googleapis.com/v1",
        database: str = "(default)",
    ):
        self.client = client
        self.project_id = project_id
        self.base_url = (
            f"{endpoint.rstrip('/')}/projects/{project_id}/databases/{database}/documents"
        )

    def _params(self, *extra: tuple[str, Any]) -> list[tuple[str, Any]]:
        params: list[tuple[str, Any]] = list(extra)
        if self.client.api_key:
            params.append(("key", self.client.api_key))
        return params

    async def list_all(self, collection: str) -> list[Document]:
        documents: list[Document] = []
        page_token: str | None = None
        while True:
            extra = [("pageSize", PAGE_SIZE)]
            if page_token:
                extra.append(("pageToken", page_token))
            response = await self.client.call(
                f"Failed to list {collection}",
                "GET",
                f"{self.base_url}/{collection}",
                params=self._params(*extra),
            )
            body = response.json()
            documents.extend(document_from_rest(d) for d in body.get("documents", []))
            page_token = body.get("nextPageToken")
            if not page_token:
                return documents

    async def get(self, collection: str, document_id: str) -> Document | None:
        try:
            response = await self.client.call(
                f"Failed to read {collection}/{document_id}",
                "GET",
                f"{self.base_url}/{collection}/{document_id}",
                params=self._params(),
            )
        except NotFoundError:
            return None
        return document_from_rest(response.json())

    async def find(self, collection: str, field_name: str, value: Any) -> list[Document]:
        query = {
            "structuredQuery": {
                "from": [{"collectionId": collection}],
                "where": {
                    "fieldFilter": {
                        "field": {"fieldPath": field_name},
                        "op": "EQUAL",
                        "value": encode_value(value),
                    }
                },
            }
        }
        response = await self.client.call(
            f"Failed to query {collection}",
            "POST",
            f"{self.base_url}:runQuery",
            json=query,
            params=self._params(),
        )
        # runQuery streams one result per row; rows without a document only
        # carry the read time
        return [document_from_rest(row["document"]) for row in response.json() if "document" in row]

    async def add(self, collection: str, data: dict[str, Any]) -> str:
        response = await self.client.call(
            f"Failed to create document in {collection}",
            "POST",
            f"{self.base_url}/{collection}",
            json={"fields": encode_fields(data)},
            params=self._params(),
        )
        document = document_from_rest(response.json())
        logger.debug("created %s/%s", collection, document.id)
        return document.id

    async def set(self, collection: str, document_id: str, data: dict[str, Any]) -> None:
        # PATCH without an update mask replaces the whole document,
        # creating it if needed
        await self.client.call(
            f"Failed to write {collection}/{document_id}",
            "PATCH",
            f"{self.base_url}/{collection}/{document_id}",
            json={"fields": encode_fields(data)},
            params=self._params(),
        )

    async def update(
        self,
        collection: str,
        document_id: str,
        fields: dict[str, Any],
        *,
        revision: str | None = None,
    ) -> None:
        extra = [("updateMask.fieldPaths", name) for name in fields]
        if revision is not None:
            extra.append(("currentDocument.updateTime", revision))
        else:
            extra.append(("currentDocument.exists", "true"))
        await self.client.call(
            f"Failed to update {collection}/{document_id}",
            "PATCH",
            f"{self.base_url}/{collection}/{document_id}",
            json={"fields": encode_fields(fields)},
            params=self._params(*extra),
        )

    async def delete(self, collection: str, document_id: str) -> None:
        try:
            await self.client.call(
                f"Failed to delete {collection}/{document_id}",
                "DELETE",
                f"{self.base_url}/{collection}/{document_id}",
                params=self._params(),
            )
        except NotFoundError:
            logger.debug("%s/%s already absent", collection, document_id)

    async def close(self) -> None:
        await self.client.close()
