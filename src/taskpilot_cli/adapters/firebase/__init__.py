"""Firebase adapter module - hosted backend implementation over REST."""

from taskpilot_cli.adapters.firebase.client import FirebaseClient
from taskpilot_cli.adapters.firebase.firestore import FirestoreDocumentStore
from taskpilot_cli.adapters.firebase.identity import FirebaseIdentityProvider
from taskpilot_cli.adapters.firebase.storage import FirebaseFileStorage

__all__ = [
    "FirebaseClient",
    "FirestoreDocumentStore",
    "FirebaseIdentityProvider",
    "FirebaseFileStorage",
]
