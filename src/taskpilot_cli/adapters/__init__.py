"""Adapters (concrete implementations) of the repository ports.

- sqlite: local vault (documents in SQLite, files on disk)
- firebase: hosted backend (Firestore, Firebase Auth, Firebase Storage)
- local_identity: passwordless identities for local vaults
"""
