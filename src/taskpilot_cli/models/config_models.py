"""Configuration models for the context system.

A context selects the storage backend: a ``local`` SQLite vault or a
``remote`` hosted Firebase project.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class APIConfig(BaseModel):
    """HTTP behaviour shared by every remote adapter."""

    timeout: int = Field(default=30)
    retry: int = Field(default=3)


class FirebaseConfig(BaseModel):
    """Hosted backend configuration (document store, identity, storage)."""

    api_key: str | None = Field(default=None)
    storage_bucket: str | None = Field(default=None)
    firestore_endpoint: str = Field(default="https://firestore.googleapis.com/v1")
    identity_endpoint: str = Field(
        default="https://identitytoolkit.googleapis.com/v1"
    )
    token_endpoint: str = Field(default="https://securetoken.googleapis.com/v1")
    storage_endpoint: str = Field(
        default="https://firebasestorage.googleapis.com/v0"
    )


class AIConfig(BaseModel):
    """Language model configuration for the AI prompt wrappers."""

    api_key: str | None = Field(default=None)
    model: str = Field(default="gemini-2.0-flash")
    endpoint: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta"
    )
    timeout: int = Field(default=60)


class OutputConfig(BaseModel):
    """Output configuration."""

    format: str = Field(default="pretty")
    color: bool = Field(default=True)


class CacheConfig(BaseModel):
    """View cache configuration."""

    enabled: bool = Field(default=True)
    ttl: int = Field(default=300)


class Context(BaseModel):
    """Context configuration for a storage backend.

    Represents either a local SQLite vault or a hosted Firebase project.
    """

    name: str = Field(..., description="Unique context name")
    type: Literal["local", "remote"] = Field(..., description="Context type")
    source: str = Field(..., description="Database path or Firebase project id")
    user: str | None = Field(default=None, description="Signed-in email (remote only)")
    description: str = Field(default="", description="Human-readable description")

    @field_validator("source")
    @classmethod
    def validate_source(cls, v: str) -> str:
        """Reject empty sources."""
        if not v or not v.strip():
            raise ValueError("source cannot be empty")
        return v.strip()


class AppConfig(BaseModel):
    """Main TaskPilot configuration."""

    current_context_name: str = Field(
        default="default", description="Active context name"
    )
    contexts: list[Context] = Field(
        default_factory=list, description="Available contexts"
    )

    api: APIConfig = Field(default_factory=APIConfig)
    firebase: FirebaseConfig = Field(default_factory=FirebaseConfig)
    ai: AIConfig = Field(default_factory=AIConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)

    def get_context(self, name: str) -> Context:
        """Get context by name."""
        for ctx in self.contexts:
            if ctx.name == name:
                return ctx
        raise ValueError(f"Context '{name}' not found")

    def get_current_context(self) -> Context:
        """Get the currently active context."""
        return self.get_context(self.current_context_name)

    def add_context(self, context: Context):
        """Add a new context.

        Raises:
            ValueError: If context with the same name already exists
        """
        if any(ctx.name == context.name for ctx in self.contexts):
            raise ValueError(
                f"Context '{context.name}' already exists."
                " Use a different name or remove the existing context first."
            )
        self.contexts.append(context)
