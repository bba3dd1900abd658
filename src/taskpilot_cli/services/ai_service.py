"""AI service - Prompt wrappers over a hosted language model.

Each wrapper sends one prompt, asks the model for JSON matching a pydantic
model's schema, and validates the reply against that model. Invalid replies
raise AIResponseError; nothing is retried.
"""

from __future__ import annotations

import json
import uuid
from collections.abc import Iterable
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from taskpilot_cli.models import (
    AIResponseError,
    AuthenticationError,
    BackendError,
    Task,
    TaskPriority,
    TaskStatus,
)
from taskpilot_cli.models.config_models import AIConfig
from taskpilot_cli.utils.logger import get_logger

logger = get_logger(__name__)

ResponseT = TypeVar("ResponseT", bound=BaseModel)

OUTLINE_PROMPT = (
    "You are an expert project manager. Generate a detailed project outline "
    "based on the following project description:\n\n"
    "Project Description: {project_description}\n\n"
    "Project Outline: "
)

TASKS_PROMPT = (
    "You are an expert project manager. Based on the following project "
    "description, generate a list of 5-10 initial tasks to help the user get "
    "started.\n\n"
    "Project Description: {project_description}\n\n"
    "Generate tasks that are actionable and cover the main areas of the "
    "project. Assign a priority to each task.\n"
)

SUMMARY_PROMPT = "Summarize the following progress notes into key takeaways:\n\n{progress_notes}"


class ProjectOutline(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    project_outline: str = Field(
        alias="projectOutline",
        description="A detailed project outline generated from the project description.",
    )


class TaskSuggestion(BaseModel):
    title: str = Field(description="The title of the task.")
    priority: TaskPriority = Field(description="The priority of the task.")


class GeneratedTasks(BaseModel):
    tasks: list[TaskSuggestion] = Field(
        description="A list of generated tasks for the project."
    )


class ProgressSummary(BaseModel):
    summary: str = Field(description="The summarized progress notes.")


# Keys the model API understands in a response schema
_SCHEMA_KEYS = {"type", "properties", "required", "items", "enum", "description", "nullable"}


def response_schema(model: type[BaseModel]) -> dict[str, Any]:
    """JSON schema of ``model`` in the subset the generation API accepts.

    References are inlined and keys such as ``title`` dropped.
    """
    schema = model.model_json_schema(by_alias=True)
    definitions = schema.get("$defs", {})

    def simplify(node: Any) -> Any:
        if isinstance(node, list):
            return [simplify(item) for item in node]
        if not isinstance(node, dict):
            return node
        if "$ref" in node:
            target = definitions[node["$ref"].rsplit("/", 1)[-1]]
            merged = {**target, **{k: v for k, v in node.items() if k != "$ref"}}
            return simplify(merged)
        if "allOf" in node and len(node["allOf"]) == 1:
            merged = {**node["allOf"][0], **{k: v for k, v in node.items() if k != "allOf"}}
            return simplify(merged)
        result = {}
        for key, value in node.items():
            if key == "properties":
                result[key] = {name: simplify(prop) for name, prop in value.items()}
            elif key in _SCHEMA_KEYS:
                result[key] = simplify(value)
        return result

    return simplify(schema)


class LanguageModelClient:
    """Minimal client for the Gemini ``generateContent`` endpoint."""

    def __init__(self, config: AIConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{self.config.endpoint.rstrip('/')}/models/{self.config.model}:generateContent"

    async def generate_json(self, prompt: str, schema: dict[str, Any]) -> str:
        """Send a prompt and return the model's raw JSON text.

        Raises:
            AuthenticationError: If no API key is configured or it is rejected
            BackendError: If the model API fails
            AIResponseError: If the reply holds no text
        """
        if not self.config.api_key:
            raise AuthenticationError(
                "No AI API key configured. Set TASKPILOT_AI_API_KEY."
            )

        body = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": schema,
            },
        }
        async with httpx.AsyncClient(
            timeout=self.config.timeout, transport=self._transport
        ) as client:
            try:
                response = await client.post(
                    self.url, json=body, params={"key": self.config.api_key}
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                if e.response.status_code in (401, 403):
                    raise AuthenticationError("The AI API key was rejected.") from e
                raise BackendError(
                    f"AI request failed with status {e.response.status_code}"
                ) from e
            except httpx.RequestError as e:
                raise BackendError(f"AI request failed: {e}") from e

        try:
            candidate = response.json()["candidates"][0]
            parts = candidate["content"]["parts"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise AIResponseError("The model returned no content.") from e
        return "".join(part.get("text", "") for part in parts)


class AIService:
    """Project-management prompts answered by the language model."""

    def __init__(self, client: LanguageModelClient):
        self.client = client

    async def _generate(self, prompt: str, response_model: type[ResponseT]) -> ResponseT:
        text = await self.client.generate_json(prompt, response_schema(response_model))
        try:
            return response_model.model_validate(json.loads(text))
        except (ValueError, ValidationError) as e:
            logger.error("invalid %s reply: %s", response_model.__name__, text[:500])
            raise AIResponseError(
                f"The model returned an invalid {response_model.__name__}."
            ) from e

    async def generate_project_outline(self, project_description: str) -> ProjectOutline:
        """Draft a project outline from a description."""
        prompt = OUTLINE_PROMPT.format(project_description=project_description)
        return await self._generate(prompt, ProjectOutline)

    async def generate_tasks_for_project(self, project_description: str) -> GeneratedTasks:
        """Suggest 5-10 starter tasks, each with a priority."""
        prompt = TASKS_PROMPT.format(project_description=project_description)
        return await self._generate(prompt, GeneratedTasks)

    async def summarize_progress_notes(self, progress_notes: str) -> ProgressSummary:
        """Condense progress notes into key takeaways."""
        prompt = SUMMARY_PROMPT.format(progress_notes=progress_notes)
        return await self._generate(prompt, ProgressSummary)


def suggestions_to_tasks(suggestions: Iterable[TaskSuggestion]) -> list[Task]:
    """Turn suggestions into unassigned ``To-do`` tasks with no due date."""
    return [
        Task(
            id=str(uuid.uuid4()),
            title=suggestion.title,
            priority=suggestion.priority,
            status=TaskStatus.TODO,
            due_date=None,
            assignee=None,
        )
        for suggestion in suggestions
    ]


def get_ai_service() -> AIService:
    """Factory function to create an AIService instance."""
    from taskpilot_cli.services.config_service import get_config_service

    return AIService(LanguageModelClient(get_config_service().config.ai))
