"""Text-generation collaborator backed by the OpenAI SDK.

Both calls are fallible and slow. They raise ``CollaboratorError`` and leave
it to the caller to decide whether the failure is worth surfacing.
"""

import logging
from typing import Protocol

import openai
from pydantic import ValidationError

from talks.ai_config import AIConfig, AIPrompts
from talks.config import settings
from talks.errors import CollaboratorError
from talks.models import SessionDraft

LOGGER = logging.getLogger("talks.advisor")


class Advisor(Protocol):
    async def draft_session(self, topic: str) -> SessionDraft: ...

    async def advise(self, query: str) -> str: ...


class OpenAIAdvisor:
    def __init__(self, client: openai.AsyncOpenAI | None = None):
        self._client = client

    @property
    def client(self) -> openai.AsyncOpenAI:
        if self._client is None:
            if not settings.openai_api_key:
                raise CollaboratorError("Text generation is not configured.")
            self._client = openai.AsyncOpenAI(api_key=settings.openai_api_key)
        return self._client

    async def draft_session(self, topic: str) -> SessionDraft:
        try:
            response = await self.client.responses.create(
                model=AIConfig.MODELS["session_draft"],
                input=AIPrompts.SESSION_DRAFT.format(topic=topic),
                text={"format": {"type": "json_object"}},
            )
            return SessionDraft.model_validate_json(response.output_text)
        except ValidationError as e:
            LOGGER.error("Session draft for %r was malformed: %s", topic, e)
            raise CollaboratorError("Draft generation returned an unusable answer.")
        except openai.OpenAIError as e:
            LOGGER.error("Session draft for %r failed: %s", topic, e, exc_info=True)
            raise CollaboratorError("Draft generation failed.")

    async def advise(self, query: str) -> str:
        try:
            response = await self.client.responses.create(
                model=AIConfig.MODELS["live_advice"],
                input=AIPrompts.LIVE_ADVICE.format(query=query),
            )
            return response.output_text.strip()
        except openai.OpenAIError as e:
            LOGGER.error("Live advice failed: %s", e, exc_info=True)
            raise CollaboratorError("Advice generation failed.")
