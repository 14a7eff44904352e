"""Transport to the text-generation API."""
from __future__ import annotations

import logging
from typing import Optional

import openai

from lifepilot.core.config import settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are LifePilot, an AI lifestyle coach. Reply with a single JSON object."


class GenerationError(Exception):
    """The generation API could not produce a response."""


class GenerationClient:
    def generate(self, prompt: str) -> str:
        raise NotImplementedError


class OpenAIGenerationClient(GenerationClient):
    def __init__(
        self,
        client: Optional[openai.OpenAI] = None,
        *,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
    ) -> None:
        self.client = client or openai.OpenAI(
            api_key=api_key or settings.openai_api_key,
            timeout=settings.generation_timeout_seconds,
        )
        self.model = model or settings.openai_model

    def generate(self, prompt: str) -> str:
        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                temperature=settings.generation_temperature,
                max_tokens=settings.generation_max_tokens,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
            )
        except openai.OpenAIError as exc:
            logger.warning("Generation request failed: %s", exc)
            raise GenerationError(str(exc)) from exc

        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""


def get_generation_client() -> Optional[GenerationClient]:
    """Return a configured client, or ``None`` when no API key is set."""
    if not settings.openai_api_key:
        logger.info("OPENAI_API_KEY missing; analyses will use the placeholder.")
        return None
    return OpenAIGenerationClient(api_key=settings.openai_api_key)
