import logging
import os
from typing import Protocol

from openai import AsyncOpenAI, OpenAIError

from psychic.config import Settings
from psychic.schemas.picture import Picture
from psychic.utils.exceptions import OracleFailure

logger = logging.getLogger(__name__)

PROMPT_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(__file__))),
    "prompts",
    "prediction_comparison.txt",
)


class ReasoningOracle(Protocol):
    async def compare(
        self,
        text: str | None,
        sketch_ref: str | None,
        picture_a: Picture,
        picture_b: Picture,
    ) -> str: ...


def _load_prompt() -> str:
    with open(PROMPT_PATH) as f:
        return f.read()


def build_client(settings: Settings) -> AsyncOpenAI | None:
    if not settings.openai_api_key:
        return None
    kwargs = {"api_key": settings.openai_api_key, "timeout": settings.oracle_timeout_seconds}
    if settings.openai_base_url:
        kwargs["base_url"] = settings.openai_base_url
    return AsyncOpenAI(**kwargs)


def build_api_kwargs(model: str, messages: list[dict], max_tokens: int = 1024) -> dict:
    """Build chat completion kwargs based on model type."""
    api_kwargs: dict = {"model": model, "messages": messages}

    if model.startswith("o"):
        # o-series reasoning models: no temperature, max_completion_tokens only
        api_kwargs["max_completion_tokens"] = max_tokens * 4
    else:
        api_kwargs["max_tokens"] = max_tokens
        api_kwargs["temperature"] = 0.1

    return api_kwargs


def _image_part(url: str, detail: str) -> dict:
    return {"type": "image_url", "image_url": {"url": url, "detail": detail}}


class OpenAIVisionOracle:
    """Compares a prediction with two pictures using an OpenAI vision model."""

    def __init__(self, client: AsyncOpenAI | None, model: str, image_detail: str = "low"):
        self._client = client
        self._model = model
        self._image_detail = image_detail
        self._prompt = _load_prompt()

    @classmethod
    def from_settings(cls, settings: Settings, client: AsyncOpenAI | None = None) -> "OpenAIVisionOracle":
        return cls(client or build_client(settings), settings.openai_model, settings.oracle_image_detail)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()

    def build_content(
        self,
        text: str | None,
        sketch_ref: str | None,
        picture_a: Picture,
        picture_b: Picture,
    ) -> list[dict]:
        intro = ""
        if text:
            intro += f'Text prediction:\n"{text}"\n\n'
        intro += f"Picture 1 description: {picture_a.description or 'No description'}\n"
        intro += f"Picture 2 description: {picture_b.description or 'No description'}\n"

        content: list[dict] = [
            {"type": "text", "text": self._prompt},
            {"type": "text", "text": intro},
            _image_part(picture_a.preview_ref, self._image_detail),
            {"type": "text", "text": "Picture 1 shown above"},
            _image_part(picture_b.preview_ref, self._image_detail),
            {"type": "text", "text": "Picture 2 shown above"},
        ]
        if sketch_ref:
            content.append(_image_part(sketch_ref, self._image_detail))
            content.append({"type": "text", "text": "Sketch prediction shown above"})
        return content

    async def compare(
        self,
        text: str | None,
        sketch_ref: str | None,
        picture_a: Picture,
        picture_b: Picture,
    ) -> str:
        if self._client is None:
            raise OracleFailure("OPENAI_API_KEY not configured")

        content = self.build_content(text, sketch_ref, picture_a, picture_b)
        api_kwargs = build_api_kwargs(self._model, [{"role": "user", "content": content}])
        logger.info("Calling OpenAI model=%s, sketch=%s", self._model, bool(sketch_ref))

        try:
            response = await self._client.chat.completions.create(**api_kwargs)
        except OpenAIError as e:
            raise OracleFailure(f"OpenAI request failed: {e}") from e

        raw_text = response.choices[0].message.content or ""
        logger.info("OpenAI raw response (%d chars): %s", len(raw_text), raw_text[:500])
        return raw_text
