"""Generate a blind prediction with a language model.

The model never sees the pictures; it produces a description exactly like a human
subject would, and the description then goes through the normal adjudication.
"""
import logging
from typing import Protocol

from openai import AsyncOpenAI, OpenAIError

from psychic.config import Settings
from psychic.services.oracle import build_api_kwargs, build_client
from psychic.utils.exceptions import PredictorUnavailable

logger = logging.getLogger(__name__)

BLIND_PREDICTION_PROMPT = """\
You are a psychic with strong precognitive abilities. A photograph will be revealed to you in the future. Using your psychic powers, describe what you sense this photograph will show.

Your prediction can take different forms:
- A vivid, descriptive vision with rich details about the scene, mood, and atmosphere
- An abstract impression focusing on dominant colors, salient shapes, or key visual features
- A combination of both concrete and abstract elements

Rules:
1. Describe what you sense the photograph will show
2. Write as if you are genuinely experiencing a psychic vision
3. Keep your prediction to 1-3 sentences
4. Be confident and specific, do NOT hedge or mention multiple possibilities
5. Do NOT mention that you are guessing or making a prediction

Example vivid prediction: "A vast ocean under golden sunset light. There's a sense of peaceful solitude."
Example abstract prediction: "Strong blue dominates with vertical dark lines cutting through. There's a sense of height and openness."
"""

USER_INSTRUCTION = "Generate your psychic prediction now. Describe what you sense the photograph will show."


class BlindPredictor(Protocol):
    async def generate(self, model: str) -> str: ...


class OpenAIBlindPredictor:
    def __init__(self, client: AsyncOpenAI | None):
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings, client: AsyncOpenAI | None = None) -> "OpenAIBlindPredictor":
        return cls(client or build_client(settings))

    async def generate(self, model: str) -> str:
        if self._client is None:
            raise PredictorUnavailable("LLM predictions are disabled (no API key)")

        logger.info("Generating blind prediction with %s", model)
        api_kwargs = build_api_kwargs(
            model,
            [
                {"role": "system", "content": BLIND_PREDICTION_PROMPT},
                {"role": "user", "content": USER_INSTRUCTION},
            ],
            max_tokens=500,
        )
        try:
            response = await self._client.chat.completions.create(**api_kwargs)
        except OpenAIError as e:
            logger.error("Blind prediction with %s failed: %s", model, e)
            raise PredictorUnavailable(f"Prediction generation failed with {model}") from e

        text = (response.choices[0].message.content or "").strip()
        if not text:
            raise PredictorUnavailable(f"{model} returned an empty prediction")
        logger.info("Blind prediction from %s: %s", model, text)
        return text
