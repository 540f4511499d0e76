"""Turn the reasoning oracle's free-form answer into a ``Verdict``.

Whatever goes wrong on the oracle side (error, timeout, garbage output) ends in a
degraded verdict with no match and zero confidence. Nothing is raised.
"""
import asyncio
import json
import logging
import re

from pydantic import BaseModel, Field, field_validator

from psychic.schemas.picture import Picture
from psychic.schemas.prediction import Verdict
from psychic.services.oracle import ReasoningOracle

logger = logging.getLogger(__name__)

_SLOTS = {
    "picture1": "A", "picture_1": "A", "a": "A", "1": "A",
    "picture2": "B", "picture_2": "B", "b": "B", "2": "B",
}
_NO_MATCH = {"", "none", "null", "no_match", "nomatch"}


class OracleAnswer(BaseModel):
    matched_picture: str | None = Field(default=None, alias="matchedPicture")
    confidence_score: float = Field(alias="confidenceScore", ge=0, le=100)
    reasoning: str = ""
    picture1_analysis: str = Field(default="", alias="picture1Analysis")
    picture2_analysis: str = Field(default="", alias="picture2Analysis")

    @field_validator("matched_picture", mode="before")
    @classmethod
    def _normalize_slot(cls, value):
        if value is None:
            return None
        key = str(value).strip().lower()
        if key in _NO_MATCH:
            return None
        if key not in _SLOTS:
            raise ValueError(f"unknown picture reference {value!r}")
        return _SLOTS[key]


def mask_secrets(message: str) -> str:
    return re.sub(r"sk-[A-Za-z0-9_-]+", "sk-***", message)


def _extract_json(raw: str) -> str:
    text = raw.strip()
    if text.startswith("```"):
        lines = [l for l in text.split("\n") if not l.strip().startswith("```")]
        text = "\n".join(lines).strip()
    if not text.startswith("{"):
        match = re.search(r"\{.*\}", text, re.DOTALL)
        if not match:
            raise ValueError("no JSON object in oracle response")
        text = match.group(0)
    return text


def parse_verdict(raw: str) -> Verdict:
    """Parse raw oracle output. Raises ValueError when it does not fit the contract."""
    answer = OracleAnswer.model_validate(json.loads(_extract_json(raw)))
    return Verdict(
        matched_picture=answer.matched_picture,
        confidence=round(answer.confidence_score),
        reasoning=answer.reasoning,
        analysis_a=answer.picture1_analysis,
        analysis_b=answer.picture2_analysis,
    )


def degraded_verdict(diagnostic: str) -> Verdict:
    return Verdict(
        matched_picture=None,
        confidence=0,
        reasoning=diagnostic,
        analysis_a=diagnostic,
        analysis_b=diagnostic,
        degraded=True,
    )


class Adjudicator:
    def __init__(self, oracle: ReasoningOracle, timeout_seconds: float = 60.0):
        self._oracle = oracle
        self._timeout = timeout_seconds

    async def aclose(self) -> None:
        if hasattr(self._oracle, "aclose"):
            await self._oracle.aclose()

    async def adjudicate(
        self,
        text: str | None,
        sketch_ref: str | None,
        picture_a: Picture,
        picture_b: Picture,
    ) -> Verdict:
        if not text and not sketch_ref:
            return degraded_verdict("No prediction content to compare")

        try:
            raw = await asyncio.wait_for(
                self._oracle.compare(text, sketch_ref, picture_a, picture_b),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Oracle timed out after %.1fs", self._timeout)
            return degraded_verdict(f"Comparison timed out after {self._timeout:g}s")
        except Exception as e:
            logger.exception("Oracle call failed: %s", mask_secrets(str(e)))
            return degraded_verdict(f"Comparison failed: {mask_secrets(str(e))}")

        try:
            verdict = parse_verdict(raw)
        except (ValueError, RecursionError) as e:
            logger.warning("Unparsable oracle response: %s | raw=%s", e, raw[:500])
            return degraded_verdict("Comparison returned an unreadable verdict")

        logger.info("Verdict: picture=%s confidence=%d", verdict.matched_picture, verdict.confidence)
        return verdict
