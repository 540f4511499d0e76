"""Pick two candidate pictures that look different enough to tell apart.

A pair is accepted only when both metadata checks pass. A check whose metadata is
missing on either picture is skipped rather than counted as a pass or a fail.
"""
import logging
import math
import re
from dataclasses import dataclass
from typing import Collection

from psychic.config import Settings
from psychic.schemas.picture import Picture
from psychic.services.picture_source import PictureSource
from psychic.utils.exceptions import SelectionExhausted

logger = logging.getLogger(__name__)

MAX_RGB_DISTANCE = math.sqrt(255 ** 2 * 3)

_HEX_COLOR = re.compile(r"^#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})$", re.IGNORECASE)


@dataclass(frozen=True)
class SelectionPolicy:
    max_attempts: int = 10
    max_resamples: int = 5
    min_color_distance: float = 0.30
    max_description_similarity: float = 0.50

    @classmethod
    def from_settings(cls, settings: Settings) -> "SelectionPolicy":
        return cls(
            max_attempts=settings.selection_max_attempts,
            max_resamples=settings.selection_max_resamples,
            min_color_distance=settings.selection_min_color_distance,
            max_description_similarity=settings.selection_max_description_similarity,
        )


def parse_hex_color(value: str | None) -> tuple[int, int, int] | None:
    if not value:
        return None
    match = _HEX_COLOR.match(value.strip())
    if not match:
        return None
    return tuple(int(part, 16) for part in match.groups())


def color_distance(color_a: str | None, color_b: str | None) -> float | None:
    """Normalized RGB distance in [0, 1], or None if either color is unusable."""
    rgb_a = parse_hex_color(color_a)
    rgb_b = parse_hex_color(color_b)
    if rgb_a is None or rgb_b is None:
        return None
    return math.dist(rgb_a, rgb_b) / MAX_RGB_DISTANCE


def lexical_similarity(text_a: str | None, text_b: str | None) -> float | None:
    """Jaccard similarity of lower-cased whitespace tokens, or None if either text is empty."""
    words_a = set(text_a.lower().split()) if text_a else set()
    words_b = set(text_b.lower().split()) if text_b else set()
    if not words_a or not words_b:
        return None
    return len(words_a & words_b) / len(words_a | words_b)


def rejection_reason(first: Picture, second: Picture, policy: SelectionPolicy) -> str | None:
    """Why the pair is too similar, or None when it is acceptable."""
    distance = color_distance(first.avg_color, second.avg_color)
    if distance is not None and distance < policy.min_color_distance:
        return f"colors too similar ({distance:.3f})"

    similarity = lexical_similarity(first.description, second.description)
    if similarity is not None and similarity > policy.max_description_similarity:
        return f"descriptions too similar ({similarity:.3f})"

    return None


def are_dissimilar(first: Picture, second: Picture, policy: SelectionPolicy) -> bool:
    return rejection_reason(first, second, policy) is None


async def _fetch_slot(
    source: PictureSource,
    excluded_ids: Collection[str],
    max_resamples: int,
) -> Picture | None:
    candidate = await source.fetch_random_candidate()
    resamples = 0
    while candidate.id in excluded_ids:
        if resamples >= max_resamples:
            return None
        candidate = await source.fetch_random_candidate()
        resamples += 1
    return candidate


async def select_pair(
    source: PictureSource,
    excluded_ids: Collection[str] = frozenset(),
    policy: SelectionPolicy = SelectionPolicy(),
) -> tuple[Picture, Picture]:
    """Return two distinct, non-excluded, dissimilar pictures.

    The first picture is kept across attempts; after a rejection only the second
    one is redrawn. Raises SelectionExhausted once ``policy.max_attempts`` outer
    attempts are spent. Source errors propagate unchanged.
    """
    first: Picture | None = None

    for attempt in range(1, policy.max_attempts + 1):
        if first is None:
            first = await _fetch_slot(source, excluded_ids, policy.max_resamples)
            if first is None:
                logger.info("Attempt %d: no usable first picture", attempt)
                continue

        second = await _fetch_slot(source, {*excluded_ids, first.id}, policy.max_resamples)
        if second is None:
            logger.info("Attempt %d: no usable second picture", attempt)
            continue

        reason = rejection_reason(first, second, policy)
        if reason is None:
            logger.info("Found dissimilar pictures after %d attempts", attempt)
            return first, second
        logger.info("Attempt %d: pictures %s/%s rejected, %s", attempt, first.id, second.id, reason)

    raise SelectionExhausted(
        f"Could not find two dissimilar pictures after {policy.max_attempts} attempts"
    )
