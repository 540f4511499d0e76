"""Random candidate pictures from the Pexels curated feed.

A candidate is a random photo from a random page, so the pool holds up to
``max_page * per_page`` photos.

https://www.pexels.com/api/documentation/
"""
import logging
import random
from typing import Protocol

import httpx

from psychic.config import Settings
from psychic.schemas.picture import Picture, PictureAttribution
from psychic.utils.exceptions import SourceUnavailable

logger = logging.getLogger(__name__)


class PictureSource(Protocol):
    async def fetch_random_candidate(self) -> Picture: ...


class PexelsPictureSource:
    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        max_page: int = 100,
        per_page: int = 80,
        rng: random.Random | None = None,
    ):
        self._client = client
        self._api_key = api_key
        self._max_page = max_page
        self._per_page = per_page
        self._rng = rng or random.SystemRandom()

    @classmethod
    def from_settings(cls, settings: Settings) -> "PexelsPictureSource":
        if not settings.pexels_api_key:
            logger.warning("PEXELS_API_KEY not set, picture fetching will fail")
        client = httpx.AsyncClient(
            base_url=settings.pexels_api_url,
            timeout=settings.picture_source_timeout_seconds,
        )
        return cls(
            client,
            settings.pexels_api_key,
            max_page=settings.pexels_max_page,
            per_page=settings.pexels_per_page,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_random_candidate(self) -> Picture:
        if not self._api_key:
            raise SourceUnavailable("Picture source is not configured")

        page = self._rng.randint(1, self._max_page)
        try:
            response = await self._client.get(
                "/curated",
                params={"page": page, "per_page": self._per_page},
                headers={"Authorization": self._api_key},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("Pexels returned %s for page %d", e.response.status_code, page)
            raise SourceUnavailable(f"Picture source error: {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Pexels request failed for page %d: %s", page, e)
            raise SourceUnavailable("Picture source unreachable") from e

        photos = payload.get("photos") or []
        if not photos:
            raise SourceUnavailable("Picture source returned no photos")
        return _picture_from_pexels(self._rng.choice(photos))


def _picture_from_pexels(photo: dict) -> Picture:
    src = photo.get("src") or {}
    attribution = None
    if photo.get("photographer"):
        attribution = PictureAttribution(
            photographer=photo["photographer"],
            photographer_url=photo.get("photographer_url"),
        )
    return Picture(
        id=str(photo["id"]),
        image_ref=src.get("original") or photo.get("url", ""),
        thumbnail_ref=src.get("medium"),
        description=photo.get("alt") or None,
        avg_color=photo.get("avg_color") or None,
        attribution=attribution,
    )
