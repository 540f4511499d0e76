"""Deterministic stand-ins for the picture source, oracle and blind predictor."""
import asyncio
import json
import random

from psychic.schemas.picture import Picture
from psychic.utils.exceptions import SourceUnavailable


def make_picture(picture_id: str, avg_color: str | None = None, description: str | None = None) -> Picture:
    return Picture(
        id=picture_id,
        image_ref=f"https://images.example.com/{picture_id}.jpg",
        thumbnail_ref=f"https://images.example.com/{picture_id}-medium.jpg",
        description=description,
        avg_color=avg_color,
    )


class SequenceSource:
    """Returns the given pictures in order, then fails."""

    def __init__(self, pictures):
        self.pictures = list(pictures)
        self.calls = 0

    async def fetch_random_candidate(self) -> Picture:
        if self.calls >= len(self.pictures):
            raise SourceUnavailable("fixture exhausted")
        picture = self.pictures[self.calls]
        self.calls += 1
        return picture


class EndlessSource:
    """Alternates black and white pictures with fresh ids, so every pair is accepted."""

    def __init__(self):
        self.calls = 0

    async def fetch_random_candidate(self) -> Picture:
        self.calls += 1
        color = "#000000" if self.calls % 2 else "#ffffff"
        return make_picture(f"pic-{self.calls}", avg_color=color)


def oracle_json(picture="picture1", confidence=85, reasoning="orange glow only in picture 1"):
    return json.dumps({
        "matchedPicture": picture,
        "confidenceScore": confidence,
        "reasoning": reasoning,
        "picture1Analysis": "orange sunset over mountains",
        "picture2Analysis": "blue lake with pine trees",
    })


class FakeOracle:
    def __init__(self, response=None, delay: float = 0):
        self.response = oracle_json() if response is None else response
        self.delay = delay
        self.calls = []
        self.closed = False

    async def compare(self, text, sketch_ref, picture_a, picture_b) -> str:
        self.calls.append((text, sketch_ref, picture_a.id, picture_b.id))
        if self.delay:
            await asyncio.sleep(self.delay)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response

    async def aclose(self) -> None:
        self.closed = True


class FakePredictor:
    def __init__(self, text="A vast ocean under golden sunset light."):
        self.text = text
        self.models = []

    async def generate(self, model: str) -> str:
        self.models.append(model)
        return self.text


class FixedChoice:
    """RNG stand-in: always binds label_a to the picture at ``index``."""

    def __init__(self, index: int):
        self.index = index

    def choice(self, seq):
        return seq[self.index]


class PoolSource:
    """Draws uniformly, with a seeded RNG, from a fixed pool of ``size`` pictures."""

    def __init__(self, size: int, seed: int = 0):
        self.pictures = [make_picture(f"pool-{i}") for i in range(size)]
        self.rng = random.Random(seed)
        self.closed = False

    async def fetch_random_candidate(self) -> Picture:
        return self.rng.choice(self.pictures)

    async def aclose(self) -> None:
        self.closed = True
