"""Prediction session lifecycle: create -> predict -> reveal.

Every public operation returns a projected view (see ``projection.project``), so
callers never get hold of the binding or of sealed pictures.
"""
import logging
import random
import uuid
from datetime import datetime, timezone

from psychic.schemas.prediction import PredictionSession, PredictionStatus, SessionView, Verdict
from psychic.services.adjudicator import Adjudicator
from psychic.services.llm_predictor import BlindPredictor
from psychic.services.picture_source import PictureSource
from psychic.services.prediction_store import PredictionStore
from psychic.services.projection import project
from psychic.services.selector import SelectionPolicy, select_pair
from psychic.utils.exceptions import InvalidState, NotFound, ValidationError

logger = logging.getLogger(__name__)

_REVEALABLE = (PredictionStatus.CREATED, PredictionStatus.PREDICTION_MADE)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class PredictionService:
    def __init__(
        self,
        store: PredictionStore,
        source: PictureSource,
        adjudicator: Adjudicator,
        predictor: BlindPredictor | None = None,
        policy: SelectionPolicy = SelectionPolicy(),
        rng: random.Random | None = None,
        exclude_recent: int = 10,
        llm_models: list[str] | None = None,
        default_llm_model: str | None = None,
    ):
        self._store = store
        self._source = source
        self._adjudicator = adjudicator
        self._predictor = predictor
        self._policy = policy
        self._rng = rng or random.SystemRandom()
        self._exclude_recent = exclude_recent
        self._llm_models = list(llm_models or [])
        self._default_llm_model = default_llm_model

    async def _load(self, prediction_id: str) -> PredictionSession:
        session = await self._store.get(prediction_id)
        if session is None:
            raise NotFound()
        return session

    async def _reload_view(self, prediction_id: str) -> SessionView:
        return project(await self._load(prediction_id))

    # --- create ---

    async def create(self, label_a: str, label_b: str) -> SessionView:
        label_a, label_b = _clean(label_a), _clean(label_b)
        if not label_a or not label_b:
            raise ValidationError("Both label_a and label_b are required")
        if label_a == label_b:
            raise ValidationError("label_a and label_b must be different")

        excluded = await self._store.recent_picture_ids(self._exclude_recent)
        picture_a, picture_b = await select_pair(self._source, excluded, self._policy)

        now = _now()
        session = PredictionSession(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            status=PredictionStatus.CREATED,
            label_a=label_a,
            label_b=label_b,
            picture_a=picture_a,
            picture_b=picture_b,
            binding_picture_id=self._rng.choice([picture_a.id, picture_b.id]),
        )
        await self._store.create(session)
        logger.info("Created prediction %s (%s vs %s)", session.id, label_a, label_b)
        return project(session)

    # --- predict ---

    def _verdict_patch(self, session: PredictionSession, verdict: Verdict) -> dict:
        matched_label = None
        if verdict.matched_picture == "A":
            matched_label = session.label_for_picture(session.picture_a.id)
        elif verdict.matched_picture == "B":
            matched_label = session.label_for_picture(session.picture_b.id)
        return {
            "matched_label": matched_label,
            "confidence_score": verdict.confidence,
            "reasoning": verdict.reasoning,
            "analysis_a": verdict.analysis_a,
            "analysis_b": verdict.analysis_b,
        }

    async def _commit_prediction(
        self,
        session: PredictionSession,
        text: str | None,
        sketch_ref: str | None,
        model: str | None = None,
    ) -> SessionView:
        verdict = await self._adjudicator.adjudicate(text, sketch_ref, session.picture_a, session.picture_b)
        if verdict.degraded:
            logger.warning("Recording degraded verdict for prediction %s", session.id)

        now = _now()
        patch = {
            "status": PredictionStatus.PREDICTION_MADE,
            "prediction_text": text,
            "prediction_sketch_ref": sketch_ref,
            "prediction_model": model,
            "prediction_timestamp": now,
            "updated_at": now,
            **self._verdict_patch(session, verdict),
        }
        if not await self._store.conditional_update(session.id, PredictionStatus.CREATED, patch):
            raise InvalidState("Prediction has already been submitted or revealed")

        logger.info("Prediction %s recorded, matched=%s", session.id, patch["matched_label"])
        return await self._reload_view(session.id)

    async def predict(self, prediction_id: str, text: str | None = None, sketch_ref: str | None = None) -> SessionView:
        text, sketch_ref = _clean(text), _clean(sketch_ref)
        if not text and not sketch_ref:
            raise ValidationError("At least one of prediction_text or prediction_sketch_ref is required")

        session = await self._load(prediction_id)
        if session.status is not PredictionStatus.CREATED:
            raise InvalidState("Prediction has already been submitted or revealed")
        return await self._commit_prediction(session, text, sketch_ref)

    async def llm_predict(self, prediction_id: str, model: str | None = None) -> SessionView:
        model = _clean(model) or self._default_llm_model
        if self._predictor is None:
            raise ValidationError("LLM predictions are not enabled")
        if model not in self._llm_models:
            raise ValidationError(f"model must be one of: {', '.join(self._llm_models)}")

        session = await self._load(prediction_id)
        if session.status is not PredictionStatus.CREATED:
            raise InvalidState("Prediction has already been submitted or revealed")

        text = await self._predictor.generate(model)
        return await self._commit_prediction(session, text, None, model=model)

    async def test(self, prediction_id: str, text: str) -> Verdict:
        """Compare ``text`` with the session pictures without recording anything.

        The verdict names a picture slot, not a label, so it cannot be combined
        with an inspected view to recover the binding.
        """
        text = _clean(text)
        if not text:
            raise ValidationError("prediction_text is required")
        session = await self._load(prediction_id)
        return await self._adjudicator.adjudicate(text, None, session.picture_a, session.picture_b)

    # --- reveal ---

    async def reveal(self, prediction_id: str, winning_label: str) -> SessionView:
        winning_label = _clean(winning_label)
        if not winning_label:
            raise ValidationError("winning_label is required")

        session = await self._load(prediction_id)
        if winning_label not in session.labels:
            raise ValidationError(
                f'winning_label must be either "{session.label_a}" or "{session.label_b}"'
            )
        if session.status not in _REVEALABLE:
            raise InvalidState("Prediction has already been revealed")

        now = _now()
        patch = {
            "status": PredictionStatus.REVEALED,
            "winning_label": winning_label,
            "revealed_picture_id": session.picture_for_label(winning_label).id,
            "reveal_timestamp": now,
            "updated_at": now,
        }
        if not await self._store.conditional_update(session.id, session.status, patch):
            raise InvalidState("Prediction changed while revealing, reload and retry")

        logger.info("Prediction %s revealed for %s", session.id, winning_label)
        return await self._reload_view(session.id)

    # --- reads / delete ---

    async def get(self, prediction_id: str, inspect: bool = False) -> SessionView:
        return project(await self._load(prediction_id), inspect=inspect)

    async def list(self, limit: int) -> list[SessionView]:
        if limit < 1:
            raise ValidationError("limit must be positive")
        return [project(s) for s in await self._store.list_recent(limit)]

    async def delete(self, prediction_id: str) -> None:
        await self._load(prediction_id)
        await self._store.delete(prediction_id)

    async def aclose(self) -> None:
        # the blind predictor shares the oracle's OpenAI client
        if hasattr(self._source, "aclose"):
            await self._source.aclose()
        await self._adjudicator.aclose()
