"""SQLAlchemy-backed store for prediction sessions.

Transitions go through ``conditional_update`` which only touches the row while it
still carries the expected status, so two racing writers cannot both win.
"""
import logging
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from psychic.models.prediction import Prediction
from psychic.schemas.prediction import STATUS_ORDER, PredictionSession, PredictionStatus

logger = logging.getLogger(__name__)

IMMUTABLE_FIELDS = frozenset({
    "id", "created_at", "label_a", "label_b", "picture_a", "picture_b", "binding_picture_id",
})


class PredictionStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self, prediction_id: str) -> PredictionSession | None:
        async with self._session_factory() as db:
            row = await db.get(Prediction, prediction_id)
            if row is None:
                return None
            return PredictionSession.model_validate(row)

    async def create(self, prediction: PredictionSession) -> None:
        async with self._session_factory() as db:
            db.add(Prediction(**prediction.model_dump(mode="json")))
            await db.commit()
        logger.info("Stored prediction %s", prediction.id)

    async def conditional_update(
        self,
        prediction_id: str,
        expected_status: PredictionStatus,
        patch: dict[str, Any],
    ) -> bool:
        """Apply ``patch`` only if the row is still in ``expected_status``.

        Returns False when the row is missing or another writer already moved it.
        """
        touched = IMMUTABLE_FIELDS & patch.keys()
        if touched:
            raise ValueError(f"Immutable fields cannot be updated: {sorted(touched)}")

        values = dict(patch)
        new_status = values.get("status")
        if new_status is not None:
            new_status = PredictionStatus(new_status)
            if STATUS_ORDER[new_status] <= STATUS_ORDER[expected_status]:
                raise ValueError(f"Status cannot move from {expected_status.value} to {new_status.value}")
            values["status"] = new_status.value

        async with self._session_factory() as db:
            result = await db.execute(
                update(Prediction)
                .where(Prediction.id == prediction_id, Prediction.status == expected_status.value)
                .values(**values)
            )
            applied = result.rowcount == 1
            await db.commit()

        if not applied:
            logger.info(
                "Conditional update on %s skipped: status is no longer %s",
                prediction_id, expected_status.value,
            )
        return applied

    async def delete(self, prediction_id: str) -> None:
        async with self._session_factory() as db:
            await db.execute(delete(Prediction).where(Prediction.id == prediction_id))
            await db.commit()
        logger.info("Deleted prediction %s", prediction_id)

    async def list_recent(self, limit: int) -> list[PredictionSession]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(Prediction)
                .order_by(Prediction.created_at.desc(), Prediction.id.desc())
                .limit(limit)
            )
            return [PredictionSession.model_validate(row) for row in result.scalars().all()]

    async def recent_picture_ids(self, limit: int) -> set[str]:
        """Ids of the pictures used by the ``limit`` most recent sessions."""
        if limit <= 0:
            return set()
        async with self._session_factory() as db:
            result = await db.execute(
                select(Prediction.picture_a, Prediction.picture_b)
                .order_by(Prediction.created_at.desc())
                .limit(limit)
            )
            used: set[str] = set()
            for picture_a, picture_b in result.all():
                used.add(picture_a["id"])
                used.add(picture_b["id"])
            return used
