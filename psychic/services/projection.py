"""Decide what part of a prediction session may leave the API.

``project`` is the only function that turns a ``PredictionSession`` into
something serializable. Until the reveal, neither picture is exposed unless the
caller explicitly asks to inspect them, and the binding is never exposed.
"""
from psychic.schemas.prediction import (
    InspectedSessionView,
    PredictionSession,
    PredictionStatus,
    RevealedSessionView,
    SealedSessionView,
    SessionView,
)

_SHARED_FIELDS = (
    "id", "created_at", "updated_at", "label_a", "label_b",
    "prediction_text", "prediction_sketch_ref", "prediction_model", "prediction_timestamp",
    "matched_label", "confidence_score", "reasoning", "analysis_a", "analysis_b",
)


def _shared(session: PredictionSession) -> dict:
    return {name: getattr(session, name) for name in _SHARED_FIELDS}


def project(session: PredictionSession, inspect: bool = False) -> SessionView:
    if session.status is PredictionStatus.REVEALED:
        return RevealedSessionView(
            **_shared(session),
            status=session.status,
            winning_label=session.winning_label,
            revealed_picture_id=session.revealed_picture_id,
            reveal_timestamp=session.reveal_timestamp,
            revealed_picture=session.revealed_picture,
        )

    if inspect:
        return InspectedSessionView(
            **_shared(session),
            status=session.status,
            picture_a=session.picture_a,
            picture_b=session.picture_b,
        )

    return SealedSessionView(**_shared(session), status=session.status)
