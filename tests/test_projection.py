from fakes import make_picture
from psychic.schemas.prediction import (
    InspectedSessionView,
    PredictionSession,
    PredictionStatus,
    RevealedSessionView,
    SealedSessionView,
)
from psychic.services.projection import project

PICTURE_A = make_picture("a", "#ff8800", "orange sunset")
PICTURE_B = make_picture("b", "#0044aa", "blue lake")
HIDDEN = {"picture_a", "picture_b", "binding_picture_id"}


def _session(status=PredictionStatus.CREATED, binding="a", **extra):
    return PredictionSession(
        id="s-1",
        created_at="2026-10-01T10:00:00+00:00",
        updated_at="2026-10-01T10:00:00+00:00",
        status=status,
        label_a="Vikings",
        label_b="Packers",
        picture_a=PICTURE_A,
        picture_b=PICTURE_B,
        binding_picture_id=binding,
        **extra,
    )


def test_sealed_views_hide_pictures_and_binding():
    for status, extra in [
        (PredictionStatus.CREATED, {}),
        (PredictionStatus.PREDICTION_MADE, {"prediction_text": "orange", "matched_label": "Vikings", "confidence_score": 80}),
    ]:
        view = project(_session(status, **extra))
        assert isinstance(view, SealedSessionView)
        dumped = view.model_dump(mode="json")
        assert not HIDDEN & dumped.keys()
        assert "revealed_picture" not in dumped
        assert dumped["status"] == status.value


def test_verdict_fields_included_once_present():
    view = project(_session(
        PredictionStatus.PREDICTION_MADE,
        prediction_text="orange glow",
        matched_label="Packers",
        confidence_score=60,
        reasoning="orange only in one picture",
    ))
    dumped = view.model_dump(mode="json")
    assert dumped["matched_label"] == "Packers"
    assert dumped["confidence_score"] == 60
    assert dumped["prediction_text"] == "orange glow"


def test_inspect_shows_pictures_but_not_binding():
    view = project(_session(), inspect=True)
    assert isinstance(view, InspectedSessionView)
    dumped = view.model_dump(mode="json")
    assert dumped["picture_a"]["id"] == "a"
    assert dumped["picture_b"]["id"] == "b"
    assert "binding_picture_id" not in dumped
    assert dumped["view"] == "inspected"


def test_revealed_view_has_only_the_revealed_picture():
    session = _session(
        PredictionStatus.REVEALED,
        binding="b",
        winning_label="Vikings",
        revealed_picture_id="b",
    )
    for inspect in (False, True):
        view = project(session, inspect=inspect)
        assert isinstance(view, RevealedSessionView)
        dumped = view.model_dump(mode="json")
        assert not HIDDEN & dumped.keys()
        assert dumped["revealed_picture"]["id"] == "b"
        assert dumped["winning_label"] == "Vikings"
