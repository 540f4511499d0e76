"""Prediction session entity, request bodies and the views that leave the API.

The entity (``PredictionSession``) holds the secret binding and both pictures and
must never be serialized directly. Outbound data goes through
``psychic.services.projection.project`` which produces one of the tagged
``SessionView`` variants below.
"""
import enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, model_validator

from psychic.schemas.picture import Picture


class PredictionStatus(str, enum.Enum):
    CREATED = "created"
    PREDICTION_MADE = "prediction_made"
    REVEALED = "revealed"


STATUS_ORDER = {
    PredictionStatus.CREATED: 0,
    PredictionStatus.PREDICTION_MADE: 1,
    PredictionStatus.REVEALED: 2,
}


class PredictionSession(BaseModel):
    id: str
    created_at: str
    updated_at: str
    status: PredictionStatus = PredictionStatus.CREATED

    label_a: str
    label_b: str
    picture_a: Picture
    picture_b: Picture
    binding_picture_id: str

    prediction_text: str | None = None
    prediction_sketch_ref: str | None = None
    prediction_model: str | None = None
    prediction_timestamp: str | None = None

    matched_label: str | None = None
    confidence_score: int | None = Field(default=None, ge=0, le=100)
    reasoning: str | None = None
    analysis_a: str | None = None
    analysis_b: str | None = None

    winning_label: str | None = None
    revealed_picture_id: str | None = None
    reveal_timestamp: str | None = None

    model_config = {"from_attributes": True}

    @model_validator(mode="after")
    def _check_invariants(self) -> "PredictionSession":
        if not self.label_a or not self.label_b or self.label_a == self.label_b:
            raise ValueError("labels must be non-empty and distinct")
        if self.picture_a.id == self.picture_b.id:
            raise ValueError("picture_a and picture_b must differ")
        if self.binding_picture_id not in (self.picture_a.id, self.picture_b.id):
            raise ValueError("binding_picture_id must reference one of the two pictures")
        labels = (self.label_a, self.label_b)
        if self.matched_label is not None and self.matched_label not in labels:
            raise ValueError("matched_label must be one of the session labels")
        if self.winning_label is not None:
            if self.winning_label not in labels:
                raise ValueError("winning_label must be one of the session labels")
            if self.revealed_picture_id != self.picture_for_label(self.winning_label).id:
                raise ValueError("revealed_picture_id does not follow the binding")
        return self

    @property
    def labels(self) -> tuple[str, str]:
        return self.label_a, self.label_b

    def picture_for_label(self, label: str) -> Picture:
        """Resolve the binding: label_a owns the bound picture, label_b the other one."""
        bound, other = (
            (self.picture_a, self.picture_b)
            if self.binding_picture_id == self.picture_a.id
            else (self.picture_b, self.picture_a)
        )
        if label == self.label_a:
            return bound
        if label == self.label_b:
            return other
        raise KeyError(label)

    def label_for_picture(self, picture_id: str) -> str:
        if picture_id not in (self.picture_a.id, self.picture_b.id):
            raise KeyError(picture_id)
        return self.label_a if picture_id == self.binding_picture_id else self.label_b

    @property
    def revealed_picture(self) -> Picture | None:
        if self.revealed_picture_id is None:
            return None
        if self.revealed_picture_id == self.picture_a.id:
            return self.picture_a
        return self.picture_b


# --- adjudication ---

class Verdict(BaseModel):
    """Adjudicator output, expressed in picture slots rather than labels."""

    matched_picture: Literal["A", "B"] | None = None
    confidence: int = Field(default=0, ge=0, le=100)
    reasoning: str = ""
    analysis_a: str = ""
    analysis_b: str = ""
    degraded: bool = False


# --- requests ---

class CreatePredictionRequest(BaseModel):
    label_a: str
    label_b: str


class SubmitPredictionRequest(BaseModel):
    prediction_text: str | None = None
    prediction_sketch_ref: str | None = None


class LlmPredictionRequest(BaseModel):
    model: str | None = None


class CompareRequest(BaseModel):
    prediction_text: str


class RevealPredictionRequest(BaseModel):
    winning_label: str


# --- views ---

class _SessionViewBase(BaseModel):
    id: str
    created_at: str
    updated_at: str
    label_a: str
    label_b: str

    prediction_text: str | None = None
    prediction_sketch_ref: str | None = None
    prediction_model: str | None = None
    prediction_timestamp: str | None = None
    matched_label: str | None = None
    confidence_score: int | None = None
    reasoning: str | None = None
    analysis_a: str | None = None
    analysis_b: str | None = None

    model_config = {"extra": "forbid"}


class SealedSessionView(_SessionViewBase):
    view: Literal["sealed"] = "sealed"
    status: Literal[PredictionStatus.CREATED, PredictionStatus.PREDICTION_MADE]


class InspectedSessionView(_SessionViewBase):
    """Pictures visible before the reveal. The binding stays hidden."""

    view: Literal["inspected"] = "inspected"
    status: Literal[PredictionStatus.CREATED, PredictionStatus.PREDICTION_MADE]
    picture_a: Picture
    picture_b: Picture


class RevealedSessionView(_SessionViewBase):
    view: Literal["revealed"] = "revealed"
    status: Literal[PredictionStatus.REVEALED]
    winning_label: str
    revealed_picture_id: str
    reveal_timestamp: str | None = None
    revealed_picture: Picture


SessionView = Annotated[
    Union[SealedSessionView, InspectedSessionView, RevealedSessionView],
    Field(discriminator="view"),
]
