from fastapi import APIRouter, Depends, Query

from psychic.config import settings
from psychic.dependencies import get_prediction_service
from psychic.schemas.prediction import (
    CompareRequest,
    CreatePredictionRequest,
    LlmPredictionRequest,
    RevealPredictionRequest,
    SubmitPredictionRequest,
)
from psychic.services.prediction_service import PredictionService
from psychic.utils.response import list_response, success_response

router = APIRouter(prefix="/predictions", tags=["predictions"])


def _dump(view) -> dict:
    return view.model_dump(mode="json")


@router.post("", status_code=201)
async def create_prediction(
    payload: CreatePredictionRequest,
    service: PredictionService = Depends(get_prediction_service),
):
    view = await service.create(payload.label_a, payload.label_b)
    return success_response(data=_dump(view))


@router.get("")
async def list_predictions(
    limit: int = Query(default=settings.list_default_limit, ge=1, le=settings.list_max_limit),
    service: PredictionService = Depends(get_prediction_service),
):
    views = await service.list(limit)
    return list_response([_dump(v) for v in views])


@router.get("/{prediction_id}")
async def get_prediction(
    prediction_id: str,
    inspect: bool = False,
    service: PredictionService = Depends(get_prediction_service),
):
    view = await service.get(prediction_id, inspect=inspect)
    return success_response(data=_dump(view))


@router.post("/{prediction_id}/predict")
async def submit_prediction(
    prediction_id: str,
    payload: SubmitPredictionRequest,
    service: PredictionService = Depends(get_prediction_service),
):
    view = await service.predict(prediction_id, payload.prediction_text, payload.prediction_sketch_ref)
    return success_response(data=_dump(view))


@router.post("/{prediction_id}/llm-predict")
async def llm_prediction(
    prediction_id: str,
    payload: LlmPredictionRequest,
    service: PredictionService = Depends(get_prediction_service),
):
    view = await service.llm_predict(prediction_id, payload.model)
    return success_response(data=_dump(view))


@router.post("/{prediction_id}/test")
async def test_prediction(
    prediction_id: str,
    payload: CompareRequest,
    service: PredictionService = Depends(get_prediction_service),
):
    verdict = await service.test(prediction_id, payload.prediction_text)
    return success_response(data=verdict.model_dump(mode="json"), message="Not saved")


@router.post("/{prediction_id}/reveal")
async def reveal_prediction(
    prediction_id: str,
    payload: RevealPredictionRequest,
    service: PredictionService = Depends(get_prediction_service),
):
    view = await service.reveal(prediction_id, payload.winning_label)
    return success_response(data=_dump(view))


@router.delete("/{prediction_id}")
async def delete_prediction(
    prediction_id: str,
    service: PredictionService = Depends(get_prediction_service),
):
    await service.delete(prediction_id)
    return success_response(data={"id": prediction_id, "deleted": True})
