from fastapi import Request

from psychic.config import Settings
from psychic.database import async_session
from psychic.services.adjudicator import Adjudicator
from psychic.services.llm_predictor import OpenAIBlindPredictor
from psychic.services.oracle import OpenAIVisionOracle, build_client
from psychic.services.picture_source import PexelsPictureSource
from psychic.services.prediction_service import PredictionService
from psychic.services.prediction_store import PredictionStore
from psychic.services.selector import SelectionPolicy


def build_prediction_service(settings: Settings) -> PredictionService:
    """Wire the service with its real collaborators. Built once per process."""
    openai_client = build_client(settings)
    return PredictionService(
        store=PredictionStore(async_session),
        source=PexelsPictureSource.from_settings(settings),
        adjudicator=Adjudicator(
            OpenAIVisionOracle.from_settings(settings, client=openai_client),
            timeout_seconds=settings.oracle_timeout_seconds,
        ),
        predictor=OpenAIBlindPredictor.from_settings(settings, client=openai_client),
        policy=SelectionPolicy.from_settings(settings),
        exclude_recent=settings.selection_exclude_recent,
        llm_models=settings.llm_predictor_models,
        default_llm_model=settings.llm_predictor_model,
    )


async def get_prediction_service(request: Request) -> PredictionService:
    return request.app.state.prediction_service
