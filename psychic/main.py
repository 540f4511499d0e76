import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from psychic.config import settings
from psychic.database import create_tables, engine
from psychic.dependencies import build_prediction_service
from psychic.routers.predictions import router as predictions_router
from psychic.utils.exceptions import register_exception_handlers

VERSION = "0.1.0"

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    app.state.prediction_service = build_prediction_service(settings)
    logger.info("Psychic prediction API %s started", VERSION)
    yield
    await app.state.prediction_service.aclose()
    await engine.dispose()


app = FastAPI(
    title="Psychic Prediction API",
    description="Double-blind picture predictions bound to real-world outcomes",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(predictions_router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    return {"status": "success", "data": {"service": "psychic-prediction-api", "version": VERSION}, "message": None}
