import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from fakes import EndlessSource, FakeOracle, FakePredictor, FixedChoice
from psychic.database import create_tables
from psychic.services.adjudicator import Adjudicator
from psychic.services.prediction_service import PredictionService
from psychic.services.prediction_store import PredictionStore


@pytest.fixture(autouse=True, scope="session")
def disable_external_services():
    from psychic.config import settings
    settings.openai_api_key = ""
    settings.pexels_api_key = ""


@pytest_asyncio.fixture
async def store():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    await create_tables(bind=engine)
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    yield PredictionStore(session_maker)
    await engine.dispose()


@pytest.fixture
def oracle():
    return FakeOracle()


@pytest.fixture
def predictor():
    return FakePredictor()


@pytest.fixture
def service(store, oracle, predictor):
    return PredictionService(
        store=store,
        source=EndlessSource(),
        adjudicator=Adjudicator(oracle, timeout_seconds=1),
        predictor=predictor,
        rng=FixedChoice(0),
        llm_models=["gpt-4.1", "gpt-4o"],
        default_llm_model="gpt-4.1",
    )


@pytest_asyncio.fixture
async def client(service):
    from psychic.dependencies import get_prediction_service
    from psychic.main import app

    app.dependency_overrides[get_prediction_service] = lambda: service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
