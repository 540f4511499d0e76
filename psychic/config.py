from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./data/db.sqlite3"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    openai_api_key: str = ""
    openai_base_url: str = ""
    openai_model: str = "gpt-4o"
    oracle_timeout_seconds: float = 60.0
    oracle_image_detail: str = "low"

    llm_predictor_model: str = "gpt-4.1"
    llm_predictor_models: list[str] = ["gpt-4.1", "gpt-4o", "gpt-4o-mini"]

    pexels_api_key: str = ""
    pexels_api_url: str = "https://api.pexels.com/v1"
    pexels_max_page: int = 100
    pexels_per_page: int = 80
    picture_source_timeout_seconds: float = 10.0

    selection_max_attempts: int = 10
    selection_max_resamples: int = 5
    selection_min_color_distance: float = 0.30
    selection_max_description_similarity: float = 0.50
    selection_exclude_recent: int = 10  # sessions whose pictures are not reused

    list_default_limit: int = 50
    list_max_limit: int = 200

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
