from pydantic_settings import BaseSettings

EXAM_ANALYSIS_ENV_PREFIX = "EXAM_ANALYSIS_"


class ApiSettings(BaseSettings):
    model_config = {"env_prefix": EXAM_ANALYSIS_ENV_PREFIX}

    max_questions: int = 500
    max_students: int = 5000
    max_variations: int = 100
    host: str = "127.0.0.1"
    port: int = 8000
