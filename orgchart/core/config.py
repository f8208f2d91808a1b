import sys
from typing import Literal

from pydantic_settings import BaseSettings

_ENV_FILE = None if "pytest" in sys.modules else ".env"


class Settings(BaseSettings):
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    STORAGE_BACKEND: Literal["memory", "cosmos"] = "memory"

    COSMOS_DB_ENDPOINT: str = ""
    COSMOS_DB_KEY: str = ""
    COSMOS_DB_DATABASE: str = "orgchart-db"
    COSMOS_DB_EMPLOYEES_CONTAINER: str = "employees"

    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    SEED_FILE: str = "employees.json"

    model_config = {
        "env_file": _ENV_FILE,
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }


settings = Settings()
