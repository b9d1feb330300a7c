# todo_auth_api/todo_auth/core/config.py
import logging
from pydantic_settings import BaseSettings
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent
ENV_FILE_PATH = BASE_DIR / ".env"

class Settings(BaseSettings):

    # Core
    DATABASE_URL: str
    SECRET_KEY: str
    ALGORITHM: str = "HS256"

    # Access Token (curto, sem estado)
    ACCESS_TOKEN_EXPIRE_SECONDS: int = 600

    # Refresh Token (opaco, persistido, uso único)
    REFRESH_TOKEN_EXPIRE_DAYS: int = 180

    # JWT Claims
    JWT_ISSUER: str = "urn:todo:authapi"
    JWT_AUDIENCE: str = "urn:todo:client"

    # Rate limiting (slowapi)
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: str = "10/minute"

    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    class Config:
        case_sensitive = True
        env_file = ENV_FILE_PATH
        env_file_encoding = 'utf-8'

try:
    settings = Settings()
except Exception as e:
    logging.error(f"FATAL: Erro ao carregar 'settings' a partir do .env em {ENV_FILE_PATH}: {e}")
    raise e
