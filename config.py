import os


def _env_or(key: str, default: str) -> str:
    v = os.getenv(key)
    return v if v is not None else default


POS_STORE = _env_or("POS_STORE", "memory").lower()
DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = _env_or("DATABASE_NAME", "pos")
LOG_LEVEL = _env_or("LOG_LEVEL", "INFO")
PORT = int(_env_or("PORT", "8000"))
