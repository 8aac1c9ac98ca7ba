from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    database_url: str
    DB_ECHO: bool = False

    # Security
    SECRET_KEY: str = "something"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Logging
    LOG_DIR: str = ".local/taskboard"
    LOG_LEVEL: str = "INFO"

    # Schema bootstrap (one worker at a time, guarded by a file lock)
    CREATE_TABLES: bool = True
    SCHEMA_LOCK_FILE: str = "/tmp/taskboard_schema.lock"

    # Listing
    DEFAULT_PAGE_SIZE: int = 15
    MAX_PAGE_SIZE: int = 100

    CORS_ORIGIN_REGEX: str = "https?://.*"

    class Config:
        env_file = ".env"

settings = Settings()
