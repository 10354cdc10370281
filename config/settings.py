from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()  # loads .env from current working directory

class Settings(BaseSettings):
    CLASSIFIER_BASE_URL: str = "https://africogbe-production.up.railway.app"
    CLASSIFIER_TIMEOUT: float = 10.0

    LEDGER_BACKEND: str = "memory"  # "memory" or "mongo"
    LEDGER_KEY: str = "ankaraPatternScores"
    MONGODB_URI: str = "mongodb://localhost:27017"
    DB_NAME: str = "cognitive_assessment"

    MAX_TRIALS: int = 5
    GRID_SIZE: int = 3

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

settings = Settings()
