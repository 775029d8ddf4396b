import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    # Empty means "use the packaged FHIR core bundle"
    SCHEMA_BUNDLE_PATH: str = os.getenv("SCHEMA_BUNDLE_PATH", "")
    SENTINEL_TYPE: str = os.getenv("SENTINEL_TYPE", "Patient")
    TYPE_CACHE_MAX_SIZE: int = int(os.getenv("TYPE_CACHE_MAX_SIZE", "100"))
    TYPE_CACHE_TTL_SECONDS: float = float(os.getenv("TYPE_CACHE_TTL_SECONDS", "1800"))
    MAX_HIERARCHY_DEPTH: int = int(os.getenv("MAX_HIERARCHY_DEPTH", "32"))
    SIMILARITY_THRESHOLD: float = float(os.getenv("SIMILARITY_THRESHOLD", "0.6"))


settings = Settings()
