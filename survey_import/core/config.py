from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    log_level: str = "INFO"

    # Import limits
    max_questions_per_file: int = 200
    upload_max_file_size_mb: int = 5

    # Column auto-mapping
    mapping_fuzzy_threshold: float = 0.7  # Minimum SequenceMatcher ratio for a low-confidence match

    # Remote preview service (empty URL disables the remote attempt)
    remote_preview_url: str = ""
    remote_preview_timeout_seconds: int = 10

    # CORS
    allowed_origins: str = "http://localhost:5173,http://localhost:3000"

    model_config = ConfigDict(env_file=".env", extra="ignore")


settings = Settings()
