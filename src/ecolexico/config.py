import os


class Settings:
    PROJECT_NAME: str = "ecolexico"
    DEBUG: bool = os.environ.get("DEBUG", "").lower() in ("1", "true", "yes")
    LOG_DIR: str = "log"
    LOG_FILE: str = "ecolexico.log"
    DB_DIR: str = "db"
    DB_FILE: str = "ecolexico.db"
    VOCAB_DIR: str = os.environ.get("VOCAB_DIR", "vocabulary")
    # "csv" reads VOCAB_DIR, "http" asks the catalog API
    CATALOG_SOURCE: str = os.environ.get("CATALOG_SOURCE", "csv")
    API_URL: str = os.environ.get("API_URL", "http://localhost:5000")
    API_TOKEN: str = os.environ.get("API_TOKEN", "")
    CATALOG_TIMEOUT_SECONDS: float = 10.0
    SESSION_COOKIE_NAME: str = "trivia_session_id"
    SESSION_TIMEOUT_MINUTES: int = 120
    ROOT_PATH: str = os.environ.get("ROOT_PATH", "")

    # --- Game rules ---
    LIVES_PER_GAME: int = 3
    POINTS_PER_CORRECT_ANSWER: int = 10
    OPTIONS_PER_ROUND: int = 4
    DISTRACTORS_PER_ROUND: int = 3
    NEXT_ROUND_DELAY_MS: int = int(os.environ.get("NEXT_ROUND_DELAY_MS", "1600"))


settings = Settings()
