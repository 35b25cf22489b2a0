from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "postgresql://postgres:postgres@db:5432/eatsadvisor"
    log_level: str = "INFO"

    # OpenAI-compatible chat completions endpoint
    openai_api_key: str = ""
    openai_api_url: str = "https://api.openai.com/v1/chat/completions"
    vision_model: str = "gpt-4o"  # Must accept image_url content parts
    classification_model: str = "gpt-4o"

    extraction_max_tokens: int = 1000
    classification_max_tokens: int = 500

    # AI HTTP timeout settings (seconds)
    ai_timeout: float = 60.0
    ai_connect_timeout: float = 10.0

    # Connection-level failures only; 2 attempts = one retry
    ai_max_attempts: int = 2
    ai_retry_base_delay: float = 1.0

    # Auth settings
    session_cookie_name: str = "eatsadvisor_session"
    session_max_age: int = 86400 * 7  # 7 days

    # Menu uploads
    menu_image_max_width: int = 1920


settings = Settings()
