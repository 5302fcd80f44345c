from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/spinecheck.sqlite3"

    # Build-time injected key (frontend bundler conventions)
    build_api_key: str = Field(
        default="",
        validation_alias=AliasChoices(
            "VITE_GEMINI_API_KEY",
            "VITE_API_KEY",
            "REACT_APP_GEMINI_API_KEY",
            "NEXT_PUBLIC_GEMINI_API_KEY",
        ),
    )
    # Server-side key (hosting platform conventions)
    api_key: str = Field(
        default="",
        validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY", "GOOGLE_API_KEY", "OPENAI_API_KEY"),
    )
    ai_base_url: str = Field(
        default=GEMINI_OPENAI_BASE_URL,
        validation_alias=AliasChoices("AI_BASE_URL", "OPENAI_BASE_URL"),
    )
    ai_model: str = Field(
        default="gemini-2.5-flash",
        validation_alias=AliasChoices("AI_MODEL", "GEMINI_MODEL"),
    )

    emailjs_public_key: str = Field(
        default="",
        validation_alias=AliasChoices("VITE_EMAILJS_PUBLIC_KEY", "EMAILJS_PUBLIC_KEY", "EMAILJS_USER_ID"),
    )
    emailjs_service_id: str = Field(
        default="",
        validation_alias=AliasChoices("VITE_EMAILJS_SERVICE_ID", "EMAILJS_SERVICE_ID"),
    )
    emailjs_template_id: str = Field(
        default="",
        validation_alias=AliasChoices("VITE_EMAILJS_TEMPLATE_ID", "EMAILJS_TEMPLATE_ID"),
    )
    emailjs_url: str = "https://api.emailjs.com/api/v1.0/email/send"

    max_upload_size_bytes: int = 15 * 1024 * 1024  # 15MB, phone camera originals
    max_image_side: int = 1024
    jpeg_quality: int = 70
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:8000", "http://127.0.0.1:8000"]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }


settings = Settings()
