from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Telegram
    bot_token: str
    admin_chat_id: Optional[int] = None  # Falls back to the chat that sent /start
    use_webhook: bool = False  # True => push (webhook), otherwise long polling
    webhook_url: str = ""  # Public base URL, https, no trailing path
    webhook_secret: str = ""  # Optional: checked against X-Telegram-Bot-Api-Secret-Token

    # HTTP
    port: int = 3000
    max_body_bytes: int = 200_000
    site_url: str = "https://3763024irina.github.io/voyages-de-l-auteur/"
    cors_origins: list[str] = [
        "https://3763024irina.github.io",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # Handoff tokens
    payload_ttl_seconds: int = 30 * 60
    sweep_interval_seconds: int = 60

    # Process
    shutdown_grace_seconds: float = 2.0
    log_level: str = "INFO"

    @field_validator("admin_chat_id", mode="before")
    @classmethod
    def blank_admin_chat_is_unset(cls, value):
        # ADMIN_CHAT_ID= in .env means "reply to the invoking chat"
        if isinstance(value, str) and not value.strip():
            return None
        return value

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
