from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

NOTIFIER_CHOICES = ("line", "telegram", "webhook")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Google OAuth (authorized_user token document, as JSON)
    google_token: str = ""
    google_token_path: str = ""
    google_client_id: str = ""
    google_client_secret: str = ""
    google_tasklist_id: str = "@default"

    # Delivery channel
    notifier: str = "line"
    line_notify_token: str = ""
    telegram_bot_token: str = ""
    telegram_chat_id: str = ""
    webhook_url: str = ""

    # Daily check schedule
    schedule_hour: int = Field(default=6, ge=0, le=23)
    schedule_minute: int = Field(default=0, ge=0, le=59)
    user_timezone: str = "Asia/Jakarta"

    http_timeout_seconds: float = 10.0

    # Sentry error tracking
    sentry_dsn: str = ""
    sentry_environment: str = "production"

    log_level: str = "INFO"
    data_dir: str = "~/.task-watch"
    state_path: str = ""

    @field_validator("user_timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value

    @field_validator("notifier")
    @classmethod
    def _check_notifier(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in NOTIFIER_CHOICES:
            raise ValueError(f"notifier must be one of {', '.join(NOTIFIER_CHOICES)}")
        return value

    @property
    def resolved_state_path(self) -> Path:
        if self.state_path:
            return Path(self.state_path).expanduser()
        return Path(self.data_dir).expanduser() / "notified_tasks.json"

    @property
    def resolved_token_path(self) -> Path:
        if self.google_token_path:
            return Path(self.google_token_path).expanduser()
        return Path(self.data_dir).expanduser() / "google_token.json"

    @property
    def has_google(self) -> bool:
        return bool(self.google_token) or self.resolved_token_path.exists()

    @property
    def has_line(self) -> bool:
        return bool(self.line_notify_token)

    @property
    def has_telegram(self) -> bool:
        return bool(self.telegram_bot_token and self.telegram_chat_id)

    @property
    def has_webhook(self) -> bool:
        return bool(self.webhook_url)

    @property
    def has_notifier(self) -> bool:
        return {
            "line": self.has_line,
            "telegram": self.has_telegram,
            "webhook": self.has_webhook,
        }[self.notifier]

    @property
    def has_sentry(self) -> bool:
        return bool(self.sentry_dsn)


settings = Settings()
