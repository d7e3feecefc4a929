from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "Window Washing Job Manager"
    APP_TIMEZONE: str = "America/Denver"
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # Pricing: optional JSON file overriding the built-in pane price table
    PRICE_TABLE_FILE: str = ""

    # Notion: job records
    NOTION_API_KEY: str = ""
    NOTION_DATABASE_ID: str = ""
    NOTION_VERSION: str = "2022-06-28"
    RECORD_HANDLED_BY: str = "Sean Baird"
    RECORD_PAYMENT_STATUS: str = "Job Not Finished 😤"

    # Google Calendar: OAuth refresh token for the technician's calendar
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    GOOGLE_REFRESH_TOKEN: str = ""
    GOOGLE_CALENDAR_ID: str = ""

    # SMTP: job notification emails
    SMTP_SERVER: str = ""
    SMTP_PORT: int = 0
    SENDER_EMAIL: str = ""
    SENDER_PASSWORD: str = ""
    NOTIFY_RECIPIENTS: str = ""  # comma separated

    class Config:
        env_file = ".env"

    @property
    def notify_recipients(self) -> list:
        return [r.strip() for r in self.NOTIFY_RECIPIENTS.split(",") if r.strip()]

    def missing_record_settings(self) -> list:
        return [name for name in ("NOTION_API_KEY", "NOTION_DATABASE_ID") if not getattr(self, name)]

    def missing_calendar_settings(self) -> list:
        names = ("GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_SECRET", "GOOGLE_REFRESH_TOKEN", "GOOGLE_CALENDAR_ID")
        return [name for name in names if not getattr(self, name)]

    def missing_smtp_settings(self) -> list:
        names = ("SMTP_SERVER", "SMTP_PORT", "SENDER_EMAIL", "SENDER_PASSWORD")
        return [name for name in names if not getattr(self, name)]


settings = Settings()
