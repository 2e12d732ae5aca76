from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./quotes.db"
    COMPANY_NAME: str = "YNM Safety"
    COMPANY_ADDRESS: str = ""
    COMPANY_EMAIL: str = "sales@ynmsafety.com"
    COMPANY_PHONE: str = ""
    QUOTE_VALID_DAYS: int = 30
    LOG_LEVEL: str = "INFO"

    # Follow-up reminders go to this user when a lead has no assignee
    DEFAULT_FOLLOW_UP_USER: str = "admin"

    class Config:
        env_file = ".env"


settings = Settings()
