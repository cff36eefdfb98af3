from pydantic_settings import BaseSettings
from dotenv import load_dotenv
from typing import Optional

load_dotenv()


class Settings(BaseSettings):
    DATABASE_URL: str
    DB_AUTO_CREATE: bool = False

    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 20

    # SMTP; leave SMTP_HOST empty to log emails instead of sending them
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 465
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    FROM_EMAIL: str = "noreply@travelplan.app"
    FRONTEND_BASE_URL: str = "http://localhost:3000"

    # Redis settings
    REDIS_URL: str = "redis://localhost:6379/0"
    REFRESH_COOKIE_NAME: str = "refresh_token"
    ACCESS_COOKIE_NAME: str = "access_token"
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # Cookie settings
    COOKIE_SECURE: bool = True  # set False for plain-http local development
    COOKIE_DOMAIN: Optional[str] = None
    COOKIE_SAMESITE: str = "lax"

    MAX_CONCURRENT_REFRESHES: int = 3

    GOOGLE_CLIENT_ID: Optional[str] = None
    GOOGLE_CLIENT_SECRET: Optional[str] = None

    PROJECT_NAME: str = "Travel Plan API"
    PROJECT_VERSION: str = "1.0.0"
    PROJECT_DESCRIPTION: str = "Collaborative trip planning: itineraries, costs, tasks and polls"
    CORS_ORIGIN_REGEX: str = r"^https?:\/\/(localhost|127\.0\.0\.1)(:\d{1,5})?$"

    PASSWORD_MIN_LENGTH: int = 6
    VERIFICATION_TOKEN_TTL_SECONDS: int = 24 * 3600
    RESET_TOKEN_TTL_SECONDS: int = 3600
    REQUIRE_EMAIL_VERIFICATION: bool = True
    APP_NAME: str = "Travel Plan"

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

    @property
    def google_enabled(self) -> bool:
        return bool(self.GOOGLE_CLIENT_ID and self.GOOGLE_CLIENT_SECRET)


settings = Settings()
