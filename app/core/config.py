from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "BuildRate API"
    VERSION: str = "1.0.0"
    API_V1_PREFIX: str = "/v1"

    # Database (required)
    DATABASE_URL: str

    # JWT (required)
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 30

    # Reviews
    MAX_REVIEW_PHOTOS: int = 5

    # Directory
    BUILDERS_PER_PAGE: int = 10
    ADMIN_BUILDERS_PER_PAGE: int = 20

    # Upload
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10MB

    # CORS
    ALLOWED_ORIGINS: str = "*"

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}

    @property
    def cors_origins(self) -> list[str]:
        if self.ALLOWED_ORIGINS == "*":
            return ["*"]
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]


settings = Settings()
