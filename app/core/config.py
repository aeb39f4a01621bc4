from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Config(BaseSettings):
    # Database Configuration
    db_url: str = Field(
        default="sqlite+aiosqlite:///./expense_tracker.db", alias="DB_URL"
    )

    # Auth Configuration
    jwt_secret: str = Field(default="", alias="JWT_SECRET")
    jwt_expires_in: str = Field(default="7d", alias="JWT_EXPIRES_IN")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    bcrypt_rounds: int = Field(default=12, alias="BCRYPT_ROUNDS")

    # Server Configuration
    environment: str = Field(default="development", alias="ENVIRONMENT")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")
    cors_origin: str = Field(default="http://localhost:3000", alias="CORS_ORIGIN")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")

    # Path to .env file (for loading env vars)
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


# Instantiate the settings
config = Config()
