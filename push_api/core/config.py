from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = Field(default="Push Notification API", alias="APP_NAME")
    app_env: str = Field(default="local", alias="APP_ENV")
    debug: bool = Field(default=True, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    database_url: str | None = Field(default=None, alias="DATABASE_URL")
    db_host: str = Field(default="localhost", alias="DB_HOST")
    db_port: int = Field(default=3306, alias="DB_PORT")
    db_user: str = Field(default="push_user", alias="DB_USER")
    db_password: str = Field(default="push_pass", alias="DB_PASSWORD")
    db_name: str = Field(default="push_notifications_db", alias="DB_NAME")
    db_pool_size: int = Field(default=5, alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=5, alias="DB_MAX_OVERFLOW")

    expo_push_url: str = Field(
        default="https://exp.host/--/api/v2/push/send",
        alias="EXPO_PUSH_URL",
    )
    expo_access_token: str | None = Field(default=None, alias="EXPO_ACCESS_TOKEN")
    expo_timeout: float = Field(default=10.0, alias="EXPO_TIMEOUT")
    expo_mock_mode: bool = Field(default=False, alias="EXPO_MOCK_MODE")
    expo_max_chunk_size: int = Field(default=100, ge=1, alias="EXPO_MAX_CHUNK_SIZE")

    notification_history_limit: int = Field(
        default=50,
        ge=1,
        alias="NOTIFICATION_HISTORY_LIMIT",
    )

    jwt_secret_key: str = Field(default="push-api-secret", alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    model_config = SettingsConfigDict(
        env_file=(".env", ),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"mysql+pymysql://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
            f"?charset=utf8mb4"
        )


settings = Settings()
