from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

INSECURE_JWT_SECRET = "change_me_secret"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Credential signing
    jwt_secret: str = INSECURE_JWT_SECRET
    jwt_algorithm: str = "HS256"
    token_ttl_hours: int = 24

    # Session artifact (cookie set by the exchange redirect)
    paid_cookie_name: str = "paid_token"
    cookie_max_age: int = 86400
    cookie_secure: bool = True

    # Externally visible base address used for redirects
    site_url: str = "http://localhost:3000"
    port: int = 3000
    # Proxies whose X-Forwarded-For uvicorn trusts when setting the client address
    forwarded_allow_ips: str = "127.0.0.1"

    # Order store. DATABASE_URL wins over the POSTGRES_* parts.
    database_url: Optional[str] = None
    database_echo: bool = False
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_host: str = "localhost"
    postgres_port: str = "5433"
    postgres_db: str = "paywall"

    content_dir: str = "private_posts"
    default_amount: float = 199

    admin_api_key: str = ""
    admin_list_limit: int = 200

    log_level: str = "INFO"
    otlp_endpoint: Optional[str] = None
    metrics_enabled: bool = True
    rate_limit_enabled: bool = True

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def failure_url(self) -> str:
        return f"{self.site_url.rstrip('/')}/_pay/failed"


@lru_cache
def get_settings() -> Settings:
    return Settings()
