from typing import List, Optional
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    ENV: str = "local"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: Optional[str] = None
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_db: str = "salon_marketplace"
    postgres_host: str = "localhost"
    postgres_port: str = "5432"

    secret_key: str = "change-me"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Pricing (minor currency units)
    FREE_SHIPPING_THRESHOLD: int = 10000
    DELIVERY_FEE: int = 500
    TAX_RATE: float = 0.02
    DELIVERY_DAYS: int = 3

    # Payment authorization
    PAYMENT_AUTHORIZER: str = "simulated"  # simulated | gateway
    PAYMENT_LATENCY_SECONDS: float = 1.5
    PAYMENT_DECLINE_RATE: float = 0.05
    PAYMENT_NETWORK_ERROR_RATE: float = 0.02
    PAYMENT_TIMEOUT_SECONDS: float = 10.0
    PAYMENT_GATEWAY_URL: str = "http://localhost:9000"
    PAYMENT_GATEWAY_KEY: str = ""

    # Methods that need a verified OTP session before payment
    OTP_REQUIRED_METHODS: List[str] = []

    @property
    def database_url(self):
        if self.DATABASE_URL:
            return self.DATABASE_URL
        encoded_password = quote_plus(self.postgres_password)
        return (
            f"postgresql+psycopg2://{self.postgres_user}:"
            f"{encoded_password}@{self.postgres_host}:"
            f"{self.postgres_port}/{self.postgres_db}"
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "allow"


settings = Settings()
