"""Central environment-driven settings shared by the order service and checkout.

Each process loads this once at startup. Behavior is controlled by environment
variables (see `.env.example`); there is no hot reload.
"""

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "order-service"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 5000
    razorpay_key_id: str = ""
    razorpay_key_secret: SecretStr = SecretStr("")
    razorpay_base_url: str = "https://api.razorpay.com/v1"
    currency: str = "INR"
    receipt_prefix: str = "openroot"
    gateway_timeout_seconds: float = 10.0
    cors_allow_origins: list[str] = ["*"]
    tracing_enabled: bool = True
    otel_exporter_otlp_endpoint: str = "http://otel-collector:4318/v1/traces"
    order_service_url: str = "http://localhost:5000"
    order_service_timeout_seconds: float = 15.0
    checkout_merchant_name: str = "Openroot Classes"
    checkout_theme_color: str = "#7c3aed"
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
