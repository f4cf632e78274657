"""SmartPay configuration."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class SmartPaySettings(BaseSettings):
    """Configuration for the quoting and execution engines."""

    model_config = SettingsConfigDict(
        env_prefix="SMARTPAY_",
        env_file=".env",
        extra="ignore",  # Ignore extra fields from .env
    )

    # Quoting
    default_strategy: str = "balanced"

    # Simulation fallback
    simulation_failure_rate: float = 0.08
    simulation_delay_ms: int = 900

    # Perceived network round trip, awaited before every dispatch
    latency_min_ms: int = 650
    latency_max_ms: int = 1000

    # Dispatch defaults
    default_recipient: str = "0x3A1d0De8D8a73a9fF5f3c6f4A6f0f5D2E8d3C45F"
    default_explorer: str = "https://etherscan.io/tx/"

    # Local JSON-RPC node (dev demo)
    rpc_url: str = "http://127.0.0.1:8545"
    rpc_chain_id: int = 31337
    rpc_timeout: float = 10.0

    # Remote validation gate; local validation when unset
    validation_endpoint: Optional[str] = None

    # HTTP server
    host: str = "127.0.0.1"
    port: int = 8000


settings = SmartPaySettings()
