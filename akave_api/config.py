"""Application settings loaded from environment variables."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

AKAVE_FUJI_RPC_URL = (
    "https://node1-asia.ava.akave.ai/ext/bc/"
    "tLqcnkJkZ1DgyLyWmborZK9d7NmMj6YCzCFmf9d9oQEd2fHon/rpc"
)


class Settings(BaseSettings):
    """All configuration is driven by environment variables."""

    # External tool
    akave_cli_binary: str = "akavecli"
    akave_node_address: str = ""
    akave_private_key: str = ""

    # Process fan-out cap (0 = unbounded)
    max_concurrent_commands: int = Field(default=0, ge=0)

    # Ledger / transaction correlation
    akave_account_address: str = ""
    akave_rpc_url: str = AKAVE_FUJI_RPC_URL
    akave_rpc_timeout_seconds: float = 10.0
    correlation_attempts: int = Field(default=2, ge=1)
    correlation_retry_delay_seconds: float = Field(default=5.0, ge=0)

    # HTTP surface
    akave_api_key: str = ""
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    cors_origins: list[str] = Field(default_factory=list)
    download_dir: str = "downloads"
    upload_max_bytes: int = 50 * 1024 * 1024

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton – import this from anywhere
settings = Settings()
