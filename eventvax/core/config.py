# eventvax/core/config.py

from typing import List, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Values come straight from the process environment (docker compose or
    # the shell). List settings are JSON encoded, e.g. RPC_URLS='["https://..."]'.
    model_config = SettingsConfigDict(extra="ignore")

    # The environment mode: 'local' or 'prod'
    ENV: str = "local"
    LOG_LEVEL: str = "INFO"

    # --- Database ---
    DATABASE_URL_PROD: str = "sqlite:////data/events.db"
    DATABASE_URL_LOCAL: str = "sqlite:///./data/events.db"

    # --- Chain ---
    CHAIN_ID: int = 43113
    CHAIN_READER: Literal["explorer", "rpc"] = "explorer"
    RPC_URLS: List[str] = [
        "https://api.avax-test.network/ext/bc/C/rpc",
        "https://avalanche-fuji-c-chain-rpc.publicnode.com",
        "https://rpc.ankr.com/avalanche_fuji",
    ]
    EVENT_MANAGER_ADDRESS: str = "0x1651f730a846eD23411180eC71C9eFbFCD05A871"
    METADATA_REGISTRY_ADDRESS: str = "0xB8F60EAf784b897F7b7AFDabdc67aC6E69fA953b"
    FROM_BLOCK: int = 0
    TO_BLOCK: str = "latest"
    LOG_BATCH_SIZE: int = 2048
    # Start each pass at the highest block already mirrored instead of FROM_BLOCK
    RESUME_FROM_LAST_BLOCK: bool = True

    # --- Block explorer ---
    EXPLORER_API_URL: str = "https://api-testnet.snowtrace.io/api"
    EXPLORER_API_KEY: str = ""

    # --- IPFS ---
    IPFS_GATEWAYS: List[str] = [
        "https://gateway.pinata.cloud/ipfs/{cid}",
        "https://ipfs.io/ipfs/{cid}",
        "https://cloudflare-ipfs.com/ipfs/{cid}",
    ]
    VERIFY_CONTENT_HASH: bool = True

    # --- Timeouts and retries (seconds) ---
    RPC_TIMEOUT_SECONDS: float = 10.0
    HTTP_TIMEOUT_SECONDS: float = 15.0
    GATEWAY_TIMEOUT_SECONDS: float = 5.0
    RETRY_ATTEMPTS: int = 3
    RETRY_MAX_WAIT_SECONDS: float = 8.0

    # --- Sync behaviour ---
    SYNC_ON_STARTUP: bool = True
    # 0 disables the periodic re-sync job
    SYNC_INTERVAL_SECONDS: int = 0
    PLACEHOLDER_VENUE: str = "Blockchain Event"

    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # --- Dynamic Properties ---
    @property
    def DATABASE_URL(self) -> str:
        return (
            self.DATABASE_URL_LOCAL if self.ENV == "local" else self.DATABASE_URL_PROD
        )


# Create a single instance of the settings
settings = Settings()
