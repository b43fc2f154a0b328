from pathlib import Path
from typing import List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")

    # Senpi GraphQL API
    senpi_api_url: str = Field(
        default="",
        validation_alias=AliasChoices("senpi_api_url", "SENPI_API_URL", "MOXIE_API_URL"),
        description="Authorized Senpi GraphQL endpoint (orders, wallet)",
    )
    senpi_api_url_internal: str = Field(
        default="",
        validation_alias=AliasChoices(
            "senpi_api_url_internal", "SENPI_API_URL_INTERNAL", "MOXIE_API_URL_INTERNAL"
        ),
        description="Internal Senpi GraphQL endpoint (portfolio, users, discovery)",
    )
    senpi_api_prod_url: str = Field(
        default="",
        validation_alias=AliasChoices("senpi_api_prod_url", "MOXIE_API_PROD_URL"),
        description="Production endpoint used for trade analysis queries",
    )
    senpi_url: str = Field(default="senpi.ai", description="Public Senpi web host")
    senpi_telegram_group_url: str = Field(
        default="",
        description="Support Telegram group linked from error messages",
    )

    # Chain access
    base_rpc_url: str = Field(
        default="https://mainnet.base.org",
        validation_alias=AliasChoices("base_rpc_url", "BASE_RPC_URL"),
        description="Base mainnet JSON-RPC endpoint",
    )
    senpi_rewards_contract_address: str = Field(
        default="",
        validation_alias=AliasChoices(
            "senpi_rewards_contract_address", "SENPI_REWARDS_CONTRACT_ADDRESS"
        ),
        description="Rewards vault contract on Base",
    )

    # Pricing
    codex_api_url: str = Field(
        default="https://graph.codex.io/graphql",
        description="Codex GraphQL endpoint used for token prices",
    )
    codex_api_key: str = Field(default="", description="Codex API key")

    # LLM
    llm_provider: str = Field(default="anthropic", description="Default LLM provider")
    anthropic_api_key: str = Field(default="", description="Anthropic API key")
    llm_model: str = Field(default="claude-sonnet-4-20250514", description="Default LLM model")
    llm_temperature: float = Field(default=0.1, description="Temperature for structured extraction")
    llm_max_tokens: int = Field(default=8192, description="Max output tokens for structured extraction")

    # Trading
    stable_coins: str = Field(
        default="USDC,USDT,DAI,ETH,WETH",
        description="Comma separated symbols treated as stable coins",
    )
    initial_slippage_in_bps: int = Field(default=100, description="Initial swap slippage (bps)")

    # Cache Settings
    cache_ttl_seconds: int = Field(default=300, description="Cache TTL in seconds")
    max_cache_size: int = Field(default=1000, description="Maximum cache size")

    # Outbound requests
    request_timeout_seconds: int = Field(default=30, description="Request timeout")
    retry_max_attempts: int = Field(default=3, description="Attempts for retried outbound calls")
    retry_initial_delay_seconds: float = Field(default=1.0, description="First retry delay")

    @property
    def has_anthropic_key(self) -> bool:
        return bool(self.anthropic_api_key)

    @property
    def stable_coin_symbols(self) -> List[str]:
        return [coin.strip().upper() for coin in self.stable_coins.split(",") if coin.strip()]

    @property
    def api_url_for_analysis(self) -> str:
        """Trade analysis goes to prod when configured, else the public API."""
        return self.senpi_api_prod_url or self.senpi_api_url


settings = Settings()
