from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Helius (wallet history): primary key first, secondary on 429 / out of credits
    helius_api_key_primary: str = ""
    helius_api_key_secondary: str = ""
    helius_max_rps: float = 10.0

    # Public Solana RPC fallback (comma-separated, tried in order)
    solana_rpc_urls: str = (
        "https://api.mainnet-beta.solana.com,"
        "https://solana-api.projectserum.com,"
        "https://rpc.ankr.com/solana"
    )
    solana_rpc_max_rps: float = 5.0

    # Birdeye Data Services API (price + ATH)
    birdeye_api_key: str = ""
    birdeye_max_rps: float = 10.0
    enable_birdeye: bool = True

    # DexScreener (free, no key)
    dexscreener_max_rps: float = 4.0
    enable_dexscreener: bool = True

    # Analysis
    transaction_limit: int = 100  # Helius caps a page at 100
    price_concurrency: int = 5  # parallel price lookups per wallet
    sol_price_usd: float = 0.0  # >0 enables SOL-leg price estimation for unpriced transfers

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False
    log_dir: str = "logs"  # empty disables the DEBUG file sink

    @property
    def helius_api_keys(self) -> list[str]:
        return [k for k in (self.helius_api_key_primary, self.helius_api_key_secondary) if k]

    @property
    def rpc_urls(self) -> list[str]:
        return [u.strip() for u in self.solana_rpc_urls.split(",") if u.strip()]


settings = Settings()
