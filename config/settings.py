from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Protocol authority: may resolve any market, cancel markets, change fees
    PROTOCOL_AUTHORITY: str = "protocol-authority"

    # Fees (basis points)
    PROTOCOL_FEE_BPS: int = 10          # 0.1%
    DEFAULT_MARKET_FEE_BPS: int = 30    # 0.3%

    # Market creation bounds
    MIN_MARKET_DURATION_SECONDS: int = 3600          # 1 hour
    MAX_MARKET_DURATION_SECONDS: int = 31_536_000    # 1 year
    MIN_BOND_AMOUNT: int = 100_000_000
    MAX_MARKETS_PER_CREATOR: int = 100
    PAUSED: bool = False  # Emergency switch; blocks market creation

    # Trade admission
    MAX_PRICE_IMPACT_BPS: int = 1000    # 10%
    MIN_TRADE_AMOUNT: int = 1_000       # 0.001 base tokens (6 decimals)

    # Oracle
    MAX_PRICE_AGE_SECONDS: int = 300    # 5 minutes


settings = Settings()
