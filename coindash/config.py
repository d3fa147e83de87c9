# coindash/config.py
import os
from dataclasses import dataclass
from dotenv import load_dotenv

# Loads variables from a local .env file into environment variables (dev only).
load_dotenv()

# Fixed behaviour constants (not configurable).
POLL_INTERVAL_SECONDS = 5.0
MAX_DATA_POINTS = 120
HISTORY_WINDOW_DAYS = 10
HISTORY_GRANULARITY_SECONDS = 86400
MAX_SUGGESTIONS = 5

SPOT_PRICE_URL = "https://api.coinbase.com/v2/prices/{ticker}-USD/spot"
CANDLES_URL = "https://api.exchange.coinbase.com/products/{ticker}-USD/candles"
SEARCH_URL = "https://api.coingecko.com/api/v3/search"


@dataclass(frozen=True)
class Settings:
    # App config
    app_env: str
    log_level: str

    # Outbound HTTP
    http_timeout_seconds: float


def get_settings() -> Settings:
    """
    Reads env vars and returns a Settings object.
    """
    return Settings(
        app_env=os.getenv("APP_ENV", "local"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        http_timeout_seconds=float(os.getenv("HTTP_TIMEOUT_SECONDS", "10")),
    )
