from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="RIFTRADES_")

    app_name: str = "Riftrades"
    debug: bool = False

    # Used when neither an explicit base URL nor a page URL is available
    share_base_url: str = "http://localhost:5173/"

    catalog_path: Path = Path(__file__).parent.parent / "data" / "consolidated-data.json"

    # Which consolidated price column editions are priced by
    price_type: Literal["market", "low"] = "market"

    # Shared trades older than this are flagged as stale
    stale_trade_days: float = 7.0


settings = Settings()


# =============================================================================
# SHARE URL LIMITS
# =============================================================================

# Above this many characters a trade is reported as large
LARGE_TRADE_THRESHOLD = 1500

# Above this many characters some browsers and chat clients truncate URLs
MAX_URL_LENGTH = 2000
