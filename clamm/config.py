"""
Configuration settings for the CLAMM engine

Loads environment variables and provides engine configuration.
"""
import logging
import os
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings:
    """Engine settings"""

    # Logging
    LOG_LEVEL: str = os.getenv("CLAMM_LOG_LEVEL", "WARNING").upper()

    # Protocol fee (pips) applied to both swap directions when a pool is initialized
    DEFAULT_PROTOCOL_FEE: int = int(os.getenv("CLAMM_DEFAULT_PROTOCOL_FEE", 0))

    # Upper bound on swap loop iterations (0 = unbounded)
    MAX_SWAP_STEPS: int = int(os.getenv("CLAMM_MAX_SWAP_STEPS", 0))


# Create global settings instance
settings = Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Apply LOG_LEVEL to the ``clamm`` logger hierarchy"""
    logger = logging.getLogger("clamm")
    logger.setLevel((level or settings.LOG_LEVEL).upper())
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
