"""Library configuration via environment variables."""

import logging
from typing import Optional

from pydantic_settings import BaseSettings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class Settings(BaseSettings):
    log_level: str = "INFO"

    # Perp config cache
    config_cache_ttl: float = 300.0  # 5 minutes
    config_cache_max_size: int = 256

    # Not exposed by the margin ratios module
    min_margin: float = 10.0

    model_config = {"env_prefix": "PERPCITY_", "env_file": ".env"}


settings = Settings()


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging at ``level`` or the configured log level."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
        datefmt="%H:%M:%S"
    )
