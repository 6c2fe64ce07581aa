from __future__ import annotations

import uvicorn
from loguru import logger

from .config import Settings, settings


def serve(config: Settings) -> None:
    """Start the month sheet API with the host, port and log level from ``config``."""
    limits = config.limits()
    logger.info(
        "Starting {} on {}:{} (contractual {}, {} slots)",
        config.app_name,
        config.host,
        config.port,
        limits.contractual_working_time,
        limits.max_entry_slots,
    )
    uvicorn.run(
        "monthsheet.main:app",
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        reload=False,
    )


def main() -> None:
    serve(settings)


if __name__ == "__main__":
    main()
