import asyncio
import logging

from src.config.settings import settings
from src.modules.harvest_pipeline.service import harvest_pipeline_service

logger = logging.getLogger(__name__)


def main() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("=== Industry Buzz Harvester ===")
    try:
        asyncio.run(harvest_pipeline_service.run())
    except Exception:
        logger.exception("Error during scraping")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
