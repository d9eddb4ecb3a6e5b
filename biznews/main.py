"""
BizNews MCP server entry point.

Loads configuration once from the environment, configures logging and serves
the news tools over HTTP.
"""

import logging

import uvicorn

from biznews.config import load_config
from biznews.server import create_app

logger = logging.getLogger(__name__)


def main():
    """Main execution entry point."""
    config = load_config()

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if not config.openai_api_key:
        logger.warning("OPENAI_API_KEY not set. business_news will report an error.")
    if not config.facilitator_url:
        logger.warning("FACILITATOR_URL not set. Paid tools cannot be verified.")

    app = create_app(config)
    logger.info("Server is running on http://localhost:%d", config.port)
    uvicorn.run(app, host="0.0.0.0", port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
