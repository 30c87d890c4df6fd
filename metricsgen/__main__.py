"""
Mock Metrics Server

Serves synthetic metric values for integration tests of analytics and rollout
services. The endpoint configuration is loaded once from CONFIG_URL.

Run with: CONFIG_URL=http://host/config.yaml python -m metricsgen
"""

import logging
import sys

import uvicorn

from .config import HOST, LOG_LEVEL, PORT, load_config
from .models import ConfigError
from .server import create_app

logger = logging.getLogger(__name__)


def main():
    logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(levelname)s - %(message)s')

    try:
        endpoints = load_config()
    except ConfigError as e:
        logger.error(f"Refusing to start: {e}")
        sys.exit(1)

    app = create_app(endpoints)
    logger.info(f"Serving {len(endpoints)} endpoint(s) on {HOST}:{PORT}")
    uvicorn.run(app, host=HOST, port=PORT)


if __name__ == "__main__":
    main()
