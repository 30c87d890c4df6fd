"""
Service settings and configuration loading.

The metric configuration is a YAML list of URI configs, fetched once at
startup from CONFIG_URL (or read from CONFIG_FILE for local runs).
"""

import logging
import os
from pathlib import Path
from typing import Optional

import httpx
import yaml
from dotenv import load_dotenv

from .models import ConfigError, load_endpoints

load_dotenv()

logger = logging.getLogger(__name__)

# Configuration from environment
CONFIG_URL = os.getenv("CONFIG_URL", "")
CONFIG_FILE = os.getenv("CONFIG_FILE", "")
CONFIG_TIMEOUT = float(os.getenv("CONFIG_TIMEOUT", "10"))
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8080"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def fetch_config(url: str, timeout: float = CONFIG_TIMEOUT, transport: Optional[httpx.BaseTransport] = None) -> str:
    """Download the raw configuration document."""
    logger.info(f"Fetching config from {url}")
    try:
        with httpx.Client(timeout=timeout, transport=transport) as client:
            response = client.get(url)
            response.raise_for_status()
    except httpx.HTTPError as e:
        raise ConfigError(f"HTTP GET with configured url did not succeed: {url} ({e})") from e
    return response.text


def read_config_file(path: str) -> str:
    logger.info(f"Reading config from {path}")
    try:
        return Path(path).read_text()
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e


def parse_config(text: str) -> tuple:
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Config is not valid YAML: {e}") from e
    return load_endpoints(document)


def load_config(
    url: str = CONFIG_URL,
    path: str = CONFIG_FILE,
    transport: Optional[httpx.BaseTransport] = None,
) -> tuple:
    """Fetch and validate the endpoint configs, preferring the URL over a local file."""
    if url:
        text = fetch_config(url, transport=transport)
    elif path:
        text = read_config_file(path)
    else:
        raise ConfigError("No config URL supplied")

    endpoints = parse_config(text)
    logger.info(f"Loaded {len(endpoints)} endpoint(s): {[e.uri for e in endpoints]}")
    return endpoints
