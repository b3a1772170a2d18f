"""Strava OAuth proxy - Main entry point."""

import argparse
import logging

import uvicorn
from dotenv import load_dotenv

from .app import create_app
from .config import ProxyConfig
from .logging_config import setup_logging

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def main():
    """Main entry point for the Strava OAuth proxy."""
    parser = argparse.ArgumentParser(description="Strava OAuth proxy")
    parser.add_argument("--host", type=str, default=None, help="Bind address (default: HOST)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (default: PORT)")
    parser.add_argument(
        "--token-store",
        type=str,
        choices=["session", "shared"],
        default=None,
        help="Token store: session (default, one login per browser) or shared (single user)",
    )
    parser.add_argument(
        "--static-dir",
        type=str,
        default=None,
        help="Directory of front-end files to serve at / (default: STATIC_DIR)",
    )
    args = parser.parse_args()

    overrides = {
        "host": args.host,
        "port": args.port,
        "token_store": args.token_store,
        "static_dir": args.static_dir,
    }
    config = ProxyConfig(**{key: value for key, value in overrides.items() if value is not None})

    setup_logging(config.log_level)
    app = create_app(config)

    logger.info("Server listening on http://%s:%s", config.host, config.port)
    uvicorn.run(app, host=config.host, port=config.port, log_config=None)


if __name__ == "__main__":
    main()
