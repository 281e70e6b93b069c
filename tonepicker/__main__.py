"""Run the HTTP service: ``python -m tonepicker``."""

import argparse
from pathlib import Path

import uvicorn

from .config.loader import ConfigLoader
from .config.validation import ConfigValidator
from .logging.config import configure_logging, get_logger
from .server import create_app


def main() -> int:
    parser = argparse.ArgumentParser(description="Tone Picker HTTP service")
    parser.add_argument("--config-dir", type=Path, default=None,
                        help="Directory holding tonepicker.yaml")
    parser.add_argument("--host", default=None)
    parser.add_argument("--port", type=int, default=None)
    args = parser.parse_args()

    loader = ConfigLoader.create(args.config_dir)
    overrides: dict = {"server": {}}
    if args.host:
        overrides["server"]["host"] = args.host
    if args.port:
        overrides["server"]["port"] = args.port

    errors = ConfigValidator.validate_config(loader.merge_config(overrides))
    settings = loader.load_settings(overrides)

    configure_logging(level=settings.server.log_level, format_json=settings.server.log_json)
    logger = get_logger(__name__)

    if errors:
        for error in errors:
            logger.error("Invalid configuration", field=error.field,
                         message=error.message, value=error.value)
        return 1

    logger.info("Starting tone picker service",
                host=settings.server.host, port=settings.server.port)
    uvicorn.run(create_app(settings), host=settings.server.host,
                port=settings.server.port, log_config=None)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
