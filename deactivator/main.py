"""Command-line entry point for the failed job deactivator."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import os
import sys
import time
from pathlib import Path
from typing import List, Optional, Tuple

from deactivator.config.environment import EnvironmentConfig
from deactivator.config.exceptions import ConfigurationError
from deactivator.config.loader import load_config
from deactivator.config.models import AppConfig
from deactivator.logging import get_logger
from deactivator.logging.config import configure_logging
from deactivator.persistence.database import close_database, init_database
from deactivator.persistence.exceptions import PersistenceError
from deactivator.pipeline import BatchFileError, DeactivationRun, load_batch_file

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and settle the effective log level.

    Log level priority: CLI > LOG_LEVEL environment variable > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level

    return app_config, env_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Failed Job Deactivator - annotate, log and email about "
            "deactivated or deleted jobs"
        )
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml if present)",
    )
    parser.add_argument(
        "--batch",
        type=Path,
        required=True,
        help="YAML file listing the detected jobs to dispatch",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Dispatch one batch of detected jobs.

    Returns:
        Exit code: 0 when the batch was dispatched (partial failures are
        reported in the logs), 1 on configuration, batch file or database errors.
    """
    start_time = time.time()
    args = build_parser().parse_args(argv)

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)

        environment = os.environ.get("ENVIRONMENT", "local")
        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=environment,
        )

        logger.info(
            "Failed Job Deactivator starting",
            extra={
                "event": "service.starting",
                "config_path": str(args.config) if args.config else None,
                "batch_path": str(args.batch),
                "log_level": env_config.log_level,
            },
        )

        entries = load_batch_file(args.batch)

        init_database(env_config.database_url)
        try:
            result = DeactivationRun(app_config, env_config).run(entries)
        finally:
            close_database()

        logger.info(
            "Failed Job Deactivator finished",
            extra={
                "event": "service.stopping",
                "uptime_seconds": round(time.time() - start_time, 2),
                "dispatched": result.total_dispatched,
                "notified": result.total_notified,
                "missing": len(result.missing_jobs),
            },
        )
        return 0

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        return 1
    except BatchFileError as e:
        print(f"Batch Error: {e}", file=sys.stderr)
        logger.error(
            f"Batch file error: {e}",
            extra={"event": "batch.error", "error_type": "BatchFileError"},
        )
        return 1
    except PersistenceError as e:
        print(f"Database Error: {e}", file=sys.stderr)
        logger.error(
            f"Database error: {e}",
            extra={"event": "database.error", "error_type": type(e).__name__},
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
