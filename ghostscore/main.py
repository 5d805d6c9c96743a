"""Command-line entry point for the GhostScore sync."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import os
import sys
import time
from pathlib import Path
from typing import Optional, Tuple

from ghostscore.config.environment import EnvironmentConfig
from ghostscore.config.exceptions import ConfigurationError
from ghostscore.config.loader import load_config
from ghostscore.config.models import AppConfig, LogFormat, LogLevel
from ghostscore.logging import get_logger
from ghostscore.logging.config import configure_logging
from ghostscore.nocodb.client import NocoDBClient
from ghostscore.nocodb.exceptions import NocoDBError
from ghostscore.pipeline import SyncPipeline

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Optional[Path],
    log_level_override: Optional[str] = None,
    dry_run_override: Optional[bool] = None,
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and apply command-line overrides.

    Args:
        config_path: Path to configuration file (None to use defaults)
        log_level_override: Log level from CLI (takes precedence)
        dry_run_override: --dry-run/--live choice from CLI (takes precedence)

    Returns:
        Tuple of (AppConfig, EnvironmentConfig) with ``env_config.log_level`` resolved

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    # Log level priority: CLI > Environment > Config
    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = LogLevel(app_config.logging.level or "INFO").value

    if dry_run_override is not None:
        app_config.sync.dry_run = dry_run_override

    return app_config, env_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ghostscore-sync",
        description="GhostScore sync - aggregate hiring-experience reports into per-employer scores",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml if present)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_const",
        const=True,
        default=None,
        help="Log intended writes without modifying the target table",
    )
    mode.add_argument(
        "--live",
        dest="dry_run",
        action="store_const",
        const=False,
        help="Create and update rows in the target table",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    return parser


def main(argv=None) -> int:
    """
    Main entry point for the GhostScore sync.

    Returns:
        Exit code (0 for success, 1 if configuration, a read, or any write failed).
    """
    start_time = time.time()
    args = build_parser().parse_args(argv)

    client = None
    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level, args.dry_run)

        log_format = LogFormat(app_config.logging.format).value
        environment = os.environ.get("ENVIRONMENT", "local")
        configure_logging(level=env_config.log_level, format_type=log_format, environment=environment)

        logger.info(
            "GhostScore sync starting",
            extra={
                "event": "service.starting",
                "config_path": str(args.config) if args.config else None,
                "log_level": env_config.log_level,
                "dry_run": app_config.sync.dry_run,
                "source_table": app_config.tables.source,
                "target_table": app_config.tables.target,
            },
        )

        client = NocoDBClient.from_config(app_config, env_config)
        pipeline = SyncPipeline(app_config=app_config, client=client)
        result = pipeline.run_once()

        mode = "dry run" if result.dry_run else "live"
        logger.info(
            f"Sync finished ({mode}): "
            f"{result.total_reports} reports, "
            f"{result.total_employers} employers, "
            f"{result.created_count} created, "
            f"{result.updated_count} updated, "
            f"{result.error_count} failed",
            extra={
                "event": "service.stopping",
                "uptime_seconds": round(time.time() - start_time, 2),
                "had_errors": result.had_errors,
            },
        )

        return 1 if result.had_errors else 0

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e}",
            extra={"event": "config.error", "error_type": "ConfigurationError"},
        )
        return 1
    except NocoDBError as e:
        print(f"NocoDB error: {e}", file=sys.stderr)
        logger.error(
            "Sync aborted: a table could not be read",
            extra={
                "event": "service.sync.aborted",
                "error_type": type(e).__name__,
                "error": str(e),
            },
        )
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error during sync",
            extra={
                "event": "service.sync.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return 1
    finally:
        if client is not None:
            client.close()


if __name__ == "__main__":
    sys.exit(main())
