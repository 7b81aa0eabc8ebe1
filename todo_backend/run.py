#!/usr/bin/env python3
"""
Entry point for running the todo backend.
Supports several launch modes.
"""

import logging
import subprocess
import sys
from pathlib import Path

from todo_backend.config import get_settings
from todo_backend.logging_utils import configure_logging

logger = logging.getLogger(__name__)

APP_PATH = "todo_backend.main:app"


def log_startup(host: str, port: int, workers: int) -> None:
    """Log a single startup line for process managers."""
    settings = get_settings()
    logger.info(
        "Starting on %s:%s (TODO_STORAGE=%s, TODO_ID_STRATEGY=%s, WORKERS=%s)",
        host,
        port,
        settings.storage_backend,
        settings.id_strategy,
        workers,
    )


def run_development() -> None:
    """Development mode: single process with auto-reload."""
    import uvicorn

    settings = get_settings()
    log_startup(settings.host, settings.port, 1)
    uvicorn.run(
        APP_PATH,
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower(),
    )


def run_production() -> None:
    """Production mode."""
    import uvicorn

    settings = get_settings()
    log_startup(settings.host, settings.port, settings.workers)
    uvicorn.run(
        APP_PATH,
        host=settings.host,
        port=settings.port,
        workers=settings.workers,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


def run_tests() -> None:
    """Run the test suite."""
    logger.info("Running tests...")
    result = subprocess.run(
        ["pytest", "tests/", "-v"],
        cwd=Path(__file__).resolve().parents[1],
    )
    sys.exit(result.returncode)


def show_help() -> None:
    print("""
Todo Backend - Launch Utility

Usage:
  todo-backend [command]

Commands:
  dev        - Run in development mode (auto-reload)
  prod       - Run in production mode
  test       - Run tests
  help       - Show this help message

Environment:
  TODO_STORAGE=memory|redis|postgres, REDIS_URL, DATABASE_URL,
  TODO_ID_STRATEGY=counter|random, HOST, PORT, WEB_CONCURRENCY
    """.strip())


def main() -> None:
    mode = sys.argv[1].lower() if len(sys.argv) > 1 else "prod"

    try:
        configure_logging(get_settings().log_level)
        if mode == "dev":
            run_development()
        elif mode == "prod":
            run_production()
        elif mode == "test":
            run_tests()
        elif mode in ["help", "-h", "--help"]:
            show_help()
        else:
            print(f"Unknown mode: {mode}")
            show_help()
            sys.exit(1)

    except KeyboardInterrupt:
        logger.info("Shutdown requested...")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
