"""
CLI runner for venue-bot.

Usage:
    python -m venue_bot.run [OPTIONS]

    # Receive Telegram messages and enqueue them
    python -m venue_bot.run

    # Process queued messages
    python -m venue_bot.run --worker

    # Process whatever is queued, then exit
    python -m venue_bot.run --worker --drain
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .config import BotConfig
from .foursquare import FoursquareClient
from .handlers import build_router
from .ingress import Ingress
from .migrations import run_migrations
from .store import MessageQueue, SessionStore
from .telegram import TelegramClient
from .worker import Worker

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("venue-bot")


def build_worker(config: BotConfig, token: str) -> Worker:
    """Assemble the worker and its collaborators from config."""
    queue = MessageQueue(config.db_path, poll_interval=config.poll_interval_seconds)
    sessions = SessionStore(config.db_path)
    telegram = TelegramClient(token, config.telegram)
    foursquare = FoursquareClient(config.foursquare)
    return Worker(queue, build_router(sessions, telegram, foursquare))


def build_ingress(config: BotConfig, token: str) -> Ingress:
    """Assemble the ingress poller from config."""
    return Ingress(
        TelegramClient(token, config.telegram),
        MessageQueue(config.db_path, poll_interval=config.poll_interval_seconds),
        long_poll_seconds=config.telegram.long_poll_seconds,
        retry_interval=config.retry_interval_seconds,
    )


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="venue-bot: nearby venue search over Telegram",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Ingress process (polls Telegram, fills the queue)
    TELEGRAM_TOKEN=... python -m venue_bot.run

    # Worker process (drains the queue, answers chats)
    WORKER=1 TELEGRAM_TOKEN=... FOURSQUARE_CLIENT_ID=... FOURSQUARE_SECRET=... \\
        python -m venue_bot.run

    # Use a specific config file
    python -m venue_bot.run --config venue_bot.yaml --worker
        """,
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=Path("venue_bot.yaml"),
        help="Path to config file (default: venue_bot.yaml)",
    )
    parser.add_argument(
        "--db",
        type=Path,
        help="Override database path from config",
    )
    parser.add_argument(
        "--worker",
        action="store_true",
        help="Run the worker loop instead of ingress (same as WORKER=1)",
    )
    parser.add_argument(
        "--drain",
        action="store_true",
        help="With --worker: process queued messages and exit",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = BotConfig.from_yaml(args.config)
    if args.db:
        config.db_path = args.db
    if args.worker:
        config.worker = True

    logger.info(f"Config loaded from {args.config}")
    logger.info(f"Database: {config.db_path}")
    logger.info(f"Mode: {'worker' if config.worker else 'ingress'}")

    token = config.telegram.get_token()
    if not token:
        logger.error(f"No Telegram token: set {config.telegram.token_env} or telegram.token")
        return 1

    run_migrations(config.db_path, verbose=False)

    if config.worker:
        worker = build_worker(config, token)
        if args.drain:
            processed = asyncio.run(worker.drain())
            logger.info(f"Drained {processed} message(s)")
            return 0
        try:
            asyncio.run(worker.run())
        except KeyboardInterrupt:
            logger.info("Worker stopped by user")
        return 0

    ingress = build_ingress(config, token)
    try:
        asyncio.run(ingress.run())
    except KeyboardInterrupt:
        logger.info("Ingress stopped by user")
    return 0


if __name__ == "__main__":
    sys.exit(main())
