"""
Super Intent Daily Check-in Bot - Main Entry Point

Loads wallets and proxies, then runs the daily check-in for every wallet
one after another.

Usage:
    python main.py                    # Ask which key file to use
    python main.py --source pk        # Keys from pk.txt
    python main.py --source wallets   # Keys from wallets.json
    python main.py --no-proxy         # Ignore proxies.txt
"""
from dotenv import load_dotenv

# Load environment variables from .env file into os.environ
load_dotenv()

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from core.config import BotSettings, load_settings
from core.exceptions import ConfigError
from core.logging_setup import setup_logging
from core.monitoring import ConsoleUI
from core.orchestrator import BatchOrchestrator
from core.proxy_manager import ProxyManager
from core.wallet_manager import Wallet, load_private_keys, load_wallets, load_wallets_json

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Super Intent daily check-in bot")
    parser.add_argument(
        "--source",
        choices=["pk", "wallets"],
        help="Private key source (skips the interactive prompt)",
    )
    parser.add_argument("--no-proxy", action="store_true", help="Ignore the proxy file")
    parser.add_argument("--log-level", type=str, help="Override LOG_LEVEL (e.g. DEBUG)")
    return parser.parse_args(argv)


def load_private_key_source(source: str, settings: BotSettings) -> List[str]:
    """Load raw private keys from the chosen source ("pk" or "wallets")."""
    if source == "pk":
        return load_private_keys(settings.pk_file)
    if source == "wallets":
        return load_wallets_json(settings.wallets_file)
    raise ConfigError(f"Unknown private key source: {source}")


async def main(argv: Optional[List[str]] = None, ui: Optional[ConsoleUI] = None) -> int:
    """
    Main execution flow.

    1. Parses command line arguments and loads settings (invalid values
       are a fatal ConfigError).
    2. Sets up logging.
    3. Loads wallets from the chosen key source.
    4. Loads proxies (unless disabled).
    5. Runs the BatchOrchestrator and prints the summary.

    Returns:
        Process exit code (1 when configuration is unusable).
    """
    args = parse_args(argv)
    overrides = {}
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.no_proxy:
        overrides["use_proxies"] = False
    try:
        settings = load_settings(**overrides)
    except ConfigError as e:
        logger.error(f"❌ Critical error: {e}")
        return 1

    setup_logging(settings.log_level, settings.log_file)
    ui = ui or ConsoleUI()
    ui.banner()

    try:
        source = args.source or ui.choose_key_source(settings.pk_file, settings.wallets_file)
        wallets: List[Wallet] = load_wallets(load_private_key_source(source, settings))
    except ConfigError as e:
        logger.error(f"❌ Critical error: {e}")
        return 1

    proxy_manager = ProxyManager(settings)
    orchestrator = BatchOrchestrator(settings, proxy_manager=proxy_manager)
    summary = await orchestrator.run(wallets)

    ui.summary(summary)
    return 0


def cli() -> None:
    """Console-script entry point."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("👋 Stopping (KeyboardInterrupt)...")
        sys.exit(130)


if __name__ == "__main__":
    cli()
