"""
Core module for the Super Intent daily check-in bot.

This package contains configuration, the per-wallet HTTP session transport,
proxy and wallet loading, pacing and the batch orchestrator that drives the
check-in protocol implemented in the ``checkin`` package.

Submodules:
    config: Application settings (``BotSettings``) via Pydantic.
    exceptions: ``ConfigError`` / ``TransportError`` / ``AuthError`` / ``WorkflowError``.
    session: ``WalletSession`` aiohttp transport with a private cookie store.
    proxy_manager: Proxy-line parsing, loading and round-robin selection.
    wallet_manager: ``Wallet`` signer and ``pk.txt`` / ``wallets.json`` loaders.
    pacing: Randomized delay policy between steps and wallets.
    orchestrator: ``BatchOrchestrator`` sequential runner with failure isolation.
    monitoring: Rich banner, key-source prompt and summary table.
    logging_setup: Compressed rotating file + safe console logging.
"""
