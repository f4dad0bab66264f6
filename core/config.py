"""Application configuration for the Super Intent check-in bot.

Central configuration module powered by Pydantic v2.  Settings are loaded from
environment variables (with ``.env`` file support).  Every field can be
overridden by an upper-case environment variable of the same name, e.g.
``REQUEST_TIMEOUT_SECONDS=10`` or ``PROXIES_FILE=config/proxies.txt``.

Key exports:
    BotSettings: Root settings model.
    load_settings: Builds ``BotSettings``, turning validation failures into
        ``ConfigError`` (used once by ``main.py``).
    BASE_DIR / LOGS_DIR: Canonical project paths.
"""

import logging
from pathlib import Path
from typing import Any, List

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.exceptions import ConfigError

# ---------------------------------------------------------------------------
# Base Paths
# ---------------------------------------------------------------------------
BASE_DIR: Path = Path(__file__).parent.parent
"""Project root directory (parent of ``core/``)."""

LOGS_DIR: Path = BASE_DIR / "logs"
"""Directory for log output files."""

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_USER_AGENTS: List[str] = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:125.0) "
    "Gecko/20100101 Firefox/125.0",
]


class BotSettings(BaseSettings):
    """Root configuration model for the check-in bot.

    Section overview:
        * **Core** -- log level and log file.
        * **Remote service** -- API base URL, front-end origin and the
          fixed fields of the sign-in message.
        * **Sources** -- credential and proxy file locations.
        * **Transport** -- request timeout and user-agent pool.
        * **Pacing** -- randomized delays between steps and wallets.
    """

    # Core
    log_level: str = "INFO"
    log_file: str = str(LOGS_DIR / "checkin_bot.log")

    # Remote service
    api_base_url: str = "https://bff-root.superintent.ai/v1"
    frontend_origin: str = "https://mission.superintent.ai"
    siwe_domain: str = "mission.superintent.ai"
    siwe_uri: str = "https://mission.superintent.ai"
    siwe_statement: str = (
        "To securely sign in, please sign this message to verify "
        "you're the owner of this wallet."
    )
    siwe_version: str = "1"
    siwe_chain_id: int = 1
    # Cookie the service sets once the signature is accepted
    session_cookie_name: str = "si_token"

    # Sources
    pk_file: str = "pk.txt"
    wallets_file: str = "wallets.json"
    proxies_file: str = "proxies.txt"
    use_proxies: bool = True

    # Transport
    request_timeout_seconds: float = 30.0
    user_agents: List[str] = Field(
        default_factory=lambda: list(DEFAULT_USER_AGENTS)
    )

    # Pacing (seconds)
    step_delay_min: float = 1.0
    step_delay_max: float = 3.0
    wallet_delay_min: float = 5.0
    wallet_delay_max: float = 14.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @model_validator(mode="after")
    def _check_ranges(self) -> "BotSettings":
        """Reject inverted delay ranges and an empty user-agent pool."""
        if self.step_delay_min > self.step_delay_max:
            raise ValueError(
                "step_delay_min must not exceed step_delay_max"
            )
        if self.wallet_delay_min > self.wallet_delay_max:
            raise ValueError(
                "wallet_delay_min must not exceed wallet_delay_max"
            )
        if not self.user_agents:
            raise ValueError("user_agents must not be empty")
        if self.request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        return self

    @property
    def api_url(self) -> str:
        """API base URL without a trailing slash."""
        return self.api_base_url.rstrip("/")

    def endpoint(self, path: str) -> str:
        """Join *path* onto the API base URL.

        Args:
            path: Endpoint path such as ``"/auth/nonce"``.

        Returns:
            Absolute URL string.
        """
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.api_url}/{path.lstrip('/')}"


def load_settings(**overrides: Any) -> BotSettings:
    """Build :class:`BotSettings` from the environment.

    Args:
        **overrides: Field values taking precedence over the environment.

    Raises:
        ConfigError: If any value (environment, ``.env`` or override)
            fails validation.
    """
    try:
        return BotSettings(**overrides)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'settings'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigError(f"Invalid configuration: {problems}") from e
