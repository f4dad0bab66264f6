"""Error taxonomy for the check-in bot.

Only :class:`ConfigError` is fatal to a run.  The other errors are raised
inside a single wallet's processing and are caught by
:class:`core.orchestrator.BatchOrchestrator`, which logs them and moves on
to the next wallet.

Classes:
    CheckInBotError: Common base class.
    ConfigError: Missing or invalid credentials / configuration.
    TransportError: Network, proxy, timeout or 5xx failure.
    AuthError: The SIWE handshake failed at one of its steps.
    WorkflowError: Status, check-in or stats call failed.
"""

import json
from typing import Any, Optional


class CheckInBotError(Exception):
    """Base class for all bot errors.

    Attributes:
        reason: Stable machine-readable failure code
            (e.g. ``"nonce-missing"``).
        payload: Decoded response body that accompanied the failure,
            if any.  Logged verbatim for diagnosis.
    """

    def __init__(
        self,
        reason: str,
        payload: Optional[Any] = None,
        message: Optional[str] = None,
    ) -> None:
        self.reason = reason
        self.payload = payload
        super().__init__(message or reason)

    def payload_text(self) -> Optional[str]:
        """Return the payload serialised as JSON, or ``None``."""
        if self.payload is None or self.payload == {}:
            return None
        try:
            return json.dumps(self.payload)
        except (TypeError, ValueError):
            return str(self.payload)


class ConfigError(CheckInBotError):
    """No usable credentials or an invalid configuration value."""

    def __init__(self, message: str) -> None:
        super().__init__("config", message=message)


class TransportError(CheckInBotError):
    """Infrastructure failure talking to the remote service.

    Raised for DNS / connection / proxy failures, request timeouts and
    responses with a status of 500 or above.
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        payload: Optional[Any] = None,
    ) -> None:
        self.status = status
        super().__init__("transport", payload=payload, message=message)


class AuthError(CheckInBotError):
    """The sign-in handshake did not produce an authenticated session.

    Reasons: ``nonce-missing``, ``rejected``, ``no-session-token``.
    """


class WorkflowError(CheckInBotError):
    """A check-in workflow call failed after authentication.

    Reasons: ``status-fetch-failed``, ``checkin-failed``,
    ``stats-fetch-failed``.
    """
