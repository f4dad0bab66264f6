"""Wallet sign-in handshake against the check-in service.

Steps:
    1. ``GET /auth/nonce`` -- obtain a single-use nonce.
    2. Build the EIP-4361 challenge and sign it with the wallet.
    3. ``POST /auth/siwe`` with ``{message, signature}``.
    4. Confirm the service actually set the session-token cookie.

Any failure raises :class:`core.exceptions.AuthError`.  On success the
session's cookie store carries the token used by every later call.
"""

import logging
from typing import Callable, Optional

from siwe import SiweMessage

from checkin.models import NoncePayload, SuccessPayload
from checkin.siwe import service_message
from core.config import BotSettings
from core.exceptions import AuthError, TransportError
from core.pacing import PacingPolicy
from core.session import WalletSession
from core.wallet_manager import Wallet

logger = logging.getLogger(__name__)

NONCE_PATH = "/auth/nonce"
SIGN_IN_PATH = "/auth/siwe"

StepCallback = Callable[[str], None]


async def fetch_nonce(session: WalletSession) -> str:
    """Request a fresh nonce.

    Raises:
        AuthError: ``nonce-missing`` on an error status, a server or
            network failure, or a payload without a nonce string.
    """
    try:
        response = await session.get(NONCE_PATH)
    except TransportError as e:
        raise AuthError(
            "nonce-missing",
            payload=e.payload,
            message=f"Nonce request failed: {e}",
        ) from e

    if response.is_error:
        raise AuthError(
            "nonce-missing",
            payload=response.payload,
            message=f"Nonce request failed: {response.status}",
        )

    nonce = NoncePayload.from_payload(response.data).nonce
    if not nonce:
        raise AuthError(
            "nonce-missing",
            payload=response.payload,
            message="Failed to get nonce",
        )
    return nonce


def build_challenge(
    wallet: Wallet, nonce: str, settings: BotSettings,
) -> SiweMessage:
    """Build the challenge for *wallet* and *nonce*.

    Returns the structured message; the caller signs
    :meth:`SiweMessage.prepare_message`.

    Raises:
        AuthError: ``nonce-missing`` if the issued nonce cannot form a
            valid EIP-4361 message (the standard requires at least
            eight alphanumeric characters).
    """
    try:
        return service_message(settings, wallet.address, nonce)
    except ValueError as e:
        raise AuthError(
            "nonce-missing",
            payload={"nonce": nonce},
            message=f"Nonce unusable for sign-in: {e}",
        ) from e


async def submit_signature(
    session: WalletSession, message: str, signature: str,
) -> None:
    """Post the signed challenge.

    Raises:
        AuthError: ``rejected`` unless the service answers below 400
            with ``success: true``, including on a server or network
            failure.
    """
    try:
        response = await session.post(
            SIGN_IN_PATH, json_body={"message": message, "signature": signature},
        )
    except TransportError as e:
        raise AuthError(
            "rejected",
            payload=e.payload,
            message=f"Authentication request failed: {e}",
        ) from e
    if response.is_error or not SuccessPayload.from_payload(response.data).succeeded:
        raise AuthError(
            "rejected",
            payload=response.payload,
            message=f"Authentication failed (HTTP {response.status})",
        )


def verify_session_token(session: WalletSession, settings: BotSettings) -> None:
    """Ensure the session-token cookie is present.

    Raises:
        AuthError: ``no-session-token`` if the service reported success
            without setting the cookie.
    """
    if not session.has_cookie(settings.session_cookie_name):
        raise AuthError(
            "no-session-token",
            message=f"Missing {settings.session_cookie_name} cookie",
        )


async def authenticate(
    session: WalletSession,
    wallet: Wallet,
    settings: BotSettings,
    pacer: Optional[PacingPolicy] = None,
    log: Optional[logging.Logger] = None,
    on_step: Optional[StepCallback] = None,
) -> None:
    """Run the full sign-in handshake for *wallet* on *session*.

    Args:
        session: Fresh session for this wallet.
        wallet: Wallet proving ownership of its address.
        settings: Service constants for the challenge.
        pacer: Pacing policy; a pause follows the nonce request.
        log: Logger to report progress through.
        on_step: Called with ``"nonce"``, ``"signed"`` and
            ``"authenticated"`` as each step completes.

    Raises:
        AuthError: If any step fails, including server or network
            failures of the nonce and sign-in requests.
    """
    log = log or logger
    notify = on_step or (lambda step: None)

    log.info("→ Getting nonce...")
    nonce = await fetch_nonce(session)
    log.info(f"✅ Got nonce: {nonce}")
    notify("nonce")
    if pacer:
        await pacer.pause_step()

    log.info("→ Signing message...")
    challenge = build_challenge(wallet, nonce, settings)
    message = challenge.prepare_message()
    signature = wallet.sign_message(message)
    notify("signed")

    log.info("→ Authenticating...")
    await submit_signature(session, message, signature)
    verify_session_token(session, settings)
    log.info("✅ Authentication successful!")
    notify("authenticated")
