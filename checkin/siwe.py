"""Sign-In with Ethereum (EIP-4361) challenge construction.

The canonical message layout comes from the ``siwe`` package; this module only
fills in the service's fixed fields and the browser-style timestamp.  The
server verifies the signature against the exact text the wallet signed, so
callers sign :meth:`siwe.SiweMessage.prepare_message` verbatim.
"""

from datetime import datetime, timezone
from typing import Optional

from siwe import SiweMessage

from core.config import BotSettings


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and ``Z`` suffix.

    Matches the format browsers produce with ``Date.toISOString()``,
    e.g. ``2024-05-01T08:30:00.123Z``.
    """
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def service_message(
    settings: BotSettings,
    address: str,
    nonce: str,
    issued_at: Optional[str] = None,
) -> SiweMessage:
    """Build the challenge with the service's fixed fields.

    Args:
        settings: Supplies domain, URI, statement, version and chain ID.
        address: Checksummed wallet address.
        nonce: Nonce freshly issued by ``GET /auth/nonce``.
        issued_at: Override for the issuance timestamp (defaults to now).

    Raises:
        ValueError: If a field violates EIP-4361 (pydantic
            ``ValidationError`` from the ``siwe`` model).
    """
    return SiweMessage(
        domain=settings.siwe_domain,
        address=address,
        statement=settings.siwe_statement or None,
        uri=settings.siwe_uri,
        version=settings.siwe_version,
        chain_id=settings.siwe_chain_id,
        nonce=nonce,
        issued_at=issued_at or utc_timestamp(),
    )
