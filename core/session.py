"""Per-wallet HTTP session transport.

:class:`WalletSession` wraps one ``aiohttp.ClientSession`` together with a
private cookie store and an optional proxy tunnel.  A session is created for
exactly one wallet and closed when that wallet's workflow ends, so cookies and
auth tokens can never leak between wallets.

Cookie handling is explicit rather than delegated to aiohttp: the underlying
client runs with a :class:`aiohttp.DummyCookieJar`, and the session attaches
the accumulated ``Cookie`` header before each request and merges every
``Set-Cookie`` entry after each response.  Cookie-store failures are logged
at debug level and never abort the session.

Status handling:
    * 200-499 -- returned as :class:`ApiResponse` for the caller to judge.
    * >= 500, connection / DNS / proxy failures, timeouts -- raised as
      :class:`core.exceptions.TransportError`.
"""

import asyncio
import json
import logging
import random
from dataclasses import dataclass, field
from http.cookies import SimpleCookie
from typing import Any, Dict, Optional

import aiohttp
from yarl import URL

from core.config import BotSettings
from core.exceptions import TransportError
from core.proxy_manager import ProxyHandle

logger = logging.getLogger(__name__)


@dataclass
class ApiResponse:
    """Decoded response from the remote API.

    Attributes:
        status: HTTP status code (always below 500).
        url: Final response URL.
        data: Decoded JSON object, or ``{}`` when the body is empty, not
            JSON, or not a JSON object.
        text: Raw response body.
    """

    status: int
    url: str
    data: Dict[str, Any] = field(default_factory=dict)
    text: str = ""

    @property
    def is_error(self) -> bool:
        return self.status >= 400

    @property
    def payload(self) -> Any:
        """Best available body for diagnostics (JSON object or raw text)."""
        return self.data if self.data else (self.text or None)


def decode_json_object(text: str) -> Dict[str, Any]:
    """Decode *text* as a JSON object, returning ``{}`` on any mismatch."""
    if not text:
        return {}
    try:
        value = json.loads(text)
    except ValueError:
        return {}
    return value if isinstance(value, dict) else {}


def build_headers(settings: BotSettings, user_agent: str) -> Dict[str, str]:
    """Static browser-like headers sent with every request.

    Args:
        settings: Bot configuration (front-end origin).
        user_agent: User-Agent chosen for this session.

    Returns:
        Header mapping for ``aiohttp.ClientSession(headers=...)``.
    """
    origin = settings.frontend_origin.rstrip("/")
    return {
        "Accept": "application/json, text/plain, */*",
        "Accept-Language": "en-US,en;q=0.6",
        "Origin": origin,
        "Referer": f"{origin}/",
        "User-Agent": user_agent,
        "Sec-Ch-Ua-Platform": '"Windows"',
        "Sec-Ch-Ua-Mobile": "?0",
        "Sec-Fetch-Dest": "empty",
        "Sec-Fetch-Mode": "cors",
        "Sec-Fetch-Site": "same-site",
    }


class WalletSession:
    """Isolated HTTP session for a single wallet.

    Use as an async context manager::

        async with WalletSession(settings, proxy) as session:
            response = await session.get("/auth/nonce")

    Attributes:
        settings: Bot configuration (base URL, timeout, UA pool).
        proxy: Optional proxy tunnel for every request of this session.
        user_agent: User-Agent picked once for the session's lifetime.
    """

    def __init__(
        self,
        settings: BotSettings,
        proxy: Optional[ProxyHandle] = None,
        log: Optional[logging.Logger] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        self.settings = settings
        self.proxy = proxy
        self.log = log or logger
        self.user_agent = user_agent or random.choice(settings.user_agents)
        self.timeout = aiohttp.ClientTimeout(
            total=settings.request_timeout_seconds,
        )
        self._client: Optional[aiohttp.ClientSession] = None
        self._cookies: Optional[aiohttp.CookieJar] = None

    async def __aenter__(self) -> "WalletSession":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def closed(self) -> bool:
        return self._client is None or self._client.closed

    async def open(self) -> None:
        """Create the underlying client and an empty cookie store."""
        if not self.closed:
            return
        # unsafe=True keeps cookies issued by IP-address hosts
        self._cookies = aiohttp.CookieJar(unsafe=True)
        self._client = aiohttp.ClientSession(
            headers=build_headers(self.settings, self.user_agent),
            cookie_jar=aiohttp.DummyCookieJar(),
            timeout=self.timeout,
        )

    async def close(self) -> None:
        """Close the client and drop every stored cookie."""
        if self._client is not None and not self._client.closed:
            await self._client.close()
        if self._cookies is not None:
            self._cookies.clear()
        self._client = None
        self._cookies = None

    # ------------------------------------------------------------------
    # Cookie store
    # ------------------------------------------------------------------

    def cookie_string(self, url: Optional[str] = None) -> str:
        """Return the ``Cookie`` header value applicable to *url*.

        Args:
            url: Target URL (defaults to the API base URL).

        Returns:
            ``name=value; name2=value2`` or an empty string.
        """
        if self._cookies is None:
            return ""
        target = URL(url or self.settings.api_url)
        try:
            filtered = self._cookies.filter_cookies(target)
        except Exception as e:
            self.log.debug("Cookie lookup failed for %s: %s", target, e)
            return ""
        return "; ".join(
            f"{name}={morsel.value}" for name, morsel in filtered.items()
        )

    def has_cookie(self, name: str, url: Optional[str] = None) -> bool:
        """Whether a non-empty cookie called *name* applies to *url*.

        Only cookies that would be sent to *url* (defaults to the API base
        URL) count, so a token scoped to an unrelated path is ignored.
        """
        if self._cookies is None:
            return False
        target = URL(url or self.settings.api_url)
        try:
            morsel = self._cookies.filter_cookies(target).get(name)
        except Exception as e:
            self.log.debug("Cookie lookup failed for %s: %s", target, e)
            return False
        return bool(morsel and morsel.value)

    def _store_cookies(self, response: aiohttp.ClientResponse) -> None:
        """Merge every ``Set-Cookie`` header of *response* into the store."""
        if self._cookies is None:
            return
        for header in response.headers.getall("Set-Cookie", []):
            try:
                cookie = SimpleCookie()
                cookie.load(header)
                self._cookies.update_cookies(cookie, response.url)
            except Exception as e:
                self.log.debug("Ignoring unparseable cookie: %s", e)

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def request(
        self, method: str, path: str, json_body: Optional[Any] = None,
    ) -> ApiResponse:
        """Send a request relative to the API base URL.

        Args:
            method: HTTP method.
            path: Endpoint path (e.g. ``"/check-in"``) or absolute URL.
            json_body: Optional JSON request body.

        Returns:
            :class:`ApiResponse` for any status below 500.

        Raises:
            TransportError: On network / proxy failure, timeout, or a
                status of 500 or above.
        """
        if self.closed:
            await self.open()

        url = self.settings.endpoint(path)
        headers: Dict[str, str] = {}
        cookie_header = self.cookie_string(url)
        if cookie_header:
            headers["Cookie"] = cookie_header

        try:
            async with self._client.request(
                method,
                url,
                json=json_body,
                headers=headers,
                proxy=self.proxy.url if self.proxy else None,
            ) as resp:
                self._store_cookies(resp)
                text = await resp.text()
                status = resp.status
                final_url = str(resp.url)
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"{method} {path} timed out after "
                f"{self.settings.request_timeout_seconds:g}s"
            ) from e
        except aiohttp.ClientError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e

        response = ApiResponse(
            status=status,
            url=final_url,
            data=decode_json_object(text),
            text=text,
        )
        if status >= 500:
            raise TransportError(
                f"{method} {path} returned HTTP {status}",
                status=status,
                payload=response.payload,
            )
        self.log.debug("%s %s -> %d", method, path, status)
        return response

    async def get(self, path: str) -> ApiResponse:
        return await self.request("GET", path)

    async def post(
        self, path: str, json_body: Optional[Any] = None,
    ) -> ApiResponse:
        return await self.request("POST", path, json_body=json_body)
