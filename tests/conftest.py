import json
from typing import Any, Dict, List, Optional, Tuple

import pytest

from core.config import BotSettings
from core.session import ApiResponse
from core.wallet_manager import Wallet

# Well-known development key (Hardhat account #0)
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


def api(data: Any = None, status: int = 200) -> ApiResponse:
    """Build an ApiResponse the way WalletSession would decode it."""
    text = json.dumps(data) if data is not None else ""
    return ApiResponse(
        status=status,
        url="https://bff-root.superintent.ai/v1",
        data=data if isinstance(data, dict) else {},
        text=text,
    )


class FakeSession:
    """Scripted stand-in for WalletSession.

    ``routes`` maps ``(method, path)`` to a response, an exception to
    raise, or a list of those consumed in order (the last one repeats).
    ``cookies`` maps ``(method, path)`` to cookies set by that call.
    """

    def __init__(
        self,
        routes: Optional[Dict[Tuple[str, str], Any]] = None,
        cookies: Optional[Dict[Tuple[str, str], Dict[str, str]]] = None,
        proxy: Any = None,
    ):
        self.routes = {
            key: list(value) if isinstance(value, list) else [value]
            for key, value in (routes or {}).items()
        }
        self.set_cookies = cookies or {}
        self.jar: Dict[str, str] = {}
        self.calls: List[Tuple[str, str, Any]] = []
        self.proxy = proxy
        self.entered = False
        self.closed = False

    async def __aenter__(self):
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.closed = True
        self.jar.clear()

    async def request(self, method: str, path: str, json_body: Any = None) -> ApiResponse:
        self.calls.append((method, path, json_body))
        key = (method, path)
        if key not in self.routes:
            raise AssertionError(f"unexpected request {key}")
        queue = self.routes[key]
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        self.jar.update(self.set_cookies.get(key, {}))
        return item

    async def get(self, path: str) -> ApiResponse:
        return await self.request("GET", path)

    async def post(self, path: str, json_body: Any = None) -> ApiResponse:
        return await self.request("POST", path, json_body=json_body)

    def has_cookie(self, name: str) -> bool:
        return bool(self.jar.get(name))

    def paths(self) -> List[Tuple[str, str]]:
        return [(method, path) for method, path, _ in self.calls]


def happy_routes(
    status: Optional[Dict[str, Any]] = None,
    check_in: Optional[Dict[str, Any]] = None,
    stats: Optional[Dict[str, Any]] = None,
    nonce: str = "abc123xyz",
) -> Dict[Tuple[str, str], Any]:
    """Routes for a wallet that signs in and checks in successfully."""
    return {
        ("GET", "/auth/nonce"): api({"nonce": nonce}),
        ("POST", "/auth/siwe"): api({"success": True}),
        ("GET", "/check-in/status"): api(
            status if status is not None else {
                "hasCheckedInToday": False, "currentStreak": 2, "totalPoints": 100,
            }
        ),
        ("POST", "/check-in"): api(
            check_in if check_in is not None else {"success": True, "pointsGranted": 50}
        ),
        ("GET", "/me/stats"): api(
            stats if stats is not None else {
                "totalPoints": 150,
                "referralCode": "REF42",
                "referredBy": "0xabc",
                "referralCount": 3,
            }
        ),
    }


SESSION_COOKIE = {("POST", "/auth/siwe"): {"si_token": "xyz"}}


def make_wallet(n: int) -> Wallet:
    """Deterministic wallet for index *n* (n >= 1)."""
    return Wallet.from_private_key("0x" + f"{n:064x}")


@pytest.fixture
def settings(tmp_path):
    return BotSettings(
        log_file=str(tmp_path / "logs" / "test.log"),
        step_delay_min=0,
        step_delay_max=0,
        wallet_delay_min=0,
        wallet_delay_max=0,
        _env_file=None,
    )


@pytest.fixture
def wallet():
    return Wallet.from_private_key(TEST_PRIVATE_KEY)
