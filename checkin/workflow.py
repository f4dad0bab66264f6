"""Per-wallet daily check-in state machine.

States::

    NONCE -> SIGNED -> AUTHENTICATED -> STATUS_KNOWN
          -> ALREADY_DONE | CHECKED_IN -> STATS_FETCHED

``FAILED`` is entered from any state when a step raises; the workflow records
which state it was in and re-raises so the batch orchestrator can log the
error and move on.  When today's check-in is already recorded the workflow
goes straight to the stats call without any mutating request, so running the
bot twice on the same day never claims twice.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from pydantic import ValidationError

from checkin.auth import authenticate
from checkin.models import AccountStats, CheckInResult, CheckInStatus, SuccessPayload
from core.config import BotSettings
from core.exceptions import WorkflowError
from core.pacing import PacingPolicy
from core.session import WalletSession
from core.wallet_manager import Wallet

logger = logging.getLogger(__name__)

STATUS_PATH = "/check-in/status"
CHECK_IN_PATH = "/check-in"
STATS_PATH = "/me/stats"


class CheckInState(Enum):
    NONCE = "nonce"
    SIGNED = "signed"
    AUTHENTICATED = "authenticated"
    STATUS_KNOWN = "status_known"
    ALREADY_DONE = "already_done"
    CHECKED_IN = "checked_in"
    STATS_FETCHED = "stats_fetched"
    FAILED = "failed"


@dataclass
class WalletResult:
    """Outcome of one wallet's run.

    Attributes:
        address: Wallet address.
        state: Final workflow state.
        proxy: Proxy label used, or ``None`` for a direct connection.
        already_checked_in: Whether today's check-in existed beforehand.
        points_granted: Points awarded by this run's check-in.
        status: Status snapshot taken before checking in.
        stats: Final account snapshot.
        failed_step: State the workflow was in when it failed.
        error: Failure message.
    """

    address: str
    state: CheckInState = CheckInState.NONCE
    proxy: Optional[str] = None
    already_checked_in: bool = False
    points_granted: int = 0
    status: Optional[CheckInStatus] = None
    stats: Optional[AccountStats] = None
    failed_step: Optional[CheckInState] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state == CheckInState.STATS_FETCHED


class CheckInWorkflow:
    """Drives the sign-in and check-in sequence for one wallet.

    Args:
        session: Open session dedicated to this wallet.
        wallet: Wallet being processed.
        settings: Bot configuration.
        pacer: Pacing between steps (no pauses when ``None``).
        log: Logger to report progress through.
    """

    _AUTH_STEPS = {
        "signed": CheckInState.SIGNED,
        "authenticated": CheckInState.AUTHENTICATED,
    }

    def __init__(
        self,
        session: WalletSession,
        wallet: Wallet,
        settings: BotSettings,
        pacer: Optional[PacingPolicy] = None,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self.session = session
        self.wallet = wallet
        self.settings = settings
        self.pacer = pacer
        self.log = log or logger
        proxy = getattr(session, "proxy", None)
        self.result = WalletResult(
            address=wallet.address,
            proxy=proxy.label if proxy else None,
        )
        self.history: List[CheckInState] = [CheckInState.NONCE]

    @property
    def state(self) -> CheckInState:
        return self.history[-1]

    def _transition(self, state: CheckInState) -> None:
        self.history.append(state)
        self.result.state = state

    def _on_auth_step(self, step: str) -> None:
        state = self._AUTH_STEPS.get(step)
        if state:
            self._transition(state)

    async def _pause(self) -> None:
        if self.pacer:
            await self.pacer.pause_step()

    async def run(self) -> WalletResult:
        """Execute the workflow to ``STATS_FETCHED``.

        Returns:
            The populated :class:`WalletResult`.

        Raises:
            AuthError, WorkflowError, TransportError: After moving the
                workflow to ``FAILED``.
        """
        try:
            await authenticate(
                self.session,
                self.wallet,
                self.settings,
                pacer=self.pacer,
                log=self.log,
                on_step=self._on_auth_step,
            )
            await self._pause()

            status = await self.fetch_status()
            if status.has_checked_in_today:
                self._report_already_done(status)
            else:
                await self.perform_check_in()
                await self._pause()

            await self.fetch_stats()
        except Exception as e:
            self.result.failed_step = self.state
            self.result.error = str(e)
            self._transition(CheckInState.FAILED)
            raise
        return self.result

    async def fetch_status(self) -> CheckInStatus:
        """``AUTHENTICATED -> STATUS_KNOWN``."""
        self.log.info("→ Checking check-in status...")
        response = await self.session.get(STATUS_PATH)
        if response.is_error:
            raise WorkflowError(
                "status-fetch-failed",
                payload=response.payload,
                message=f"Failed to get check-in status: {response.status}",
            )
        try:
            status = CheckInStatus.from_payload(response.data)
        except ValidationError as e:
            raise WorkflowError(
                "status-fetch-failed",
                payload=response.payload,
                message=f"Unexpected check-in status payload: {e.error_count()} error(s)",
            ) from e

        self.result.status = status
        self._transition(CheckInState.STATUS_KNOWN)
        return status

    def _report_already_done(self, status: CheckInStatus) -> None:
        """``STATUS_KNOWN -> ALREADY_DONE`` (no request is made)."""
        self.result.already_checked_in = True
        self._transition(CheckInState.ALREADY_DONE)
        self.log.warning("⚠️ Already checked in today!")
        self.log.info(f"Current Streak: {status.current_streak}")
        self.log.info(f"Total Check-in Points: {status.total_points}")

    async def perform_check_in(self) -> CheckInResult:
        """``STATUS_KNOWN -> CHECKED_IN``."""
        self.log.info("→ Performing daily check-in...")
        response = await self.session.post(CHECK_IN_PATH)
        # Success hinges on the flag alone; the counters are informational
        if response.is_error or not SuccessPayload.from_payload(response.data).succeeded:
            raise WorkflowError(
                "checkin-failed",
                payload=response.payload,
                message=f"Check-in failed (HTTP {response.status})",
            )

        result = CheckInResult.from_payload(response.data)
        self.result.points_granted = result.points_granted
        self._transition(CheckInState.CHECKED_IN)
        self.log.info(
            f"✅ Check-in successful! Points granted: {result.points_granted}"
        )
        return result

    async def fetch_stats(self) -> AccountStats:
        """``ALREADY_DONE | CHECKED_IN -> STATS_FETCHED``."""
        self.log.info("→ Fetching account stats...")
        response = await self.session.get(STATS_PATH)
        if response.is_error:
            raise WorkflowError(
                "stats-fetch-failed",
                payload=response.payload,
                message=f"Failed to get stats: {response.status}",
            )
        stats = AccountStats.from_payload(response.data)

        self.result.stats = stats
        self._transition(CheckInState.STATS_FETCHED)
        self.log.info(f"✅ Wallet {self.wallet.address} processed!")
        self.log.info(f"Total Points: {stats.total_points}")
        self.log.info(f"Referral Code: {stats.referral_code}")
        self.log.info(f"Referred By: {stats.referred_by}")
        self.log.info(f"Referral Count: {stats.referral_count}")
        return stats
