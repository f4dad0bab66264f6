"""Batch orchestration for the daily check-in run.

:class:`BatchOrchestrator` processes wallets strictly one after another, in
input order.  Each wallet gets:

* the proxy at ``index % len(proxies)`` (or a direct connection),
* a brand-new :class:`core.session.WalletSession` with its own cookie store,
* a :class:`checkin.workflow.CheckInWorkflow` run.

Any error raised while processing one wallet is logged together with the
wallet address and the server's response payload, recorded in the
:class:`BatchSummary`, and the loop continues with the next wallet.  Wallets
are never processed concurrently.

Classes:
    BatchSummary: Ordered per-wallet results of a run.
    BatchOrchestrator: Sequential runner with failure isolation and pacing.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from checkin.workflow import CheckInState, CheckInWorkflow, WalletResult
from core.config import BotSettings
from core.exceptions import CheckInBotError
from core.pacing import PacingPolicy
from core.proxy_manager import ProxyHandle, ProxyManager
from core.session import WalletSession
from core.wallet_manager import Wallet

logger = logging.getLogger(__name__)

SessionFactory = Callable[[BotSettings, Optional[ProxyHandle]], WalletSession]


def _default_session_factory(
    settings: BotSettings, proxy: Optional[ProxyHandle],
) -> WalletSession:
    return WalletSession(settings, proxy)


@dataclass
class BatchSummary:
    """Results of one run, in wallet order."""

    results: List[WalletResult] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.succeeded)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.succeeded)

    @property
    def total(self) -> int:
        return len(self.results)


class BatchOrchestrator:
    """
    Runs the check-in workflow for every wallet, one at a time.
    """

    def __init__(
        self,
        settings: BotSettings,
        proxy_manager: Optional[ProxyManager] = None,
        pacer: Optional[PacingPolicy] = None,
        session_factory: Optional[SessionFactory] = None,
        log: Optional[logging.Logger] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            settings: Global configuration object.
            proxy_manager: Source of per-wallet proxies; direct
                connections when omitted.
            pacer: Delay policy; defaults to the ranges in ``settings``.
            session_factory: Builds the per-wallet session (overridable
                for tests).
            log: Logger to report through.
        """
        self.settings = settings
        self.proxy_manager = proxy_manager
        self.pacer = pacer or PacingPolicy.from_settings(settings)
        self.session_factory = session_factory or _default_session_factory
        self.log = log or logger

    async def process_wallet(
        self, wallet: Wallet, proxy: Optional[ProxyHandle],
    ) -> WalletResult:
        """
        Run one wallet's full workflow inside its own session.
        Never raises: failures are logged and returned in the result.
        """
        self.log.info(f"Processing wallet: {wallet.address}")
        if proxy:
            self.log.info(f"Using proxy {proxy.label}")
        else:
            self.log.warning("No proxy applied (direct connection).")

        session = self.session_factory(self.settings, proxy)
        workflow: Optional[CheckInWorkflow] = None
        try:
            async with session:
                workflow = CheckInWorkflow(
                    session, wallet, self.settings, pacer=self.pacer, log=self.log,
                )
                return await workflow.run()
        except CheckInBotError as e:
            self._log_failure(wallet, e)
            payload = e.payload_text()
            if payload:
                self.log.error(f"Response: {payload}")
        except Exception as e:
            self.log.exception(
                f"❌ Unexpected error processing wallet {wallet.address}: {e}"
            )

        if workflow is not None:
            return workflow.result
        return WalletResult(
            address=wallet.address,
            state=CheckInState.FAILED,
            proxy=proxy.label if proxy else None,
            failed_step=CheckInState.NONCE,
            error="session could not be opened",
        )

    def _log_failure(self, wallet: Wallet, error: CheckInBotError) -> None:
        self.log.error(
            f"❌ Failed to process wallet {wallet.address} "
            f"[{error.reason}]: {error}"
        )

    async def run(self, wallets: Sequence[Wallet]) -> BatchSummary:
        """
        Process every wallet sequentially.

        Args:
            wallets: Wallets in processing order.

        Returns:
            :class:`BatchSummary` with one result per wallet.
        """
        summary = BatchSummary()
        total = len(wallets)
        self.log.info(f"Will process {total} wallet(s).")

        for i, wallet in enumerate(wallets):
            self.log.info(f"--- Wallet {i + 1} of {total} ---")
            proxy = self.proxy_manager.get_proxy(i) if self.proxy_manager else None
            result = await self.process_wallet(wallet, proxy)
            summary.results.append(result)
            self.log.info(f"--- Finished Wallet {i + 1} ---")

            if i < total - 1:
                seconds = self.pacer.wallet_seconds()
                if seconds > 0:
                    self.log.info(f"→ Taking a {seconds:g} second break...")
                    await self.pacer.sleep(seconds)

        self.log.info(
            f"✅ All wallets have been processed! "
            f"({summary.succeeded} succeeded, {summary.failed} failed)"
        )
        return summary
