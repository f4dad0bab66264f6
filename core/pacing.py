"""Randomized pacing between protocol steps and between wallets.

The delays imitate a person clicking through the site and keep request rates
low.  They are a policy object rather than hard-coded sleeps so tests can run
with :meth:`PacingPolicy.disabled`.
"""

import asyncio
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Tuple

from core.config import BotSettings

Sleeper = Callable[[float], Awaitable[None]]


@dataclass
class PacingPolicy:
    """Delay ranges in seconds.

    Attributes:
        step_delay: ``(min, max)`` pause between steps of one wallet.
        wallet_delay: ``(min, max)`` pause between two wallets; the value
            is drawn in whole seconds.
        sleeper: Awaitable sleep function (``asyncio.sleep`` by default).
    """

    step_delay: Tuple[float, float] = (1.0, 3.0)
    wallet_delay: Tuple[float, float] = (5.0, 14.0)
    sleeper: Sleeper = asyncio.sleep

    @classmethod
    def from_settings(cls, settings: BotSettings) -> "PacingPolicy":
        return cls(
            step_delay=(settings.step_delay_min, settings.step_delay_max),
            wallet_delay=(settings.wallet_delay_min, settings.wallet_delay_max),
        )

    @classmethod
    def disabled(cls) -> "PacingPolicy":
        """Policy that never waits."""
        return cls(step_delay=(0.0, 0.0), wallet_delay=(0.0, 0.0))

    def step_seconds(self) -> float:
        low, high = self.step_delay
        return random.uniform(low, high) if high > 0 else 0.0

    def wallet_seconds(self) -> float:
        low, high = self.wallet_delay
        if high <= 0:
            return 0.0
        return float(random.randint(int(low), int(high)))

    async def sleep(self, seconds: float) -> None:
        """Sleep for *seconds* when positive."""
        if seconds > 0:
            await self.sleeper(seconds)

    async def pause_step(self) -> float:
        """Wait a random step delay and return the seconds waited."""
        seconds = self.step_seconds()
        await self.sleep(seconds)
        return seconds
