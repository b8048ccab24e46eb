"""
Unreliable Service Simulator - randomized latency and failure

Stands in for a remote backend: every call waits for a latency drawn
uniformly from [min_latency, max_latency] and then, with probability
error_rate, fails with NetworkError instead of returning its value.

The random source and the sleep function are injected so tests can
script both the outcome and the interleaving of concurrent calls.

Usage:
    simulator = UnreliableServiceSimulator(rng=random.Random(42))
    value = await simulator.simulate(value)                  # defaults
    value = await simulator.simulate(value, error_rate=0.2)  # override
"""

import asyncio
import logging
import random
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Optional, TypeVar

from talentflow.config import Settings
from talentflow.errors import NetworkError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class SimulationOptions:
    """
    Attributes:
        error_rate: Failure probability (0-1)
        min_latency: Lower bound of the latency window (ms)
        max_latency: Upper bound of the latency window (ms)
    """
    error_rate: float = 0.1
    min_latency: float = 200
    max_latency: float = 1200

    def __post_init__(self):
        if not 0.0 <= self.error_rate <= 1.0:
            raise ValueError(f"error_rate must be within [0, 1], got {self.error_rate}")
        if self.min_latency < 0 or self.min_latency > self.max_latency:
            raise ValueError(
                f"Invalid latency window [{self.min_latency}, {self.max_latency}]"
            )


class UnreliableServiceSimulator:
    """
    Wraps results with simulated network behaviour.

    Attributes:
        defaults: Options used when a call does not override them
        time_scale: Seconds per latency unit (0 disables waiting)
        stats: Counts of calls, failures and successes
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        defaults: Optional[SimulationOptions] = None,
        time_scale: float = 0.001,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.rng = rng or random.Random()
        self.defaults = defaults or SimulationOptions()
        self.time_scale = time_scale
        self._sleep = sleep
        self.stats = {"calls": 0, "failures": 0, "successes": 0}

    @classmethod
    def from_settings(
        cls, settings: Settings, rng: Optional[random.Random] = None
    ) -> "UnreliableServiceSimulator":
        return cls(
            rng=rng,
            defaults=SimulationOptions(
                error_rate=settings.default_error_rate,
                min_latency=settings.min_latency_ms,
                max_latency=settings.max_latency_ms,
            ),
            time_scale=settings.latency_time_scale,
        )

    def options(
        self,
        error_rate: Optional[float] = None,
        min_latency: Optional[float] = None,
        max_latency: Optional[float] = None,
    ) -> SimulationOptions:
        overrides = {
            name: value
            for name, value in (
                ("error_rate", error_rate),
                ("min_latency", min_latency),
                ("max_latency", max_latency),
            )
            if value is not None
        }
        return replace(self.defaults, **overrides)

    async def simulate(
        self,
        value: T,
        error_rate: Optional[float] = None,
        min_latency: Optional[float] = None,
        max_latency: Optional[float] = None,
    ) -> T:
        """
        Resolve with value after a random delay, or fail.

        Raises:
            NetworkError: With probability error_rate
        """
        opts = self.options(error_rate, min_latency, max_latency)
        self.stats["calls"] += 1

        latency = self.rng.uniform(opts.min_latency, opts.max_latency)
        await self._sleep(latency * self.time_scale)

        if self.rng.random() < opts.error_rate:
            self.stats["failures"] += 1
            logger.info(f"Simulated network failure after {latency:.0f}ms")
            raise NetworkError()

        self.stats["successes"] += 1
        return value
