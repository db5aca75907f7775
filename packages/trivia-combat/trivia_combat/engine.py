"""Engine - encounter loop, tick counting, pacing and lifecycle hooks."""

import logging
import os
import random
import time
from typing import Callable

from trivia_combat.types import TickContext

logger = logging.getLogger(__name__)

System = Callable[[TickContext], None]
Hook = Callable[[TickContext], None]


class Engine:
    """Drives an encounter one tick at a time.

    Systems run in registration order on every tick. Any system may call
    ``ctx.request_stop()``; the remaining systems of that tick are skipped
    and ``run``/``run_forever`` return after the stop hooks fire.
    """

    def __init__(self, tps: int = 1, seed: int | None = None) -> None:
        if tps <= 0:
            raise ValueError("tps must be positive")
        self._tps = tps
        self._dt = 1.0 / tps
        self._tick_number = 0
        self._systems: list[System] = []
        self._start_hooks: list[Hook] = []
        self._stop_hooks: list[Hook] = []
        self._stop_requested: bool = False

        if seed is None:
            seed = int.from_bytes(os.urandom(8))
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def tps(self) -> int:
        return self._tps

    @property
    def dt(self) -> float:
        return self._dt

    @property
    def tick_number(self) -> int:
        return self._tick_number

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def random(self) -> random.Random:
        return self._rng

    @property
    def stopped(self) -> bool:
        return self._stop_requested

    def add_system(self, system: System) -> None:
        self._systems.append(system)

    def on_start(self, hook: Hook) -> None:
        self._start_hooks.append(hook)

    def on_stop(self, hook: Hook) -> None:
        self._stop_hooks.append(hook)

    def _request_stop(self) -> None:
        self._stop_requested = True

    def _context(self) -> TickContext:
        return TickContext(
            tick_number=self._tick_number,
            dt=self._dt,
            elapsed=self._tick_number * self._dt,
            request_stop=self._request_stop,
            random=self._rng,
        )

    def _tick(self) -> None:
        self._tick_number += 1
        ctx = self._context()
        for system in self._systems:
            system(ctx)
            if self._stop_requested:
                logger.debug("Stop requested at tick %d", ctx.tick_number)
                break

    def start(self) -> None:
        """Fire start hooks without ticking."""
        self._stop_requested = False
        ctx = self._context()
        for hook in self._start_hooks:
            hook(ctx)

    def stop(self) -> None:
        """Fire stop hooks."""
        ctx = self._context()
        for hook in self._stop_hooks:
            hook(ctx)

    def step(self) -> None:
        if self._stop_requested:
            return
        self._tick()

    def run(self, n: int) -> None:
        self.start()
        for _ in range(n):
            self._tick()
            if self._stop_requested:
                break
        self.stop()

    def run_forever(self) -> None:
        self.start()
        dt = self._dt
        while not self._stop_requested:
            started = time.monotonic()
            self._tick()
            if self._stop_requested:
                break
            sleep_time = dt - (time.monotonic() - started)
            if sleep_time > 0:
                time.sleep(sleep_time)
        self.stop()
