"""Drivers that pump :meth:`Trainer.tick`.

The trainer only advances when something calls ``tick``. These drivers cover
the usual hosts: a tight loop (tests, batch jobs), a redraw callback that
trains on every few frames, and a background thread.
"""

from __future__ import annotations

import logging
import threading
from typing import Protocol

logger = logging.getLogger(__name__)

DEFAULT_FRAMES_PER_EPOCH = 3


class Tickable(Protocol):
    """Anything that can advance one unit of work per call."""

    def tick(self, run_id: int | None = None) -> bool:
        """Advance once; return ``True`` while more ticks are wanted."""


def run_until_idle(
    trainer: Tickable, run_id: int | None = None, *, max_ticks: int | None = None
) -> int:
    """Tick ``trainer`` back-to-back until it stops; return the ticks taken."""

    ticks = 0
    while max_ticks is None or ticks < max_ticks:
        ticks += 1
        if not trainer.tick(run_id):
            break
    return ticks


class FrameDriver:
    """Train on every ``frames_per_epoch``-th frame of a host redraw loop.

    The host calls :meth:`on_frame` from its frame callback and schedules
    another frame while it returns ``True``.
    """

    def __init__(
        self,
        trainer: Tickable,
        run_id: int | None = None,
        *,
        frames_per_epoch: int = DEFAULT_FRAMES_PER_EPOCH,
    ) -> None:
        if frames_per_epoch < 1:
            raise ValueError("frames_per_epoch must be at least 1")
        self.trainer = trainer
        self.run_id = run_id if run_id is not None else getattr(trainer, "run_id", None)
        self.frames_per_epoch = frames_per_epoch
        self.frames = 0
        self.cancelled = False

    def on_frame(self) -> bool:
        if self.cancelled:
            return False
        self.frames += 1
        if self.frames % self.frames_per_epoch:
            return True
        if not self.trainer.tick(self.run_id):
            self.cancelled = True
        return not self.cancelled

    def cancel(self) -> None:
        self.cancelled = True


class BackgroundDriver:
    """Tick a trainer from a daemon thread until it stops or is cancelled."""

    def __init__(
        self,
        trainer: Tickable,
        run_id: int | None = None,
        *,
        interval: float = 0.0,
    ) -> None:
        self.trainer = trainer
        self.run_id = run_id if run_id is not None else getattr(trainer, "run_id", None)
        self.interval = interval
        self.ticks = 0
        self._cancel = threading.Event()
        self._thread = threading.Thread(target=self._loop, name="swishfit-trainer", daemon=True)

    def start(self) -> "BackgroundDriver":
        self._thread.start()
        return self

    def _loop(self) -> None:
        while not self._cancel.is_set():
            self.ticks += 1
            if not self.trainer.tick(self.run_id):
                break
            if self.interval:
                self._cancel.wait(self.interval)
        logger.debug("Background driver exited after %d ticks", self.ticks)

    def cancel(self) -> None:
        self._cancel.set()

    def join(self, timeout: float | None = None) -> None:
        self._thread.join(timeout)

    @property
    def alive(self) -> bool:
        return self._thread.is_alive()


__all__ = [
    "BackgroundDriver",
    "DEFAULT_FRAMES_PER_EPOCH",
    "FrameDriver",
    "Tickable",
    "run_until_idle",
]
