import time

import pytest

from swishfit.training.drivers import BackgroundDriver, FrameDriver, run_until_idle
from swishfit.training.stopping import StoppingPolicy
from swishfit.training.trainer import Trainer

IDENTITY = [(-1.0, -1.0), (0.0, 0.0), (1.0, 1.0)]


class _CountingTickable:
    def __init__(self, limit):
        self.limit = limit
        self.calls = 0

    def tick(self, run_id=None):
        self.calls += 1
        return self.calls < self.limit


def test_run_until_idle_stops_when_tick_returns_false():
    target = _CountingTickable(limit=5)
    assert run_until_idle(target) == 5
    assert target.calls == 5


def test_run_until_idle_respects_max_ticks():
    target = _CountingTickable(limit=100)
    assert run_until_idle(target, max_ticks=3) == 3


def test_frame_driver_trains_every_third_frame():
    trainer = Trainer([1, 4, 1], seed=0, policy=StoppingPolicy(max_epochs=4, run_max_epochs=None))
    driver = FrameDriver(trainer, trainer.start(IDENTITY))
    frames = 0
    while driver.on_frame():
        frames += 1
        assert trainer.current_epoch() == frames // 3
    assert trainer.current_epoch() == 4
    assert driver.frames == 12
    assert driver.on_frame() is False


def test_frame_driver_goes_quiet_after_stop():
    trainer = Trainer([1, 4, 1], seed=0, policy=StoppingPolicy(max_epochs=100, run_max_epochs=None))
    driver = FrameDriver(trainer, trainer.start(IDENTITY), frames_per_epoch=1)
    assert driver.on_frame()
    trainer.stop()
    epoch = trainer.current_epoch()
    for _ in range(6):
        driver.on_frame()
    assert trainer.current_epoch() == epoch == 1
    assert driver.cancelled


def test_tokenless_driver_is_bound_to_the_run_it_was_created_for():
    trainer = Trainer([1, 4, 1], seed=0, policy=StoppingPolicy(max_epochs=100, run_max_epochs=None))
    trainer.start(IDENTITY)
    old_driver = FrameDriver(trainer, frames_per_epoch=1)
    assert old_driver.run_id == trainer.run_id
    assert old_driver.on_frame()

    trainer.stop()
    new_driver = FrameDriver(trainer, trainer.start(IDENTITY), frames_per_epoch=1)
    before = trainer.current_epoch()
    assert old_driver.on_frame() is False
    assert new_driver.on_frame() is True
    assert trainer.current_epoch() == before + 1
    assert old_driver.cancelled


def test_tokenless_background_driver_ignores_a_later_run():
    trainer = Trainer([1, 4, 1], seed=0, policy=StoppingPolicy(max_epochs=100, run_max_epochs=None))
    trainer.start(IDENTITY)
    driver = BackgroundDriver(trainer)
    trainer.stop()
    trainer.start(IDENTITY)
    driver.start().join(timeout=5.0)
    assert not driver.alive
    assert driver.ticks == 1
    assert trainer.current_epoch() == 0


def test_frame_driver_rejects_bad_throttle():
    with pytest.raises(ValueError):
        FrameDriver(_CountingTickable(1), frames_per_epoch=0)


def test_background_driver_stop_freezes_epoch_counter():
    trainer = Trainer(
        [1, 4, 1], seed=0, policy=StoppingPolicy(max_epochs=1_000_000, run_max_epochs=None)
    )
    driver = BackgroundDriver(trainer, trainer.start(IDENTITY), interval=0.001).start()
    deadline = time.monotonic() + 5.0
    while trainer.current_epoch() < 3 and time.monotonic() < deadline:
        time.sleep(0.005)
    trainer.stop()
    stopped_at = trainer.current_epoch()
    driver.join(timeout=5.0)
    assert not driver.alive
    time.sleep(0.02)
    assert stopped_at >= 3
    assert trainer.current_epoch() == stopped_at


def test_background_driver_runs_to_completion():
    trainer = Trainer([1, 4, 1], seed=0, policy=StoppingPolicy(max_epochs=20, run_max_epochs=None))
    driver = BackgroundDriver(trainer, trainer.start(IDENTITY)).start()
    driver.join(timeout=10.0)
    assert not driver.alive
    assert trainer.current_epoch() == 20
    assert not trainer.is_training()
