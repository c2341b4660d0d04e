import pytest

from primordia.util.clock import ElapsedClock


class FakeTime:
    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


def test_tick_accumulates_real_time() -> None:
    fake = FakeTime()
    clock = ElapsedClock(time_source=fake)

    fake.now = 0.1
    assert clock.tick() == pytest.approx(0.1)
    fake.now = 0.3
    assert clock.tick() == pytest.approx(0.3)


def test_time_scale_multiplies_delta() -> None:
    fake = FakeTime()
    clock = ElapsedClock(time_source=fake)
    clock.time_scale = 2.0

    fake.now = 0.5
    assert clock.tick() == pytest.approx(1.0)


def test_time_spent_paused_is_dropped() -> None:
    fake = FakeTime()
    clock = ElapsedClock(time_source=fake)
    fake.now = 1.0
    clock.tick()

    clock.pause()
    fake.now = 5.0
    assert clock.tick() == pytest.approx(1.0)

    fake.now = 6.0
    clock.resume()
    fake.now = 6.5
    assert clock.tick() == pytest.approx(1.5)


def test_backwards_time_source_never_rewinds() -> None:
    fake = FakeTime(10.0)
    clock = ElapsedClock(time_source=fake)
    fake.now = 9.0

    assert clock.tick() == 0.0


def test_seek_sets_elapsed_and_continues_from_there() -> None:
    fake = FakeTime()
    clock = ElapsedClock(time_source=fake)
    fake.now = 2.0
    clock.seek(100.0)

    assert clock.elapsed == 100.0
    fake.now = 2.25
    assert clock.tick() == pytest.approx(100.25)


def test_seek_rejects_negative_time() -> None:
    clock = ElapsedClock(time_source=FakeTime())
    with pytest.raises(ValueError):
        clock.seek(-1.0)
