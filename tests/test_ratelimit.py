# tests/test_ratelimit.py

import threading

import pytest

from flowsmith.integration.ratelimit import SlidingWindowLimiter


class FakeClock:
    def __init__(self, t=1000.0):
        self.t = t

    def __call__(self):
        return self.t

    def advance(self, sec):
        self.t += sec


def test_admits_up_to_capacity_then_rejects():
    clock = FakeClock()
    limiter = SlidingWindowLimiter(max_requests=3, window_sec=60.0, clock=clock)

    assert [limiter.allow("1.2.3.4") for _ in range(4)] == [True, True, True, False]
    assert limiter.remaining("1.2.3.4") == 0
    # other clients are independent
    assert limiter.allow("5.6.7.8")


def test_window_slides():
    clock = FakeClock()
    limiter = SlidingWindowLimiter(max_requests=2, window_sec=10.0, clock=clock)

    assert limiter.allow("c")
    clock.advance(6)
    assert limiter.allow("c")
    assert not limiter.allow("c")

    clock.advance(4)   # first hit is now exactly window_sec old
    assert limiter.allow("c")
    assert not limiter.allow("c")

    clock.advance(10)
    assert limiter.remaining("c") == 2


def test_rejected_calls_do_not_count():
    clock = FakeClock()
    limiter = SlidingWindowLimiter(max_requests=1, window_sec=5.0, clock=clock)
    assert limiter.allow("c")
    for _ in range(5):
        assert not limiter.allow("c")
    clock.advance(5)
    assert limiter.allow("c")


def test_reset():
    limiter = SlidingWindowLimiter(max_requests=1, window_sec=60.0, clock=FakeClock())
    assert limiter.allow("a") and limiter.allow("b")
    limiter.reset("a")
    assert limiter.allow("a")
    assert not limiter.allow("b")
    limiter.reset()
    assert limiter.allow("b")


@pytest.mark.parametrize("kwargs", [{"max_requests": 0}, {"window_sec": 0}, {"window_sec": -1}])
def test_rejects_bad_configuration(kwargs):
    with pytest.raises(ValueError):
        SlidingWindowLimiter(**kwargs)


def test_threads_share_one_budget():
    limiter = SlidingWindowLimiter(max_requests=50, window_sec=60.0, clock=FakeClock())
    admitted = []
    lock = threading.Lock()

    def worker():
        for _ in range(20):
            ok = limiter.allow("shared")
            with lock:
                admitted.append(ok)

    threads = [threading.Thread(target=worker) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert admitted.count(True) == 50
    assert len(admitted) == 100
