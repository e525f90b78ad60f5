"""Tests for the per-session rate limiter."""

import threading

from ledgerchat.ratelimit import RateLimiter


class _FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_admits_ten_then_rejects_eleventh() -> None:
    limiter = RateLimiter(clock=_FakeClock())
    assert all(limiter.admit("s1") for _ in range(10))
    assert limiter.admit("s1") is False
    assert limiter.admit("s1") is False


def test_window_expiry_resets_count() -> None:
    clock = _FakeClock()
    limiter = RateLimiter(max_requests=10, window_seconds=60, clock=clock)
    for _ in range(10):
        limiter.admit("s1")
    assert limiter.admit("s1") is False

    # Still inside the window at exactly reset_at
    clock.now += 60
    assert limiter.admit("s1") is False

    clock.now += 0.001
    assert limiter.admit("s1") is True
    # Fresh window: nine more fit
    assert all(limiter.admit("s1") for _ in range(9))
    assert limiter.admit("s1") is False


def test_sessions_are_isolated() -> None:
    limiter = RateLimiter(max_requests=2, clock=_FakeClock())
    assert limiter.admit("a")
    assert limiter.admit("a")
    assert not limiter.admit("a")
    assert limiter.admit("b")


def test_missing_session_shares_anonymous_bucket() -> None:
    limiter = RateLimiter(max_requests=2, clock=_FakeClock())
    assert limiter.admit(None)
    assert limiter.admit("")
    assert not limiter.admit(None)
    assert not limiter.admit("anonymous")


def test_prune_drops_only_expired_entries() -> None:
    clock = _FakeClock()
    limiter = RateLimiter(window_seconds=60, clock=clock)
    limiter.admit("old")
    clock.now += 30
    limiter.admit("new")
    clock.now += 31

    assert limiter.prune() == 1
    assert len(limiter) == 1


def test_reset_forgets_everything() -> None:
    limiter = RateLimiter(max_requests=1, clock=_FakeClock())
    limiter.admit("s1")
    assert not limiter.admit("s1")
    limiter.reset()
    assert len(limiter) == 0
    assert limiter.admit("s1")


def test_len_waits_for_lock() -> None:
    limiter = RateLimiter(clock=_FakeClock())
    limiter.admit("s1")
    sizes = []

    with limiter._lock:
        reader = threading.Thread(target=lambda: sizes.append(len(limiter)))
        reader.start()
        reader.join(timeout=0.05)
        assert reader.is_alive()
        assert sizes == []

    reader.join(timeout=1)
    assert sizes == [1]


def test_concurrent_admissions_never_exceed_limit() -> None:
    limiter = RateLimiter(max_requests=10, clock=_FakeClock())
    admitted = []
    lock = threading.Lock()

    def worker() -> None:
        for _ in range(10):
            ok = limiter.admit("shared")
            with lock:
                admitted.append(ok)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert admitted.count(True) == 10
    assert len(admitted) == 80
