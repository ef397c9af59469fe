"""Unit tests for the in-memory fixed-window rate limiter and its store."""

import threading
from unittest.mock import Mock

import pytest

from app.adapters.rate_limit.base import RateLimitDecision, RateLimitEntry
from app.adapters.rate_limit.in_memory import FixedWindowRateLimiter, InMemoryRateLimitStore

T0 = 1_700_000_000_000
MINUTE = 60_000
WINDOW = 5 * MINUTE


def _limiter(limit: int = 5, window_ms: int = WINDOW, **kwargs) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(limit=limit, window_ms=window_ms, **kwargs)


class _NeverSweepingStore(InMemoryRateLimitStore):
    def sweep(self, now: int) -> int:
        return 0


# ======================== Store ========================


def test_store_get_is_pure_lookup() -> None:
    store = InMemoryRateLimitStore()
    assert store.get("k") is None
    assert len(store) == 0

    entry = RateLimitEntry(count=2, reset_time=T0)
    store.set("k", entry)

    assert store.get("k") is entry
    assert store.get("k") is entry
    assert len(store) == 1


def test_store_set_overwrites() -> None:
    store = InMemoryRateLimitStore()
    store.set("k", RateLimitEntry(count=3, reset_time=T0))
    store.set("k", RateLimitEntry(count=1, reset_time=T0 + WINDOW))

    assert store.get("k") == RateLimitEntry(count=1, reset_time=T0 + WINDOW)
    assert len(store) == 1


def test_sweep_removes_only_entries_reset_before_now() -> None:
    store = InMemoryRateLimitStore()
    store.set("old", RateLimitEntry(count=1, reset_time=100))
    store.set("edge", RateLimitEntry(count=1, reset_time=200))
    store.set("fresh", RateLimitEntry(count=4, reset_time=300))

    removed = store.sweep(200)

    assert removed == 1
    assert "old" not in store
    assert store.get("edge") == RateLimitEntry(count=1, reset_time=200)
    assert store.get("fresh") == RateLimitEntry(count=4, reset_time=300)


def test_sweep_on_empty_store_is_noop() -> None:
    assert InMemoryRateLimitStore().sweep(T0) == 0


# ======================== Limiter ========================


def test_first_request_opens_window() -> None:
    limiter = _limiter()

    decision = limiter.decide("1.2.3.4", T0)

    assert decision == RateLimitDecision(allowed=True, limit=5, remaining=4, reset_time=T0 + WINDOW)
    assert limiter.store.get("1.2.3.4") == RateLimitEntry(count=1, reset_time=T0 + WINDOW)


def test_bounded_admission_within_window() -> None:
    limiter = _limiter(limit=3)

    allowed = [limiter.decide("k", T0 + i).allowed for i in range(10)]

    assert allowed == [True, True, True] + [False] * 7


def test_remaining_decreases_by_one_until_denied() -> None:
    limiter = _limiter()

    remaining = [limiter.decide("k", T0 + i).remaining for i in range(5)]
    denied = limiter.decide("k", T0 + 5)

    assert remaining == [4, 3, 2, 1, 0]
    assert denied.allowed is False
    assert denied.remaining == 0
    assert denied.reset_time == T0 + WINDOW


def test_denied_requests_are_not_counted() -> None:
    limiter = _limiter(limit=2)
    limiter.decide("k", T0)
    limiter.decide("k", T0)

    for _ in range(5):
        assert limiter.decide("k", T0 + 1).allowed is False

    assert limiter.store.get("k") == RateLimitEntry(count=2, reset_time=T0 + WINDOW)


def test_window_resets_after_window_elapses() -> None:
    limiter = _limiter(limit=1)

    assert limiter.decide("k", T0).allowed is True
    assert limiter.decide("k", T0 + 1).allowed is False

    fresh = limiter.decide("k", T0 + WINDOW + 1)
    assert fresh.allowed is True
    assert fresh.remaining == 0
    assert fresh.reset_time == T0 + 2 * WINDOW + 1


def test_request_at_exact_reset_time_is_still_in_window() -> None:
    limiter = _limiter(limit=1)
    limiter.decide("k", T0)

    assert limiter.decide("k", T0 + WINDOW).allowed is False
    assert limiter.decide("k", T0 + WINDOW + 1).allowed is True


def test_stale_entry_left_by_store_is_treated_as_absent() -> None:
    store = _NeverSweepingStore()
    store.set("k", RateLimitEntry(count=5, reset_time=T0 - 1))
    limiter = _limiter(store=store)

    decision = limiter.decide("k", T0)

    assert decision.allowed is True
    assert decision.remaining == 4
    assert store.get("k") == RateLimitEntry(count=1, reset_time=T0 + WINDOW)


def test_keys_are_isolated() -> None:
    limiter = _limiter(limit=1)

    assert limiter.decide("a", T0).allowed is True
    assert limiter.decide("a", T0).allowed is False

    assert limiter.decide("b", T0).allowed is True


def test_two_clients_exhaust_quota_independently() -> None:
    limiter = _limiter()

    seen_a = []
    seen_b = []
    for i in range(5):
        seen_a.append(limiter.decide("10.0.0.1", T0 + i).remaining)
        seen_b.append(limiter.decide("10.0.0.2", T0 + i).remaining)

    assert seen_a == [4, 3, 2, 1, 0]
    assert seen_b == [4, 3, 2, 1, 0]
    assert limiter.decide("10.0.0.1", T0 + 10).allowed is False
    assert limiter.decide("10.0.0.2", T0 + 10).allowed is False


def test_submission_scenario_five_per_five_minutes() -> None:
    limiter = _limiter()
    key = "1.2.3.4"

    remaining = [limiter.decide(key, T0 + m * MINUTE).remaining for m in range(5)]
    assert remaining == [4, 3, 2, 1, 0]

    at = T0 + int(4.5 * MINUTE)
    denied = limiter.decide(key, at)
    assert denied.allowed is False
    assert denied.retry_after_seconds(at) == 30

    fresh = limiter.decide(key, T0 + int(5.1 * MINUTE))
    assert fresh.allowed is True
    assert fresh.remaining == 4


def test_fixed_window_allows_burst_across_boundary() -> None:
    # Windows are fixed, not sliding: nine submissions can land within 2 ms.
    limiter = _limiter()
    limiter.decide("k", T0)

    late = [limiter.decide("k", T0 + WINDOW - 1).allowed for _ in range(4)]
    early = [limiter.decide("k", T0 + WINDOW + 1).allowed for _ in range(5)]

    assert late == [True] * 4
    assert early == [True] * 5
    assert limiter.decide("k", T0 + WINDOW + 1).allowed is False


def test_decide_sweeps_other_expired_keys() -> None:
    limiter = _limiter()
    for i in range(10):
        limiter.decide(f"client-{i}", T0)

    assert len(limiter.store) == 10

    limiter.decide("late", T0 + WINDOW + 1)

    assert len(limiter.store) == 1
    assert "late" in limiter.store


def test_decide_uses_clock_when_now_is_omitted() -> None:
    clock = Mock(return_value=T0)
    limiter = _limiter(limit=1, clock=clock)

    assert limiter.decide("k").allowed is True
    assert limiter.decide("k").allowed is False

    clock.return_value = T0 + WINDOW + 1
    assert limiter.decide("k").allowed is True
    assert clock.call_count == 3


def test_decisions_are_deterministic() -> None:
    calls = [("a", T0), ("a", T0 + 1), ("b", T0 + 2), ("a", T0 + 3), ("a", T0 + WINDOW + 5)]

    runs = []
    for _ in range(2):
        limiter = _limiter(limit=2)
        runs.append([limiter.decide(k, t) for k, t in calls])

    assert runs[0] == runs[1]
    assert [d.allowed for d in runs[0]] == [True, True, True, False, True]


def test_concurrent_requests_cannot_exceed_limit() -> None:
    limiter = _limiter(limit=5)
    workers = 32
    barrier = threading.Barrier(workers)
    results: list[bool] = []
    results_lock = threading.Lock()

    def _submit() -> None:
        barrier.wait()
        decision = limiter.decide("same-ip", T0)
        with results_lock:
            results.append(decision.allowed)

    threads = [threading.Thread(target=_submit) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 5
    assert results.count(False) == workers - 5
    assert limiter.store.get("same-ip").count == 5


def test_retry_after_rounds_up_and_never_negative() -> None:
    decision = RateLimitDecision(allowed=False, limit=5, remaining=0, reset_time=T0 + 1_001)

    assert decision.retry_after_seconds(T0) == 2
    assert decision.retry_after_seconds(T0 + 1_000) == 1
    assert decision.retry_after_seconds(T0 + 5_000) == 0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"limit": 0, "window_ms": 60_000},
        {"limit": 1, "window_ms": 0},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        FixedWindowRateLimiter(**kwargs)


def test_empty_key_is_rejected() -> None:
    with pytest.raises(ValueError):
        _limiter().decide("", T0)
